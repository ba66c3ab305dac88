"""
Intent Registry — persisted intent definitions.

Responsibility:
- Read the flat {id: Intent} map from the Data Gateway
- Write it back as a full overwrite (last writer wins)
- Seed the built-in defaults when setup code asks for it
- Validated admin edits (create/update, delete, enable/disable)

Prohibitions:
- Reads never write (seeding is an explicit call)
- No matching or action logic
"""

import logging
import time
from typing import Any

from pydantic import ValidationError

from gateway.base import DataGateway
from registry.defaults import default_intents
from shared.errors import GatewayError, IntentNotFoundError, IntentValidationError
from shared.models import Intent, utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_INTENTS_PATH = "chatbot_intents"


class IntentRegistry:
    """Loads and stores intents under a single store path."""

    def __init__(self, gateway: DataGateway, path: str = DEFAULT_INTENTS_PATH):
        self.gateway = gateway
        self.path = path

    async def load_intents(self) -> list[Intent]:
        """
        Return the stored intents, or [] when none are stored.
        A backend failure falls back to the built-in set without writing it.
        """
        try:
            return await self._read_stored()
        except GatewayError:
            logger.exception("Failed to load intents from '%s'; using built-in defaults", self.path)
            return default_intents()

    async def save_intents(self, intents: list[Intent]) -> None:
        """Overwrite the stored map with `intents`, keyed by id."""
        payload = {intent.id: intent.model_dump() for intent in intents}
        await self.gateway.set(self.path, payload)
        logger.info("Saved %d intents to '%s'", len(payload), self.path)

    async def seed_default_intents(self) -> list[Intent]:
        intents = default_intents()
        await self.save_intents(intents)
        logger.info("Seeded %d default intents", len(intents))
        return intents

    async def load_or_seed_intents(self) -> list[Intent]:
        """Setup helper: load, seeding the defaults first when the store is empty."""
        intents = await self.load_intents()
        if intents:
            return intents
        return await self.seed_default_intents()

    # ─── Admin edits ───────────────────────────────────────────
    # Edits read through _read_stored: a failed read aborts the edit.

    @staticmethod
    def new_intent() -> Intent:
        """Blank intent ready to be filled in by an administrator."""
        now = utc_now_iso()
        return Intent(
            id=f"intent_{int(time.time() * 1000)}",
            name="",
            description="",
            keywords=[],
            action="custom",
            response_template="",
            enabled=True,
            examples=[],
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def validate_intent(intent: Intent) -> None:
        if not intent.name.strip():
            raise IntentValidationError("El nombre del intent es requerido")
        if not [kw for kw in intent.keywords if kw.strip()]:
            raise IntentValidationError("Debe agregar al menos una palabra clave")

    @staticmethod
    def clean_keywords(keywords: list[str]) -> list[str]:
        """Trimmed, non-blank keywords without duplicates, first occurrence kept."""
        cleaned: list[str] = []
        for keyword in keywords:
            keyword = keyword.strip()
            if keyword and keyword not in cleaned:
                cleaned.append(keyword)
        return cleaned

    async def upsert_intent(self, intent: Intent) -> list[Intent]:
        """Create or replace one intent; returns the full updated list."""
        self.validate_intent(intent)
        intent = intent.model_copy(update={"keywords": self.clean_keywords(intent.keywords)})
        intents = await self._read_stored()
        if any(existing.id == intent.id for existing in intents):
            stamped = intent.model_copy(update={"updated_at": utc_now_iso()})
            updated = [stamped if existing.id == intent.id else existing for existing in intents]
        else:
            updated = intents + [intent]
        await self.save_intents(updated)
        return updated

    async def delete_intent(self, intent_id: str) -> list[Intent]:
        intents = await self._read_stored()
        self._require(intents, intent_id)
        updated = [intent for intent in intents if intent.id != intent_id]
        await self.save_intents(updated)
        return updated

    async def set_intent_enabled(self, intent_id: str, enabled: bool) -> list[Intent]:
        intents = await self._read_stored()
        self._require(intents, intent_id)
        updated = [
            intent.model_copy(update={"enabled": enabled, "updated_at": utc_now_iso()})
            if intent.id == intent_id
            else intent
            for intent in intents
        ]
        await self.save_intents(updated)
        return updated

    @staticmethod
    def _require(intents: list[Intent], intent_id: str) -> None:
        if not any(intent.id == intent_id for intent in intents):
            raise IntentNotFoundError(f"Intent '{intent_id}' no existe")

    async def _read_stored(self) -> list[Intent]:
        """Stored intents; GatewayError propagates."""
        raw = await self.gateway.get(self.path)
        if not raw:
            return []
        return self._parse_map(raw)

    def _parse_map(self, raw: Any) -> list[Intent]:
        items = raw.items() if isinstance(raw, dict) else enumerate(raw if isinstance(raw, list) else [])
        intents: list[Intent] = []
        for key, value in items:
            if not isinstance(value, dict):
                continue
            payload = dict(value)
            payload.setdefault("id", str(key))
            try:
                intents.append(Intent(**payload))
            except ValidationError as e:
                logger.warning("Skipping invalid intent '%s' at '%s': %s", key, self.path, e)
        return intents
