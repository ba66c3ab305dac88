"""
Orchestrator — the chat engine's single entry point.

Responsibility:
- Detect intent, run its action, render its template
- Delegate unmatched messages to the Fallback Handler
- Convert any failure into a displayable ChatResponse

Prohibitions:
- No matching, query or formatting logic of its own
- No conversation state between calls
- Never raises from process_message
"""

import logging
import uuid

from execution.actions import ActionExecutor
from gateway.base import DataGateway
from intent.matcher import detect_intent
from observability.logger import Observability
from orchestrator.fallback import FallbackHandler
from registry.intent_registry import IntentRegistry
from shared.config import DataPaths
from shared.models import ChatMessage, ChatResponse, Intent, result_payload
from shared.response_formatter import generate_response

logger = logging.getLogger(__name__)

APOLOGY_TEXT = (
    "Lo siento, he tenido un problema procesando tu consulta. "
    "Por favor intenta de nuevo o contacta al administrador."
)

WELCOME_TEXT = (
    "¡Hola! Soy tu asistente virtual de Maracuyá Villa Gratia. "
    "Puedo ayudarte con consultas sobre clientes, deudas, ventas y productos. "
    "¿En qué puedo ayudarte?"
)


class ChatBotService:
    """Composes registry, matcher, executor, renderer and fallback."""

    def __init__(
        self,
        gateway: DataGateway,
        paths: DataPaths | None = None,
        executor: ActionExecutor | None = None,
        fallback: FallbackHandler | None = None,
        observability: Observability | None = None,
    ):
        self.gateway = gateway
        self.paths = paths or DataPaths()
        self.registry = IntentRegistry(gateway, path=self.paths.intents)
        self.executor = executor or ActionExecutor(gateway, paths=self.paths)
        self.fallback = fallback or FallbackHandler()
        self.obs = observability or Observability()

    async def process_message(self, message: str, intents: list[Intent]) -> ChatResponse:
        turn = self.obs.new_turn()
        try:
            with turn.measure("process_message", {"message_length": len(message or "")}):
                return await self._process(message, intents, turn)
        except Exception:
            logger.exception("Chat turn failed")
            return ChatResponse(message=APOLOGY_TEXT, type="error")

    async def _process(self, message: str, intents: list[Intent], turn: Observability) -> ChatResponse:
        intent = detect_intent(message, intents)
        if intent is None:
            turn.log_event("intent_not_matched", {"intents_available": len(intents)})
            return await self.fallback.handle_fallback(message)

        turn.log_event("intent_matched", {"intent": intent.id, "action": intent.action})
        result = await self.executor.execute_action(intent.action, message)
        text = generate_response(intent.response_template, result, message)

        if result.error:
            turn.log_event("action_failed", {"action": intent.action, "error": result.error}, level="WARNING")
            return ChatResponse(message=text, type="error", intent=intent.name)

        data = result_payload(result.data) if result.data is not None else None
        return ChatResponse(message=text, type="data", data=data, intent=intent.name)

    # ─── Intent registry passthrough ───────────────────────────

    async def load_intents(self) -> list[Intent]:
        return await self.registry.load_intents()

    async def save_intents(self, intents: list[Intent]) -> None:
        await self.registry.save_intents(intents)

    async def seed_default_intents(self) -> list[Intent]:
        return await self.registry.seed_default_intents()

    async def load_or_seed_intents(self) -> list[Intent]:
        return await self.registry.load_or_seed_intents()

    # ─── Transcript helpers ────────────────────────────────────

    @staticmethod
    def welcome_message() -> ChatMessage:
        return ChatMessage(id="welcome", text=WELCOME_TEXT, sender="bot", type="welcome")

    @staticmethod
    def to_user_message(text: str) -> ChatMessage:
        return ChatMessage(id=uuid.uuid4().hex, text=text, sender="user")

    @staticmethod
    def to_bot_message(response: ChatResponse) -> ChatMessage:
        return ChatMessage(
            id=uuid.uuid4().hex,
            text=response.message,
            sender="bot",
            type=response.type,
            data=response.data,
            intent=response.intent,
        )

    async def close(self) -> None:
        await self.gateway.close()
