"""
Observability Layer — structured chat events.

Responsibility:
- Log conversation events as one JSON object per line
- Time each turn (intent detection, action, rendering)
- Carry session_id / turn_id on every event
"""

import json
import logging
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("observability")


class Observability:
    """Structured event logger for one chat session."""

    def __init__(self, session_id: str | None = None):
        self.session_id = session_id or str(uuid.uuid4())
        self.turn_id = str(uuid.uuid4())

    def new_turn(self) -> "Observability":
        """Same session, fresh turn_id."""
        return Observability(self.session_id)

    def log_event(self, event_type: str, payload: dict[str, Any], level: str = "INFO") -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": self.session_id,
            "turn_id": self.turn_id,
            "event": event_type,
            "level": level,
            **payload,
        }
        log_method = getattr(logger, level.lower(), logger.info)
        log_method(json.dumps(entry, ensure_ascii=False, default=str))

    @contextmanager
    def measure(self, operation: str, metadata: dict[str, Any] | None = None):
        """Log `chat_metric` with duration_ms when the block exits; re-raises errors."""
        start_time = time.perf_counter()
        error: str | None = None
        try:
            yield
        except Exception as e:
            error = str(e)
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.log_event(
                "chat_metric",
                {
                    "operation": operation,
                    "duration_ms": round(duration_ms, 2),
                    "success": error is None,
                    "error": error,
                    **(metadata or {}),
                },
            )
