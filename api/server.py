"""
HTTP API for the POS chat assistant.

Endpoints:
- GET  /health
- POST /chat
- GET  /intents, PUT /intents, POST /intents/seed
- PUT  /intents/{intent_id}, DELETE /intents/{intent_id}, PATCH /intents/{intent_id}/enabled
- GET  /sessions/{session_id}/messages
- GET  /sessions/{session_id}/analytics
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from conversation.analytics import ChatAnalytics, compute_chat_metrics
from conversation.manager import ConversationManager
from gateway import build_gateway
from orchestrator.orchestrator import ChatBotService
from shared.config import Settings
from shared.errors import GatewayError, IntentNotFoundError, IntentValidationError
from shared.models import ChatMessage, ChatResponse, Intent

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    message: str
    session_id: str | None = None


class ChatReply(BaseModel):
    session_id: str
    response: ChatResponse


class EnabledToggle(BaseModel):
    enabled: bool


def create_app(
    settings: Settings | None = None,
    service: ChatBotService | None = None,
    conversation: ConversationManager | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        chat_service = service or ChatBotService(build_gateway(settings), paths=settings.paths)
        chat_log = conversation or ConversationManager(db_path=settings.chat_db_path)
        if settings.seed_default_intents:
            await chat_service.load_or_seed_intents()
        _app.state.service = chat_service
        _app.state.conversation = chat_log
        yield
        chat_log.close()
        await chat_service.close()

    app = FastAPI(
        title="POS Chat Assistant API",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/chat")
    async def chat(body: ChatRequest, request: Request) -> ChatReply:
        chat_service: ChatBotService = request.app.state.service
        chat_log: ConversationManager = request.app.state.conversation
        session_id = body.session_id or uuid.uuid4().hex

        intents = await chat_service.load_intents()
        chat_log.save_message(session_id, chat_service.to_user_message(body.message))
        response = await chat_service.process_message(body.message, intents)
        chat_log.save_message(session_id, chat_service.to_bot_message(response))
        return ChatReply(session_id=session_id, response=response)

    @app.get("/intents")
    async def list_intents(request: Request) -> list[Intent]:
        return await request.app.state.service.load_intents()

    @app.put("/intents")
    async def replace_intents(intents: list[Intent], request: Request) -> dict[str, Any]:
        await request.app.state.service.save_intents(intents)
        return {"saved": len(intents)}

    @app.post("/intents/seed")
    async def seed_intents(request: Request) -> list[Intent]:
        return await request.app.state.service.seed_default_intents()

    @app.put("/intents/{intent_id}")
    async def upsert_intent(intent_id: str, intent: Intent, request: Request) -> list[Intent]:
        return await request.app.state.service.registry.upsert_intent(intent.model_copy(update={"id": intent_id}))

    @app.delete("/intents/{intent_id}")
    async def delete_intent(intent_id: str, request: Request) -> list[Intent]:
        return await request.app.state.service.registry.delete_intent(intent_id)

    @app.patch("/intents/{intent_id}/enabled")
    async def toggle_intent(intent_id: str, body: EnabledToggle, request: Request) -> list[Intent]:
        return await request.app.state.service.registry.set_intent_enabled(intent_id, body.enabled)

    @app.exception_handler(IntentValidationError)
    async def invalid_intent(_request: Request, exc: IntentValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(IntentNotFoundError)
    async def missing_intent(_request: Request, exc: IntentNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(GatewayError)
    async def store_unavailable(_request: Request, exc: GatewayError) -> JSONResponse:
        logger.warning("Store unavailable during admin request: %s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/sessions/{session_id}/messages")
    def session_messages(session_id: str, request: Request) -> list[ChatMessage]:
        return request.app.state.conversation.get_history(session_id)

    @app.get("/sessions/{session_id}/analytics")
    def session_analytics(session_id: str, request: Request) -> ChatAnalytics:
        return compute_chat_metrics(request.app.state.conversation.get_history(session_id))

    return app
