from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from api.server import create_app
from conversation.manager import ConversationManager
from gateway.memory import InMemoryGateway
from orchestrator.fallback import HELP_TEXT
from orchestrator.orchestrator import ChatBotService
from shared.config import Settings
from shared.errors import GatewayError

STORE = {
    "accounts_receivable": {
        "c1": {"entries": {"e1": {"amount": 40, "status": "pending", "clientName": "Juan"}}},
    }
}


def _client(tmp_path: Path, seed: bool = True, gateway: InMemoryGateway | None = None) -> TestClient:
    settings = Settings(seed_default_intents=seed, chat_db_path=str(tmp_path / "api_chat.db"))
    app = create_app(
        settings=settings,
        service=ChatBotService(gateway or InMemoryGateway(STORE)),
        conversation=ConversationManager(db_path=settings.chat_db_path),
    )
    return TestClient(app)


def test_health(tmp_path: Path):
    with _client(tmp_path) as client:
        assert client.get("/health").json() == {"status": "ok"}


def test_chat_records_transcript_and_analytics(tmp_path: Path):
    with _client(tmp_path) as client:
        first = client.post("/chat", json={"session_id": "s1", "message": "mostrar deudores"})
        assert first.status_code == 200
        body = first.json()
        assert body["session_id"] == "s1"
        assert body["response"]["type"] == "data"
        assert body["response"]["intent"] == "Mostrar Deudores"
        assert body["response"]["data"][0]["clientId"] == "c1"

        second = client.post("/chat", json={"session_id": "s1", "message": "ayuda"})
        assert second.json()["response"]["message"] == HELP_TEXT

        messages = client.get("/sessions/s1/messages").json()
        assert [m["sender"] for m in messages] == ["user", "bot", "user", "bot"]
        assert messages[1]["intent"] == "Mostrar Deudores"

        analytics = client.get("/sessions/s1/analytics").json()
        assert analytics["total_messages"] == 4
        assert analytics["success_rate"] == 100.0


def test_chat_assigns_session_id(tmp_path: Path):
    with _client(tmp_path) as client:
        body = client.post("/chat", json={"message": "hola"}).json()
        assert body["session_id"]
        assert body["response"]["type"] == "normal"


def test_intents_are_seeded_on_startup_and_replaceable(tmp_path: Path):
    with _client(tmp_path) as client:
        intents = client.get("/intents").json()
        assert len(intents) == 7

        custom = {"id": "saludo", "name": "Saludo", "keywords": ["hola"], "action": "get_products"}
        assert client.put("/intents", json=[custom]).json() == {"saved": 1}
        assert [i["id"] for i in client.get("/intents").json()] == ["saludo"]

        reply = client.post("/chat", json={"message": "hola"}).json()
        assert reply["response"]["intent"] == "Saludo"

        assert len(client.post("/intents/seed").json()) == 7


def test_without_seeding_every_message_falls_back(tmp_path: Path):
    with _client(tmp_path, seed=False) as client:
        assert client.get("/intents").json() == []
        reply = client.post("/chat", json={"message": "mostrar deudores"}).json()
        assert reply["response"]["type"] == "normal"


def test_single_intent_admin_edits(tmp_path: Path):
    with _client(tmp_path) as client:
        saludo = {"id": "ignored", "name": "Saludo", "keywords": ["hola", "hola"], "action": "get_products"}
        intents = client.put("/intents/saludo", json=saludo).json()
        assert len(intents) == 8
        assert intents[-1]["id"] == "saludo"
        assert intents[-1]["keywords"] == ["hola"]

        toggled = client.patch("/intents/saludo/enabled", json={"enabled": False}).json()
        assert {i["id"]: i["enabled"] for i in toggled}["saludo"] is False
        assert client.post("/chat", json={"message": "hola"}).json()["response"]["type"] == "normal"

        remaining = client.delete("/intents/saludo").json()
        assert "saludo" not in [i["id"] for i in remaining]
        assert len(client.get("/intents").json()) == 7


def test_single_intent_edit_errors(tmp_path: Path):
    with _client(tmp_path) as client:
        blank = {"id": "x", "name": " ", "keywords": ["hola"], "action": "get_products"}
        invalid = client.put("/intents/x", json=blank)
        assert invalid.status_code == 422
        assert invalid.json()["detail"] == "El nombre del intent es requerido"

        assert client.delete("/intents/nope").status_code == 404
        assert client.patch("/intents/nope/enabled", json={"enabled": True}).status_code == 404


def test_single_intent_edit_during_store_outage(tmp_path: Path):
    gateway = InMemoryGateway(STORE)
    gateway.get = AsyncMock(side_effect=GatewayError("offline"))
    with _client(tmp_path, seed=False, gateway=gateway) as client:
        intent = {"id": "saludo", "name": "Saludo", "keywords": ["hola"], "action": "get_products"}
        response = client.put("/intents/saludo", json=intent)
        assert response.status_code == 503
        assert response.json()["detail"] == "offline"
