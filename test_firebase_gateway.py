from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from gateway.firebase import FirebaseRestGateway
from shared.errors import GatewayError

DB_URL = "https://pos-demo.firebaseio.com"


def _gateway(handler, auth_token: str = "") -> FirebaseRestGateway:
    return FirebaseRestGateway(DB_URL, auth_token=auth_token, transport=httpx.MockTransport(handler))


def test_get_reads_json_and_passes_auth():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"p1": {"name": "Pan"}})

    async def _run() -> None:
        gateway = _gateway(handler, auth_token="secret")
        try:
            assert await gateway.get("/products/") == {"p1": {"name": "Pan"}}
        finally:
            await gateway.close()

    asyncio.run(_run())

    assert seen[0].method == "GET"
    assert seen[0].url.path == "/products.json"
    assert seen[0].url.params["auth"] == "secret"


def test_absent_path_reads_none():
    async def _run() -> None:
        gateway = _gateway(lambda request: httpx.Response(200, content=b"null"))
        try:
            assert await gateway.get("clients/nobody") is None
        finally:
            await gateway.close()

    asyncio.run(_run())


def test_set_push_update_remove_verbs():
    seen: list[tuple[str, str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        seen.append((request.method, request.url.path, body))
        return httpx.Response(200, json=body)

    async def _run() -> str:
        gateway = _gateway(handler)
        try:
            await gateway.set("chatbot_intents", {"a": {"name": "A"}})
            key = await gateway.push("sales", {"total": 5})
            await gateway.update({"/a/x": 1, "b": None})
            await gateway.remove("sales/old")
            return key
        finally:
            await gateway.close()

    key = asyncio.run(_run())

    assert seen[0] == ("PUT", "/chatbot_intents.json", {"a": {"name": "A"}})
    assert seen[1] == ("PUT", f"/sales/{key}.json", {"total": 5, "id": key})
    assert seen[2] == ("PATCH", "/.json", {"a/x": 1, "b": None})
    assert seen[3] == ("DELETE", "/sales/old.json", None)
    assert "auth" not in str(seen)


def test_http_error_becomes_gateway_error():
    async def _run() -> None:
        gateway = _gateway(lambda request: httpx.Response(401, json={"error": "Permission denied"}))
        try:
            with pytest.raises(GatewayError) as exc_info:
                await gateway.get("clients")
        finally:
            await gateway.close()
        assert exc_info.value.status_code == 401
        assert exc_info.value.path == "clients"

    asyncio.run(_run())


def test_transport_error_becomes_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def _run() -> None:
        gateway = _gateway(handler)
        try:
            with pytest.raises(GatewayError, match="transport error"):
                await gateway.get("clients")
        finally:
            await gateway.close()

    asyncio.run(_run())


def test_database_url_is_required():
    with pytest.raises(ValueError):
        FirebaseRestGateway("   ")
