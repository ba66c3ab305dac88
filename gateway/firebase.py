"""
Firebase Realtime Database gateway — REST transport.

Responsibility:
- Map the Data Gateway contract onto RTDB REST verbs
  (GET / PUT / PATCH / DELETE on `<base>/<path>.json`)
- Attach the optional `auth` token to every request
- Translate transport and HTTP failures into GatewayError

Performance:
- One persistent AsyncClient with connection pooling
"""

import logging
from typing import Any

import httpx

from gateway.base import DataGateway, PushIdGenerator, normalize_path, with_push_id
from shared.errors import GatewayError

logger = logging.getLogger(__name__)


class FirebaseRestGateway(DataGateway):
    """Data Gateway backed by the RTDB REST API."""

    def __init__(
        self,
        database_url: str,
        auth_token: str = "",
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not database_url.strip():
            raise ValueError("FIREBASE_DATABASE_URL is required for the firebase gateway.")
        self.database_url = database_url.strip().rstrip("/")
        self.auth_token = auth_token.strip()
        self._next_id = PushIdGenerator()
        self._client = httpx.AsyncClient(
            base_url=self.database_url,
            timeout=httpx.Timeout(timeout_seconds),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            transport=transport,
        )

    async def get(self, path: str) -> Any | None:
        response = await self._request("GET", path)
        return response.json()

    async def set(self, path: str, value: Any) -> None:
        await self._request("PUT", path, json=value)

    async def push(self, path: str, value: Any) -> str:
        key = self._next_id()
        child = f"{normalize_path(path)}/{key}" if normalize_path(path) else key
        await self._request("PUT", child, json=with_push_id(value, key))
        return key

    async def update(self, updates: dict[str, Any]) -> None:
        if not updates:
            return
        payload = {normalize_path(path): value for path, value in updates.items()}
        await self._request("PATCH", "", json=payload)

    async def remove(self, path: str) -> None:
        await self._request("DELETE", path)

    async def close(self) -> None:
        await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"/{normalize_path(path)}.json"

    async def _request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        params = {"auth": self.auth_token} if self.auth_token else None
        kwargs: dict[str, Any] = {"params": params}
        if method in {"PUT", "PATCH"}:
            kwargs["json"] = json
        try:
            response = await self._client.request(method, self._url(path), **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("RTDB %s %s failed with HTTP %d", method, path or "/", status)
            raise GatewayError(
                f"RTDB {method} '{path or '/'}' failed with HTTP {status}",
                path=path,
                status_code=status,
            ) from e
        except httpx.RequestError as e:
            logger.warning("RTDB %s %s transport error: %s", method, path or "/", e)
            raise GatewayError(f"RTDB {method} '{path or '/'}' transport error: {e}", path=path) from e
