"""
Runtime configuration — environment driven.

Reads process env (and a local .env, if present) once via Settings.from_env().
Data paths mirror the store layout used by the POS front-end.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return float(raw)


class DataPaths(BaseModel):
    """Store paths consulted by the engine."""
    model_config = {"frozen": True}

    intents: str = "chatbot_intents"
    clients: str = "clients"
    accounts_receivable: str = "accounts_receivable"
    sales: str = "sales"
    products: str = "products"


class Settings(BaseModel):
    model_config = {"frozen": True}

    gateway_backend: str = Field(default="memory", description="'memory' or 'firebase'")
    firebase_database_url: str = ""
    firebase_auth_token: str = ""
    firebase_timeout_seconds: float | None = None
    chat_db_path: str = "chat.db"
    seed_default_intents: bool = True
    api_host: str = "127.0.0.1"
    api_port: int = 8080
    paths: DataPaths = Field(default_factory=DataPaths)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(override=False)
        backend = os.getenv("CHAT_GATEWAY_BACKEND", "").strip().lower()
        database_url = os.getenv("FIREBASE_DATABASE_URL", "").strip()
        if backend not in {"memory", "firebase"}:
            backend = "firebase" if database_url else "memory"

        defaults = DataPaths()
        paths = DataPaths(
            intents=os.getenv("CHAT_INTENTS_PATH", defaults.intents).strip() or defaults.intents,
            clients=os.getenv("CHAT_CLIENTS_PATH", defaults.clients).strip() or defaults.clients,
            accounts_receivable=os.getenv("CHAT_AR_PATH", defaults.accounts_receivable).strip()
            or defaults.accounts_receivable,
            sales=os.getenv("CHAT_SALES_PATH", defaults.sales).strip() or defaults.sales,
            products=os.getenv("CHAT_PRODUCTS_PATH", defaults.products).strip() or defaults.products,
        )
        return cls(
            gateway_backend=backend,
            firebase_database_url=database_url,
            firebase_auth_token=os.getenv("FIREBASE_AUTH_TOKEN", "").strip(),
            firebase_timeout_seconds=_env_optional_float("FIREBASE_TIMEOUT_SECONDS"),
            chat_db_path=os.getenv("CHAT_DB_PATH", "chat.db").strip() or "chat.db",
            seed_default_intents=_env_flag("CHAT_SEED_DEFAULT_INTENTS", "true"),
            api_host=os.getenv("API_HOST", "127.0.0.1").strip() or "127.0.0.1",
            api_port=int(os.getenv("API_PORT", "8080")),
            paths=paths,
        )
