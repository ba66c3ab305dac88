"""Data Gateway abstractions and backends."""

from gateway.base import DataGateway
from gateway.firebase import FirebaseRestGateway
from gateway.memory import InMemoryGateway
from shared.config import Settings


def build_gateway(settings: Settings) -> DataGateway:
    """Create the gateway selected by configuration."""
    if settings.gateway_backend == "firebase":
        return FirebaseRestGateway(
            database_url=settings.firebase_database_url,
            auth_token=settings.firebase_auth_token,
            timeout_seconds=settings.firebase_timeout_seconds,
        )
    return InMemoryGateway()


__all__ = ["DataGateway", "FirebaseRestGateway", "InMemoryGateway", "build_gateway"]
