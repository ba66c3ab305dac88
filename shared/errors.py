"""Exception types raised by the chat engine."""


class ChatEngineError(Exception):
    """Base class for engine errors."""


class GatewayError(ChatEngineError):
    """The Data Gateway could not complete a read or write."""

    def __init__(self, message: str, path: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class IntentValidationError(ChatEngineError):
    """An intent edit was rejected before it reached the store."""


class IntentNotFoundError(ChatEngineError):
    """An admin edit named an intent id that is not stored."""
