"""
Data Gateway abstraction.

Design goals:
- Narrow async contract (get/set/push/update/remove) over slash-separated paths
- JSON-compatible values only; absent paths read as None
- Backends are interchangeable (in-memory for tests, Firebase RTDB REST in production)
"""

from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from typing import Any

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
INVALID_KEY_CHARS = frozenset(".#$[]")


def split_path(path: str) -> list[str]:
    """Split a store path into its non-empty segments."""
    return [segment for segment in (path or "").strip().split("/") if segment]


def normalize_path(path: str) -> str:
    return "/".join(split_path(path))


def is_valid_key(key: str) -> bool:
    """True if `key` can be used as a single path segment."""
    return bool(key) and "/" not in key and not any(ch in INVALID_KEY_CHARS for ch in key)


class PushIdGenerator:
    """Chronologically ordered 20-char keys, same alphabet as RTDB push ids."""

    def __init__(self) -> None:
        self._last_ms = 0
        self._last_random = [0] * 12

    def __call__(self) -> str:
        now_ms = int(time.time() * 1000)
        duplicate = now_ms == self._last_ms
        self._last_ms = now_ms

        ts_chars = []
        value = now_ms
        for _ in range(8):
            ts_chars.append(PUSH_CHARS[value % 64])
            value //= 64
        prefix = "".join(reversed(ts_chars))

        if not duplicate:
            self._last_random = [random.randrange(64) for _ in range(12)]
        else:
            # Same millisecond: bump the random suffix so ordering stays strict.
            idx = 11
            while idx >= 0 and self._last_random[idx] == 63:
                self._last_random[idx] = 0
                idx -= 1
            if idx >= 0:
                self._last_random[idx] += 1

        return prefix + "".join(PUSH_CHARS[i] for i in self._last_random)


def with_push_id(value: Any, key: str) -> Any:
    """Add `id` to dict payloads that do not carry one."""
    if isinstance(value, dict) and "id" not in value:
        return {**value, "id": key}
    return value


class DataGateway(ABC):
    """Async key-value document store used by the engine."""

    @abstractmethod
    async def get(self, path: str) -> Any | None:
        """Read the value at `path`; None when absent."""

    @abstractmethod
    async def set(self, path: str, value: Any) -> None:
        """Replace the value at `path`."""

    @abstractmethod
    async def push(self, path: str, value: Any) -> str:
        """Append `value` under a fresh key at `path` and return the key."""

    @abstractmethod
    async def update(self, updates: dict[str, Any]) -> None:
        """Apply a multi-path fan-out write ({path: value}); None values delete."""

    @abstractmethod
    async def remove(self, path: str) -> None:
        """Delete the value at `path`."""

    async def close(self) -> None:
        """Release backend resources."""
        return None
