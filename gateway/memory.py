"""
In-memory Data Gateway.

Deterministic nested-dict tree with the same read/write semantics as the
remote store: empty containers vanish, reads and writes are deep copies.
"""

from __future__ import annotations

import copy
from typing import Any

from gateway.base import DataGateway, PushIdGenerator, split_path, with_push_id


def _prune(value: Any) -> Any:
    """Drop None leaves and empty containers, like the remote store does."""
    if isinstance(value, dict):
        pruned = {str(k): _prune(v) for k, v in value.items()}
        pruned = {k: v for k, v in pruned.items() if v is not None}
        return pruned or None
    if isinstance(value, list):
        pruned_list = [_prune(v) for v in value]
        if all(v is None for v in pruned_list):
            return None
        return pruned_list
    return value


class InMemoryGateway(DataGateway):
    """Dict-backed gateway for tests, demos and offline runs."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._root: dict[str, Any] = _prune(copy.deepcopy(initial or {})) or {}
        self._next_id = PushIdGenerator()

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._root)

    async def get(self, path: str) -> Any | None:
        node: Any = self._root
        for segment in split_path(path):
            if isinstance(node, dict):
                node = node.get(segment)
            elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
                node = node[int(segment)]
            else:
                return None
            if node is None:
                return None
        return copy.deepcopy(node)

    async def set(self, path: str, value: Any) -> None:
        self._write(path, copy.deepcopy(value))

    async def push(self, path: str, value: Any) -> str:
        key = self._next_id()
        segments = split_path(path) + [key]
        self._write("/".join(segments), copy.deepcopy(with_push_id(value, key)))
        return key

    async def update(self, updates: dict[str, Any]) -> None:
        for path, value in updates.items():
            self._write(path, copy.deepcopy(value))

    async def remove(self, path: str) -> None:
        self._write(path, None)

    def _write(self, path: str, value: Any) -> None:
        segments = split_path(path)
        value = _prune(value)
        if not segments:
            self._root = value if isinstance(value, dict) else {}
            return

        node = self._root
        parents: list[tuple[dict[str, Any], str]] = []
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                if value is None:
                    return
                child = {}
                node[segment] = child
            parents.append((node, segment))
            node = child

        leaf = segments[-1]
        if value is None:
            node.pop(leaf, None)
        else:
            node[leaf] = value

        # Collapse parents left empty by a delete.
        for parent, segment in reversed(parents):
            if parent.get(segment):
                break
            parent.pop(segment, None)
