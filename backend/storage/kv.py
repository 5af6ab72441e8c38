"""Key-value store interface used by the scheduling services."""
from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Protocol


class KVStoreProtocol(Protocol):
    """Protocol describing the key-value substrate.

    Values are JSON-compatible dicts. There are no transactions: each call is
    one independent read or write and the last writer wins.
    """

    def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    def set(self, key: str, value: Dict[str, Any]) -> None: ...

    def delete(self, key: str) -> None: ...

    def get_by_prefix(self, prefix: str) -> List[Dict[str, Any]]: ...


class InMemoryKVStore:
    """Dict-backed store for development and tests.

    Values are deep-copied on the way in and out so callers cannot mutate
    stored records by accident.
    """

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def get_by_prefix(self, prefix: str) -> List[Dict[str, Any]]:
        return [copy.deepcopy(v) for k, v in sorted(self._data.items()) if k.startswith(prefix)]


__all__ = ["KVStoreProtocol", "InMemoryKVStore"]
