"""
Supabase-backed key-value store.

This adapter implements KVStoreProtocol on top of a single Postgres table with
two columns, `key text primary key` and `value jsonb`, accessed through the
PostgREST query builder of a provided Supabase client. It is duck-typed to
avoid a hard dependency during testing. The client is expected to expose
`.table(name)` returning a builder that offers select/upsert/delete, the
`eq`/`like` filters, `order`, `limit`, `range` and `execute()`.

Security:
- The caller must initialize the client with the Service Role key; the table
  is not exposed to end users.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .kv import KVStoreProtocol

logger = logging.getLogger("tutorbook.storage")

# PostgREST caps a single response at 1000 rows by default.
PAGE_SIZE = 1000


def _escape_like(prefix: str) -> str:
    return prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SupabaseKVStore(KVStoreProtocol):
    """Key-value store using a supabase client for table operations."""

    def __init__(self, client: Any, *, table: str = "kv_store"):
        self._client = client
        self._table_name = table

    def _table(self) -> Any:
        return self._client.table(self._table_name)

    @staticmethod
    def _rows(res: Any) -> List[Dict[str, Any]]:
        # execute() returns an APIResponse; some versions return None for empty results
        if res is None:
            return []
        data = getattr(res, "data", None)
        if data is None and isinstance(res, dict):
            data = res.get("data")
        if isinstance(data, dict):
            return [data]
        return list(data or [])

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        res = self._table().select("value").eq("key", key).limit(1).execute()
        rows = self._rows(res)
        if not rows:
            return None
        return rows[0].get("value")

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._table().upsert({"key": key, "value": value}).execute()

    def delete(self, key: str) -> None:
        self._table().delete().eq("key", key).execute()

    def get_by_prefix(self, prefix: str) -> List[Dict[str, Any]]:
        """Return all values whose key starts with `prefix`, ordered by key.

        Pages through the table so scans are not truncated at the PostgREST
        row limit. Keys are re-checked client side since LIKE escaping
        differs between deployments.
        """
        pattern = f"{_escape_like(prefix)}%"
        values: List[Dict[str, Any]] = []
        start = 0
        while True:
            res = (
                self._table()
                .select("key, value")
                .like("key", pattern)
                .order("key")
                .range(start, start + PAGE_SIZE - 1)
                .execute()
            )
            rows = self._rows(res)
            for row in rows:
                if str(row.get("key", "")).startswith(prefix):
                    values.append(row.get("value"))
            if len(rows) < PAGE_SIZE:
                break
            start += PAGE_SIZE
        logger.debug("prefix scan %s returned %d rows", prefix, len(values))
        return values


__all__ = ["SupabaseKVStore"]
