"""
Supabase key-value adapter: query builder usage and prefix paging.

The fake below mimics the PostgREST builder chain just enough to evaluate
`eq`, `like` (prefix form), `order` and `range` against a dict.
"""
from __future__ import annotations

from backend.storage import kv_supabase
from backend.storage.kv_supabase import SupabaseKVStore


class _Result:
    def __init__(self, data):
        self.data = data


class _QueryStub:
    def __init__(self, table: "_TableStub", op: str, payload=None):
        self._table = table
        self._op = op
        self._payload = payload
        self._filters = []
        self._range = None
        self._limit = None

    def eq(self, column, value):
        self._filters.append(lambda row: row[column] == value)
        return self

    def like(self, column, pattern):
        self._table.patterns.append(pattern)
        prefix = pattern[:-1].replace("\\_", "_").replace("\\%", "%").replace("\\\\", "\\")
        self._filters.append(lambda row: row[column].startswith(prefix))
        return self

    def order(self, column):
        return self

    def limit(self, n):
        self._limit = n
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def execute(self):
        self._table.calls.append(self._op)
        rows = self._table.rows
        if self._op == "upsert":
            rows[self._payload["key"]] = self._payload["value"]
            return _Result([self._payload])
        matched = [
            {"key": k, "value": v}
            for k, v in sorted(rows.items())
            if all(f({"key": k, "value": v}) for f in self._filters)
        ]
        if self._op == "delete":
            for row in matched:
                rows.pop(row["key"], None)
            return _Result(matched)
        if self._range is not None:
            start, end = self._range
            matched = matched[start : end + 1]
        if self._limit is not None:
            matched = matched[: self._limit]
        return _Result(matched)


class _TableStub:
    def __init__(self):
        self.rows = {}
        self.calls = []
        self.patterns = []

    def select(self, columns):
        return _QueryStub(self, "select")

    def upsert(self, payload):
        return _QueryStub(self, "upsert", payload)

    def delete(self):
        return _QueryStub(self, "delete")


class _SupabaseClientStub:
    def __init__(self):
        self.tables = {}

    def table(self, name):
        return self.tables.setdefault(name, _TableStub())


def test_set_get_delete_use_configured_table():
    client = _SupabaseClientStub()
    store = SupabaseKVStore(client, table="kv_custom")

    store.set("user:a", {"id": "a"})
    assert store.get("user:a") == {"id": "a"}
    store.delete("user:a")
    assert store.get("user:a") is None
    assert set(client.tables) == {"kv_custom"}


def test_prefix_scan_escapes_like_wildcards():
    client = _SupabaseClientStub()
    store = SupabaseKVStore(client)
    store.set("balance_log:s_1:1-a", {"n": 1})
    store.set("balance_log:sx1:1-a", {"n": 2})

    assert store.get_by_prefix("balance_log:s_1:") == [{"n": 1}]
    assert client.tables["kv_store"].patterns == ["balance\\_log:s\\_1:%"]


def test_prefix_scan_pages_past_row_limit(monkeypatch):
    monkeypatch.setattr(kv_supabase, "PAGE_SIZE", 2)
    client = _SupabaseClientStub()
    store = SupabaseKVStore(client)
    for i in range(5):
        store.set(f"lesson:s1:{i}", {"n": i})

    assert [v["n"] for v in store.get_by_prefix("lesson:s1:")] == [0, 1, 2, 3, 4]
    assert client.tables["kv_store"].calls.count("select") == 3


def test_rows_tolerates_missing_or_dict_results():
    assert SupabaseKVStore._rows(None) == []
    assert SupabaseKVStore._rows({"data": [{"key": "k"}]}) == [{"key": "k"}]
    assert SupabaseKVStore._rows(_Result({"key": "k"})) == [{"key": "k"}]
