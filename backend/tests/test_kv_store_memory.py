from __future__ import annotations

from backend.storage.kv import InMemoryKVStore


def test_set_get_delete_roundtrip():
    kv = InMemoryKVStore()
    kv.set("user:a", {"id": "a"})
    assert kv.get("user:a") == {"id": "a"}
    kv.delete("user:a")
    assert kv.get("user:a") is None
    # Deleting a missing key is a no-op.
    kv.delete("user:a")


def test_values_are_copied_in_and_out():
    kv = InMemoryKVStore()
    value = {"id": "a", "tags": ["x"]}
    kv.set("user:a", value)
    value["tags"].append("y")
    got = kv.get("user:a")
    assert got == {"id": "a", "tags": ["x"]}
    got["id"] = "mutated"
    assert kv.get("user:a")["id"] == "a"


def test_get_by_prefix_is_ordered_by_key_and_exact():
    kv = InMemoryKVStore()
    kv.set("lesson:s1:b", {"n": 2})
    kv.set("lesson:s1:a", {"n": 1})
    kv.set("lesson:s10:a", {"n": 3})
    kv.set("user:s1", {"n": 4})
    assert kv.get_by_prefix("lesson:s1:") == [{"n": 1}, {"n": 2}]
    assert len(kv.get_by_prefix("lesson:")) == 3
    assert kv.get_by_prefix("nothing:") == []
