import json
from pathlib import Path

import pytest

from onboarding.errors import StorageError
from onboarding.services.storage import JsonFileStore, MemoryStore


def test_memory_store_basics():
    store = MemoryStore({"a": "1"})
    store.set_item("b", "2")
    store.remove_item("a")
    store.remove_item("missing")
    assert store.keys() == ["b"]
    assert store.get_item("b") == "2"
    assert store.get_item("a") is None


def test_json_store_round_trip(tmp_path: Path):
    path = tmp_path / "kv.json"
    store = JsonFileStore(str(path))
    store.set_item("k", "v")
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}
    store.remove_item("k")
    assert JsonFileStore(str(path)).keys() == []


def test_corrupt_file_backed_up_and_reset(tmp_path: Path):
    path = tmp_path / "kv.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(str(path))
    assert store.keys() == []
    backups = list(tmp_path.glob("kv.json.corrupt.*"))
    assert len(backups) == 1
    store.set_item("x", "1")
    assert store.get_item("x") == "1"


def test_non_object_file_treated_as_corrupt(tmp_path: Path):
    path = tmp_path / "kv.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert JsonFileStore(str(path)).keys() == []
    assert list(tmp_path.glob("kv.json.corrupt.*"))


def test_unwritable_location_raises_storage_error(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = JsonFileStore(str(blocker / "kv.json"))
    with pytest.raises(StorageError):
        store.set_item("k", "v")


def test_failed_write_leaves_store_unchanged(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = JsonFileStore(str(blocker / "kv.json"))
    with pytest.raises(StorageError):
        store.set_item("k", "v")
    assert store.get_item("k") is None
    assert store.keys() == []


def test_write_is_atomic_replace(tmp_path: Path):
    path = tmp_path / "kv.json"
    store = JsonFileStore(str(path))
    store.set_item("a", "1")
    store.remove_item("a")
    store.set_item("b", "2")
    assert json.loads(path.read_text(encoding="utf-8")) == {"b": "2"}
    assert not list(tmp_path.glob("*.tmp"))
