import json

from onboarding.errors import StorageError
from onboarding.services.storage import JsonFileStore, MemoryStore
from onboarding.tour.seen_store import SeenStateStore


class BrokenStore:
    def get_item(self, key):
        raise StorageError("read failed")

    def set_item(self, key, value):
        raise StorageError("write failed")

    def remove_item(self, key):
        raise StorageError("remove failed")

    def keys(self):
        raise StorageError("list failed")


def test_mark_then_has_seen(seen_store):
    assert not seen_store.has_seen("app", "sheet", "tour", 1)
    seen_store.mark_seen("app", "sheet", "tour", 1)
    assert seen_store.has_seen("app", "sheet", "tour", 1)


def test_version_bump_invalidates_without_erasing(seen_store):
    seen_store.mark_seen("app", "sheet", "tour", 1)
    assert not seen_store.has_seen("app", "sheet", "tour", 2)
    assert seen_store.has_seen("app", "sheet", "tour", 1)


def test_key_and_value_format():
    backend = MemoryStore()
    store = SeenStateStore(backend)
    store.mark_seen("A", "S", "T", 3)
    assert backend.keys() == ["onboard-qs:A:S:T:v3"]
    value = json.loads(backend.get_item("onboard-qs:A:S:T:v3"))
    assert value["version"] == 3
    assert value["timestamp"].endswith("Z")
    record = store.get_record("A", "S", "T", 3)
    assert record.version == 3
    assert record.key == "onboard-qs:A:S:T:v3"


def test_reset_and_clear_all_only_touch_namespace():
    backend = MemoryStore({"unrelated": "1"})
    store = SeenStateStore(backend)
    store.mark_seen("a", "s", "t1", 1)
    store.mark_seen("a", "s", "t2", 1)
    store.reset_seen("a", "s", "t1", 1)
    assert not store.has_seen("a", "s", "t1", 1)
    assert [r.key for r in store.records()] == ["onboard-qs:a:s:t2:v1"]
    assert store.clear_all() == 1
    assert backend.keys() == ["unrelated"]


def test_failures_degrade_to_unseen(caplog):
    store = SeenStateStore(BrokenStore())
    assert store.has_seen("a", "s", "t", 1) is False
    store.mark_seen("a", "s", "t", 1)
    store.reset_seen("a", "s", "t", 1)
    assert store.clear_all() == 0
    assert store.records() == []
    assert store.get_record("a", "s", "t", 1) is None
    assert any("Could not" in r.message for r in caplog.records)


def test_missing_backend_is_tolerated():
    store = SeenStateStore(None)
    store.mark_seen("a", "s", "t", 1)
    assert store.has_seen("a", "s", "t", 1) is False
    assert store.records() == []


def test_json_file_backend_persists(tmp_path):
    path = tmp_path / "seen" / "seen_state.json"
    SeenStateStore(JsonFileStore(str(path))).mark_seen("a", "s", "t", 1)
    reopened = SeenStateStore(JsonFileStore(str(path)))
    assert reopened.has_seen("a", "s", "t", 1)


def test_failed_file_write_does_not_mark_seen(tmp_path, caplog):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = SeenStateStore(JsonFileStore(str(blocker / "seen_state.json")))
    store.mark_seen("a", "s", "t", 1)
    assert store.has_seen("a", "s", "t", 1) is False
    assert any("Could not write seen state" in r.message for r in caplog.records)
