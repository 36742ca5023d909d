"""Tests for the filesystem blob store adapter."""

import os
from datetime import UTC, datetime
from pathlib import Path

import pytest

from meow_api.application.ports.blob_store_port import BlobStorePort
from meow_api.application.ports.clock_port import ClockPort
from meow_api.application.ports.id_generator_port import IdGeneratorPort
from meow_api.domain.errors import NotFound, StorageFault
from meow_api.infrastructure.blobstores.filesystem_adapter import (
    FilesystemBlobStoreAdapter,
    FilesystemConfig,
)
from meow_api.infrastructure.ids.generators import TimestampIdGenerator, UuidIdGenerator


class SequentialIds(IdGeneratorPort):
    """Deterministic ids: 1-name, 2-name, ..."""

    def __init__(self) -> None:
        self.n = 0

    def next_id(self, original_name: str) -> str:
        self.n += 1
        return f"{self.n}-{original_name}"


class FixedIds(IdGeneratorPort):
    def __init__(self, value: str) -> None:
        self.value = value

    def next_id(self, original_name: str) -> str:
        return self.value


def _store(root: Path, ids: IdGeneratorPort | None = None) -> FilesystemBlobStoreAdapter:
    return FilesystemBlobStoreAdapter(FilesystemConfig(root=root), ids or SequentialIds())


def test_creates_root_directory(tmp_path: Path) -> None:
    root = tmp_path / "nested" / "uploads"
    store = _store(root)
    assert root.is_dir()
    assert store.root == root


def test_satisfies_protocol(tmp_path: Path) -> None:
    assert isinstance(_store(tmp_path), BlobStorePort)


def test_put_writes_file_named_by_id(tmp_path: Path) -> None:
    store = _store(tmp_path)
    res = store.put("cat.jpeg", b"meow")

    assert res.ok
    assert res.value == "1-cat.jpeg"
    assert (tmp_path / "1-cat.jpeg").read_bytes() == b"meow"


def test_put_then_get_exists_and_list(tmp_path: Path) -> None:
    store = _store(tmp_path, UuidIdGenerator())
    blob_id = store.put("cat.jpeg", b"\xff\xd8data").value
    assert blob_id is not None

    assert store.exists(blob_id) is True
    assert store.get(blob_id).value == b"\xff\xd8data"
    assert store.list_ids().value == [blob_id]


def test_put_leaves_no_temporary_files(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.put("a.png", b"a")
    store.put("b.png", b"b")
    assert sorted(os.listdir(tmp_path)) == ["1-a.png", "2-b.png"]


def test_exists_is_false_for_missing_id(tmp_path: Path) -> None:
    assert _store(tmp_path).exists("nope") is False


def test_get_missing_returns_not_found(tmp_path: Path) -> None:
    res = _store(tmp_path).get("nope")
    assert not res.ok
    assert isinstance(res.error, NotFound)
    assert res.error.blob_id == "nope"


def test_remove_then_remove_again(tmp_path: Path) -> None:
    store = _store(tmp_path)
    blob_id = store.put("cat.jpeg", b"x").value

    first = store.remove(blob_id)
    second = store.remove(blob_id)

    assert first.ok
    assert not second.ok
    assert isinstance(second.error, NotFound)
    assert store.exists(blob_id) is False


def test_list_is_fresh_snapshot(tmp_path: Path) -> None:
    store = _store(tmp_path)
    assert store.list_ids().value == []
    a = store.put("a.jpg", b"a").value
    b = store.put("b.jpg", b"b").value
    assert sorted(store.list_ids().value) == sorted([a, b])
    store.remove(a)
    assert store.list_ids().value == [b]


def test_list_skips_hidden_files_and_directories(tmp_path: Path) -> None:
    store = _store(tmp_path)
    (tmp_path / ".upload-abc").write_bytes(b"partial")
    (tmp_path / "subdir").mkdir()
    blob_id = store.put("cat.jpeg", b"x").value

    assert store.list_ids().value == [blob_id]
    assert store.exists("subdir") is False
    assert isinstance(store.get("subdir").error, NotFound)
    assert isinstance(store.remove("subdir").error, NotFound)


@pytest.mark.parametrize("bad_id", ["../outside.txt", "..", ".hidden", "", "a/b", "a\\b"])
def test_ids_outside_root_are_absent(tmp_path: Path, bad_id: str) -> None:
    root = tmp_path / "uploads"
    store = _store(root)
    (tmp_path / "outside.txt").write_bytes(b"secret")

    assert store.exists(bad_id) is False
    assert isinstance(store.get(bad_id).error, NotFound)
    assert isinstance(store.remove(bad_id).error, NotFound)
    assert (tmp_path / "outside.txt").exists()


def test_symlink_escaping_root_is_absent(tmp_path: Path) -> None:
    root = tmp_path / "uploads"
    store = _store(root)
    outside = tmp_path / "outside.txt"
    outside.write_bytes(b"secret")
    (root / "link").symlink_to(outside)

    assert store.exists("link") is False
    assert isinstance(store.get("link").error, NotFound)


def test_put_with_unstorable_generated_id_is_storage_fault(tmp_path: Path) -> None:
    store = _store(tmp_path, FixedIds("../escape"))
    res = store.put("x", b"x")
    assert not res.ok
    assert isinstance(res.error, StorageFault)
    assert os.listdir(tmp_path) == []


def test_put_write_failure_is_storage_fault(tmp_path: Path, monkeypatch) -> None:
    store = _store(tmp_path)

    def boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(os, "link", boom)
    res = store.put("cat.jpeg", b"x")

    assert not res.ok
    assert isinstance(res.error, StorageFault)
    assert "disk full" in str(res.error)
    assert os.listdir(tmp_path) == []


def test_remove_permission_failure_is_storage_fault(tmp_path: Path, monkeypatch) -> None:
    store = _store(tmp_path)
    blob_id = store.put("cat.jpeg", b"x").value

    def deny(self, *args, **kwargs):
        raise PermissionError("read-only")

    monkeypatch.setattr(Path, "unlink", deny)
    res = store.remove(blob_id)

    assert not res.ok
    assert isinstance(res.error, StorageFault)


def test_list_failure_is_storage_fault(tmp_path: Path) -> None:
    root = tmp_path / "uploads"
    store = _store(root)
    root.rmdir()

    res = store.list_ids()
    assert not res.ok
    assert isinstance(res.error, StorageFault)


class FrozenClock(ClockPort):
    def now(self) -> datetime:
        return datetime(2024, 1, 1, tzinfo=UTC)


class ScriptedIds(IdGeneratorPort):
    """Hands out the given ids in order."""

    def __init__(self, *ids: str) -> None:
        self.ids = list(ids)

    def next_id(self, original_name: str) -> str:
        return self.ids.pop(0)


def test_same_millisecond_collision_never_overwrites(tmp_path: Path) -> None:
    store = _store(tmp_path, TimestampIdGenerator(FrozenClock()))

    first = store.put("cat.jpg", b"first")
    second = store.put("cat.jpg", b"second")

    assert first.ok
    assert not second.ok
    assert isinstance(second.error, StorageFault)
    assert store.get(first.value).value == b"first"
    assert store.list_ids().value == [first.value]


def test_collision_retries_with_a_fresh_id(tmp_path: Path) -> None:
    store = _store(tmp_path, ScriptedIds("1-cat.jpg", "1-cat.jpg", "2-cat.jpg"))

    first = store.put("cat.jpg", b"first")
    second = store.put("cat.jpg", b"second")

    assert first.value == "1-cat.jpg"
    assert second.value == "2-cat.jpg"
    assert store.get("1-cat.jpg").value == b"first"
    assert store.get("2-cat.jpg").value == b"second"


def test_symlink_to_another_blob_is_absent(tmp_path: Path) -> None:
    store = _store(tmp_path)
    target = store.put("cat.jpeg", b"precious").value
    (tmp_path / "link").symlink_to(tmp_path / target)

    assert store.exists("link") is False
    assert isinstance(store.remove("link").error, NotFound)
    assert store.get(target).value == b"precious"
    assert store.list_ids().value == [target]
