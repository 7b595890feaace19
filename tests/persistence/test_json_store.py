from __future__ import annotations

import json
from pathlib import Path

import pytest

from jirabridge.contracts.exceptions import StorageError
from jirabridge.persistence import JsonFileStorage


@pytest.mark.asyncio
async def test_missing_file_reads_as_empty(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "store.json")

    assert await storage.get("config") is None


@pytest.mark.asyncio
async def test_values_survive_a_new_instance(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    await JsonFileStorage(path).set("config", {"project_key": "ABC"})

    assert await JsonFileStorage(path).get("config") == {"project_key": "ABC"}
    assert json.loads(path.read_text(encoding="utf-8")) == {"config": {"project_key": "ABC"}}
    assert not path.with_name("store.json.tmp").exists()


@pytest.mark.asyncio
async def test_delete_removes_key_and_ignores_missing(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "store.json")
    await storage.set("a", 1)
    await storage.set("b", 2)

    await storage.delete("a")
    await storage.delete("missing")

    assert await storage.get("a") is None
    assert await storage.get("b") == 2


@pytest.mark.asyncio
async def test_corrupt_file_raises_storage_error(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError):
        await JsonFileStorage(path).get("config")


@pytest.mark.asyncio
async def test_non_object_file_raises_storage_error(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(StorageError):
        await JsonFileStorage(path).set("config", {})
