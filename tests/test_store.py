"""Tests for persisting the memory list."""

import json

import pytest

from snapstash.errors import PersistenceError
from snapstash.models import parse_export
from snapstash.store import MemoryStore, read_state, write_state


@pytest.mark.asyncio
async def test_save_then_load_round_trips(tmp_path, sample_export):
    memories = parse_export(sample_export)
    store = MemoryStore(tmp_path / "state" / "saved_memories.json")

    assert await store.save(memories) is True
    loaded = await store.load()

    assert loaded == memories


@pytest.mark.asyncio
async def test_state_file_is_flat_array(tmp_path, sample_export):
    memories = parse_export(sample_export)
    path = tmp_path / "saved_memories.json"

    await MemoryStore(path).save(memories)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert isinstance(data, list)
    assert data[0]["Date"] == "2024-03-15 10:00:00 UTC"
    assert data[0]["id"] == str(memories[0].id)
    assert "Media Download Url" not in data[0]
    assert data[2]["Media Download Url"] == "https://cdn.example.com/3.jpg"


@pytest.mark.asyncio
async def test_save_replaces_previous_list(tmp_path, sample_export):
    memories = parse_export(sample_export)
    store = MemoryStore(tmp_path / "saved_memories.json")

    await store.save(memories)
    await store.save(memories[:1])

    assert await store.load() == memories[:1]
    assert [p.name for p in tmp_path.iterdir()] == ["saved_memories.json"]


@pytest.mark.asyncio
async def test_load_missing_file_returns_empty(tmp_path):
    assert await MemoryStore(tmp_path / "nope.json").load() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [b"{broken", b'{"Saved Media": []}', b'[{"Date": "x"}]'])
async def test_load_corrupt_file_returns_empty(tmp_path, content):
    path = tmp_path / "saved_memories.json"
    path.write_bytes(content)

    assert await MemoryStore(path).load() == []


@pytest.mark.asyncio
async def test_save_failure_is_swallowed(tmp_path, sample_export):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file")
    store = MemoryStore(blocker / "saved_memories.json")

    assert await store.save(parse_export(sample_export)) is False


def test_write_and_read_raise_persistence_errors(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file")

    with pytest.raises(PersistenceError):
        write_state(blocker / "state.json", [])
    with pytest.raises(PersistenceError):
        read_state(tmp_path / "missing.json")
