"""
Tests for PersistenceManager.

Tests cover:
1. Loading fresh, valid, corrupt and missing stores
2. Saving with backup and atomic replace
3. Lock file handling (fresh vs stale)
4. Auto-save scheduling and overrun skipping
5. Storage info and cleanup
"""

import asyncio
import json
import time

import pytest

from brainmem.core.memory_graph import MemoryGraph
from brainmem.core.persistence import PersistenceManager
from brainmem.utils.exceptions import StorageError


def _sample_nodes():
    graph = MemoryGraph()
    first = graph.add("hello")
    graph.add("world", [first])
    return graph.get_all_nodes()


class TestLoad:
    """Tests for loading the memory file."""

    @pytest.mark.asyncio
    async def test_missing_primary_is_empty(self, storage):
        await storage.init()

        assert await storage.load() == {}
        assert storage.storage_path.is_dir()

    @pytest.mark.asyncio
    async def test_round_trip(self, storage):
        await storage.init()
        nodes = _sample_nodes()

        await storage.save(nodes)
        loaded = await storage.load()

        assert loaded == nodes
        assert list(loaded) == list(nodes)

    @pytest.mark.asyncio
    async def test_document_uses_camel_case_metadata(self, storage):
        await storage.init()
        await storage.save(_sample_nodes())

        data = json.loads(storage.memory_file.read_text(encoding="utf-8"))

        node = next(iter(data["memories"].values()))
        assert set(node) == {"id", "text", "associations", "metadata"}
        assert set(node["metadata"]) == {"createdAt", "lastAccessed", "accessCount"}

    @pytest.mark.asyncio
    async def test_corrupt_primary_falls_back_to_backup(self, storage):
        await storage.init()
        nodes = _sample_nodes()
        await storage.save(nodes)
        await storage.save(nodes)

        storage.memory_file.write_text("{not json", encoding="utf-8")

        assert await storage.load() == nodes

    @pytest.mark.asyncio
    async def test_wrong_structure_falls_back_to_backup(self, storage):
        await storage.init()
        nodes = _sample_nodes()
        await storage.save(nodes)
        await storage.save(nodes)

        storage.memory_file.write_text('{"memories": []}', encoding="utf-8")

        assert await storage.load() == nodes

    @pytest.mark.asyncio
    async def test_corrupt_primary_and_backup(self, storage):
        await storage.init()
        storage.memory_file.write_text("garbage", encoding="utf-8")
        storage.backup_file.write_text("garbage", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            await storage.load()

        assert exc_info.value.context["backup"].startswith("Backup recovery also failed")

    @pytest.mark.asyncio
    async def test_corrupt_primary_with_backup_disabled(self, tmp_path):
        storage = PersistenceManager(tmp_path, enable_backup=False)
        await storage.init()
        storage.memory_file.write_text("garbage", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            await storage.load()

        assert exc_info.value.context["backup"] == "Backup is disabled"


class TestSave:
    """Tests for saving."""

    @pytest.mark.asyncio
    async def test_first_save_creates_no_backup(self, storage):
        await storage.init()

        await storage.save(_sample_nodes())

        assert storage.memory_file.exists()
        assert not storage.backup_file.exists()

    @pytest.mark.asyncio
    async def test_backup_holds_previous_generation(self, storage):
        await storage.init()
        await storage.save({})
        previous = storage.memory_file.read_text(encoding="utf-8")

        await storage.save(_sample_nodes())

        assert storage.backup_file.read_text(encoding="utf-8") == previous

    @pytest.mark.asyncio
    async def test_backup_disabled(self, tmp_path):
        storage = PersistenceManager(tmp_path, enable_backup=False)
        await storage.init()

        await storage.save({})
        await storage.save(_sample_nodes())

        assert not storage.backup_file.exists()

    @pytest.mark.asyncio
    async def test_no_lock_or_temp_left_behind(self, storage):
        await storage.init()

        await storage.save(_sample_nodes())

        assert not storage.lock_file.exists()
        assert not storage.memory_file.with_suffix(".tmp").exists()

    @pytest.mark.asyncio
    async def test_failed_write_releases_lock(self, storage):
        await storage.init()
        # A directory in place of the primary file makes the final replace fail
        storage.memory_file.mkdir()

        with pytest.raises(StorageError):
            await storage.save(_sample_nodes())

        assert not storage.lock_file.exists()

    @pytest.mark.asyncio
    async def test_fresh_lock_blocks_save(self, storage):
        await storage.init()
        storage.lock_file.write_text(str(int(time.time() * 1000)), encoding="utf-8")

        with pytest.raises(StorageError):
            await storage.save(_sample_nodes())

        assert storage.lock_file.exists()
        assert not storage.memory_file.exists()

    @pytest.mark.asyncio
    async def test_stale_lock_is_removed(self, storage):
        await storage.init()
        six_minutes_ago = int(time.time() * 1000) - 6 * 60 * 1000
        storage.lock_file.write_text(str(six_minutes_ago), encoding="utf-8")

        await storage.save(_sample_nodes())

        assert storage.memory_file.exists()
        assert not storage.lock_file.exists()

    @pytest.mark.asyncio
    async def test_concurrent_saves_are_serialized(self, storage):
        await storage.init()
        nodes = _sample_nodes()

        await asyncio.gather(*(storage.save(nodes) for _ in range(5)))

        assert await storage.load() == nodes
        assert not storage.lock_file.exists()


class TestAutoSave:
    """Tests for the recurring auto-save."""

    @pytest.mark.asyncio
    async def test_ticks_call_callback(self, storage):
        calls = 0

        async def callback():
            nonlocal calls
            calls += 1

        storage.start_auto_save(10, callback)
        await asyncio.sleep(0.1)
        storage.stop_auto_save()

        assert calls >= 2
        assert storage.auto_save_running is False

    @pytest.mark.asyncio
    async def test_overrunning_save_skips_ticks(self, storage):
        calls = 0

        async def slow_callback():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.2)

        storage.start_auto_save(10, slow_callback)
        await asyncio.sleep(0.1)
        storage.stop_auto_save()

        assert calls == 1
        # Let the in-flight save finish before the loop closes
        await asyncio.sleep(0.15)

    @pytest.mark.asyncio
    async def test_failing_callback_keeps_running(self, storage):
        calls = 0

        async def failing_callback():
            nonlocal calls
            calls += 1
            raise StorageError("disk full")

        storage.start_auto_save(10, failing_callback)
        await asyncio.sleep(0.1)
        assert storage.auto_save_running is True
        storage.stop_auto_save()

        assert calls >= 2

    @pytest.mark.asyncio
    async def test_cleanup_stops_auto_save_and_removes_lock(self, storage):
        await storage.init()

        async def callback():
            return None

        storage.start_auto_save(1000, callback)
        storage.lock_file.write_text("0", encoding="utf-8")

        await storage.cleanup()

        assert storage.auto_save_running is False
        assert not storage.lock_file.exists()


class TestStorageInfo:
    """Tests for storage info."""

    @pytest.mark.asyncio
    async def test_storage_info(self, storage):
        await storage.init()
        await storage.save(_sample_nodes())

        info = await storage.get_storage_info()

        assert info.size == storage.memory_file.stat().st_size
        assert info.modified.tzinfo is not None

    @pytest.mark.asyncio
    async def test_storage_info_missing_file(self, storage):
        await storage.init()

        with pytest.raises(StorageError):
            await storage.get_storage_info()
