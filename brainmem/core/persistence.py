"""
Persistence Manager - Makes the memory graph durable across restarts.

Handles:
- JSON document load with backup fallback
- Save with a single-generation backup copy
- Advisory lock file with a staleness window
- Recurring auto-save with a re-entrancy guard
"""

import asyncio
import json
import time
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
from pydantic import ValidationError as PydanticValidationError

from brainmem.config import BACKUP_FILE, LOCK_FILE, MEMORY_FILE
from brainmem.models.memory import MemoryDocument, MemoryNode, StorageInfo
from brainmem.utils.exceptions import StorageError
from brainmem.utils.logger import get_logger

logger = get_logger(__name__)

SaveCallback = Callable[[], Awaitable[Any]]

DEFAULT_STALE_LOCK_MS = 5 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


class PersistenceManager:
    """
    File persistence for the memory graph.

    Files (all inside storage_path):
    - memory.brain: primary JSON document `{"memories": {...}}`
    - memory.brain.backup: copy of the previous primary
    - memory.brain.lock: decimal millisecond timestamp while a save runs

    Saves inside one process are serialised by an asyncio lock; the lock file
    only guards against other processes.
    """

    def __init__(
        self,
        storage_path: str | Path,
        enable_backup: bool = True,
        stale_lock_ms: int = DEFAULT_STALE_LOCK_MS,
    ):
        """
        Initialize PersistenceManager.

        Args:
            storage_path: Directory holding the memory files
            enable_backup: Copy the primary file to the backup before overwriting
            stale_lock_ms: Lock files older than this are treated as abandoned
        """
        self.storage_path = Path(storage_path)
        self.memory_file = self.storage_path / MEMORY_FILE
        self.backup_file = self.storage_path / BACKUP_FILE
        self.lock_file = self.storage_path / LOCK_FILE
        self.enable_backup = enable_backup
        self.stale_lock_ms = stale_lock_ms

        self._save_lock = asyncio.Lock()
        self._auto_save_task: asyncio.Task | None = None
        self._pending_save = False

    async def init(self) -> None:
        """
        Create the storage directory if needed.

        Raises:
            StorageError: If the directory can't be created
        """
        try:
            await aiofiles.os.makedirs(self.storage_path, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to initialize storage: {e}", context={"path": str(self.storage_path)}
            ) from e

    # ═══════════════════════════════════════════════════════════
    # LOAD
    # ═══════════════════════════════════════════════════════════

    async def load(self) -> dict[str, MemoryNode]:
        """
        Load the node map from disk.

        A missing primary file is a fresh store and yields an empty map. A
        primary that can't be read, parsed or validated falls back to the
        backup.

        Raises:
            StorageError: If both primary and backup are unusable
        """
        if not await aiofiles.os.path.exists(self.memory_file):
            logger.info(f"No memory file at {self.memory_file}, starting empty")
            return {}

        try:
            nodes = await self._read_document(self.memory_file)
            logger.info(f"Loaded {len(nodes)} memories from {self.memory_file}")
            return nodes
        except StorageError as primary_error:
            logger.warning(f"Primary memory file unusable: {primary_error.message}")

            if not self.enable_backup:
                raise StorageError(
                    f"Failed to load memory: {primary_error.message}",
                    context={"backup": "Backup is disabled"},
                ) from primary_error

            try:
                nodes = await self._read_document(self.backup_file)
            except StorageError as backup_error:
                logger.error(f"Backup recovery failed: {backup_error.message}")
                raise StorageError(
                    f"Failed to load memory: {primary_error.message}",
                    context={"backup": f"Backup recovery also failed: {backup_error.message}"},
                ) from backup_error

            logger.warning(f"Recovered {len(nodes)} memories from backup")
            return nodes

    async def _read_document(self, path: Path) -> dict[str, MemoryNode]:
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read {path.name}: {e}", context={"path": str(path)}) from e

        if not isinstance(data, dict) or not isinstance(data.get("memories"), dict):
            raise StorageError(
                f"Invalid memory file structure: {path.name}", context={"path": str(path)}
            )

        try:
            return MemoryDocument.model_validate(data).memories
        except PydanticValidationError as e:
            raise StorageError(
                f"Invalid memory file structure: {path.name}",
                context={"path": str(path), "errors": e.error_count()},
            ) from e

    # ═══════════════════════════════════════════════════════════
    # SAVE
    # ═══════════════════════════════════════════════════════════

    async def save(self, nodes: Mapping[str, MemoryNode]) -> None:
        """
        Write the node map to disk.

        Raises:
            StorageError: If another process holds a fresh lock or I/O fails
        """
        async with self._save_lock:
            if await self._is_locked():
                raise StorageError(
                    "Storage is locked by another process", context={"lock": str(self.lock_file)}
                )

            try:
                await self._create_lock()

                if self.enable_backup and await aiofiles.os.path.exists(self.memory_file):
                    await self._copy(self.memory_file, self.backup_file)

                document = MemoryDocument(memories=dict(nodes))
                payload = json.dumps(
                    document.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False
                )

                temp_file = self.memory_file.with_suffix(".tmp")
                async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
                    await f.write(payload)
                await aiofiles.os.replace(temp_file, self.memory_file)
            except OSError as e:
                raise StorageError(
                    f"Failed to save memory: {e}", context={"path": str(self.memory_file)}
                ) from e
            finally:
                await self._remove_lock()

            logger.debug(f"Saved {len(document.memories)} memories to {self.memory_file}")

    async def _copy(self, source: Path, target: Path) -> None:
        async with aiofiles.open(source, "rb") as src:
            data = await src.read()
        async with aiofiles.open(target, "wb") as dst:
            await dst.write(data)

    # ═══════════════════════════════════════════════════════════
    # LOCK FILE
    # ═══════════════════════════════════════════════════════════

    async def _is_locked(self) -> bool:
        """True if a lock file exists and is younger than the stale threshold."""
        try:
            stat = await aiofiles.os.stat(self.lock_file)
        except FileNotFoundError:
            return False

        # Age counts from the earlier of the recorded timestamp and the mtime
        started_ms = stat.st_mtime * 1000
        recorded_ms = await self._read_lock_timestamp()
        if recorded_ms is not None:
            started_ms = min(started_ms, recorded_ms)

        age_ms = _now_ms() - started_ms
        if age_ms > self.stale_lock_ms:
            logger.warning(f"Removing stale lock file ({int(age_ms / 1000)}s old)")
            await self._remove_lock()
            return False

        return True

    async def _read_lock_timestamp(self) -> int | None:
        try:
            async with aiofiles.open(self.lock_file, "r", encoding="utf-8") as f:
                return int((await f.read()).strip())
        except (OSError, ValueError):
            return None

    async def _create_lock(self) -> None:
        async with aiofiles.open(self.lock_file, "w", encoding="utf-8") as f:
            await f.write(str(_now_ms()))

    async def _remove_lock(self) -> None:
        try:
            await aiofiles.os.remove(self.lock_file)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove lock file: {e}")

    # ═══════════════════════════════════════════════════════════
    # AUTO-SAVE
    # ═══════════════════════════════════════════════════════════

    def start_auto_save(self, interval_ms: int, save_callback: SaveCallback) -> None:
        """
        Run save_callback every interval_ms until stopped.

        A tick that fires while the previous save is still running is skipped,
        not queued.
        """
        self.stop_auto_save()
        self._auto_save_task = asyncio.create_task(
            self._auto_save_worker(interval_ms / 1000, save_callback)
        )
        logger.info(f"Auto-save started (every {interval_ms} ms)")

    def stop_auto_save(self) -> None:
        if self._auto_save_task and not self._auto_save_task.done():
            self._auto_save_task.cancel()
        self._auto_save_task = None

    @property
    def auto_save_running(self) -> bool:
        return self._auto_save_task is not None and not self._auto_save_task.done()

    async def _auto_save_worker(self, interval: float, save_callback: SaveCallback) -> None:
        in_flight: set[asyncio.Task] = set()
        try:
            while True:
                await asyncio.sleep(interval)
                if self._pending_save:
                    logger.debug("Previous auto-save still running, skipping tick")
                    continue
                self._pending_save = True
                task = asyncio.create_task(self._run_auto_save(save_callback))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
        except asyncio.CancelledError:
            logger.info("Auto-save stopped")
            raise

    async def _run_auto_save(self, save_callback: SaveCallback) -> None:
        try:
            await save_callback()
        except Exception as e:
            logger.error(f"Auto-save failed: {e}")
        finally:
            self._pending_save = False

    # ═══════════════════════════════════════════════════════════
    # HOUSEKEEPING
    # ═══════════════════════════════════════════════════════════

    async def get_storage_info(self) -> StorageInfo:
        """
        Size and modification time of the primary file.

        Raises:
            StorageError: If the file can't be stat'ed
        """
        try:
            stat = await aiofiles.os.stat(self.memory_file)
        except OSError as e:
            raise StorageError(
                f"Failed to get storage stats: {e}", context={"path": str(self.memory_file)}
            ) from e

        return StorageInfo(
            size=stat.st_size,
            modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    async def cleanup(self) -> None:
        """Stop auto-save and drop any residual lock file."""
        self.stop_auto_save()
        await self._remove_lock()
