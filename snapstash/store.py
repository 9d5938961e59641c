"""
Persistence of the imported memory list.

The whole list is written as a flat JSON array to a single state file and
replaced on every save. The state file is a cache of the last import, so
read and write failures are logged and never propagate.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from .errors import PersistenceError
from .models import Memory, MemoryList

logger = logging.getLogger(__name__)


def write_state(path: Path, memories: list[Memory]) -> None:
    """Atomically replace the state file with ``memories``."""
    payload = json.dumps([m.to_record() for m in memories], ensure_ascii=False, indent=2)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise PersistenceError(f"Could not write {path}: {e}") from e


def read_state(path: Path) -> list[Memory]:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise PersistenceError(f"Could not read {path}: {e}") from e
    try:
        return MemoryList.validate_json(data)
    except ValidationError as e:
        raise PersistenceError(f"Corrupt state file {path}: {e.error_count()} error(s)") from e


class MemoryStore:
    """Best-effort JSON store for the memory list."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def save(self, memories: list[Memory]) -> bool:
        """Overwrite the state file. Returns False (and logs) on failure."""
        snapshot = list(memories)
        async with self._lock:
            try:
                await asyncio.to_thread(write_state, self.path, snapshot)
            except PersistenceError as e:
                logger.warning("Skipping save: %s", e)
                return False
        logger.debug("Saved %d memories to %s", len(snapshot), self.path)
        return True

    async def load(self) -> list[Memory]:
        """Read the state file, or return an empty list if it is missing or unreadable."""
        if not self.path.exists():
            return []
        try:
            memories = await asyncio.to_thread(read_state, self.path)
        except PersistenceError as e:
            logger.warning("Starting with no memories: %s", e)
            return []
        logger.info("Loaded %d memories from %s", len(memories), self.path)
        return memories
