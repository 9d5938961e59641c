"""
Index of memories that already have media on local storage.

Keys are memory dates; values are paths inside the data directory.
"""

from collections.abc import Iterable
from pathlib import Path

from .models import Memory


def local_path(memory: Memory, directory: Path) -> Path:
    return directory / memory.filename


class FileIndex:
    """Maps ``Memory.date`` to the downloaded file for that memory.

    ``refresh`` rebuilds the mapping from disk; ``record`` applies a single
    optimistic update during a download batch without touching disk.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self._files: dict[str, Path] = {}

    def path_for(self, memory: Memory) -> Path:
        return local_path(memory, self.directory)

    def refresh(self, memories: Iterable[Memory]) -> dict[str, Path]:
        files = {}
        for memory in memories:
            path = self.path_for(memory)
            if path.exists():
                # Later memories with the same date shadow earlier ones
                files[memory.date] = path
        self._files = files
        return self.snapshot()

    def record(self, key: str, path: Path) -> dict[str, Path]:
        self._files[key] = path
        return self.snapshot()

    def lookup(self, key: str) -> Path | None:
        return self._files.get(key)

    def snapshot(self) -> dict[str, Path]:
        return dict(self._files)

    def __contains__(self, key: str) -> bool:
        return key in self._files

    def __len__(self) -> int:
        return len(self._files)
