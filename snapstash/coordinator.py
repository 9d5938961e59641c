"""
Import and download coordination.

``Coordinator`` owns all mutable application state. Every change replaces
the current ``AppState`` snapshot and is pushed to subscribed observers.
Download workers never touch that state: they return ``DownloadResult``
values which the coordinator applies as they complete.

Usage:
    coordinator = Coordinator(get_settings())
    coordinator.subscribe(lambda state: print(state.status_message))

    await coordinator.restore()
    await coordinator.load_json(Path("memories_history.json"))
    await coordinator.start_download()
"""

import asyncio
import logging
import os
from collections.abc import Callable
from pathlib import Path

import httpx
from pydantic import BaseModel, ConfigDict

from .downloader import DownloadResult, MediaDownloader
from .errors import ParseError
from .file_index import FileIndex
from .grouping import build_sections
from .models import Memory, YearSection, parse_export
from .settings import Settings, get_settings
from .store import MemoryStore

logger = logging.getLogger(__name__)

STATUS_IDLE = "Import JSON to start"
STATUS_PROCESSING = "Processing..."
STATUS_COMPLETE = "Download Complete!"


class AppState(BaseModel):
    """Read-only snapshot of everything a front-end renders."""

    model_config = ConfigDict(frozen=True)

    sections: list[YearSection] = []
    all_memories: list[Memory] = []
    downloaded_files: dict[str, Path] = {}
    is_downloading: bool = False
    is_processing: bool = False
    progress: float = 0.0
    status_message: str = STATUS_IDLE


class DownloadSummary(BaseModel):
    total: int = 0
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0
    size: int = 0

    def add(self, result: DownloadResult) -> None:
        if result.skipped:
            self.skipped += 1
        elif result.ok:
            self.downloaded += 1
            self.size += result.size
        else:
            self.failed += 1


Observer = Callable[[AppState], None]


class Coordinator:
    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport
        self.store = MemoryStore(self.settings.state_path)
        self.index = FileIndex(self.settings.data_dir)
        self._state = AppState()
        self._observers: list[Observer] = []
        self._background: set[asyncio.Task] = set()

    # ------------------------------------------------------------------ state

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer`` for state changes. Returns an unsubscribe callable."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        for observer in list(self._observers):
            try:
                observer(self._state)
            except Exception:
                logger.exception("State observer %r failed", observer)

    def lookup(self, memory: Memory) -> Path | None:
        """Local file for ``memory``, if it has been downloaded."""
        return self.index.lookup(memory.date)

    # ------------------------------------------------------------ persistence

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def wait_for_background(self) -> None:
        """Wait for pending background saves."""
        if self._background:
            await asyncio.gather(*self._background)

    async def restore(self) -> int:
        """Load the memories persisted by a previous run."""
        memories = await self.store.load()
        if not memories:
            return 0
        self._update(
            sections=build_sections(memories),
            all_memories=memories,
            downloaded_files=self.index.refresh(memories),
            status_message=f"Loaded {len(memories)} memories from storage.",
        )
        return len(memories)

    # ----------------------------------------------------------------- import

    async def load_json(self, source: bytes | str | os.PathLike) -> bool:
        """Import an export from raw bytes or a file path.

        On failure the status message carries the error and the current
        memory list is left untouched.
        """
        self._update(is_processing=True, status_message=STATUS_PROCESSING)
        try:
            memories = await asyncio.to_thread(_read_and_parse, source)
        except ParseError as e:
            logger.error("Import failed: %s", e)
            self._update(is_processing=False, status_message=f"Error: {e}")
            return False

        self._update(sections=build_sections(memories), all_memories=memories)
        self._spawn(self.store.save(memories))
        self._update(
            downloaded_files=self.index.refresh(memories),
            status_message=f"Imported {len(memories)} memories. Ready to download.",
            is_processing=False,
        )
        logger.info("Imported %d memories", len(memories))
        return True

    # --------------------------------------------------------------- download

    async def start_download(self) -> DownloadSummary | None:
        """Download every memory that is not on disk yet.

        Returns None without doing anything if there is nothing to download
        or a batch is already running.
        """
        memories = self._state.all_memories
        if not memories:
            return None
        if self._state.is_downloading:
            logger.warning("A download is already running; ignoring request")
            return None

        total = len(memories)
        summary = DownloadSummary(total=total)
        self._update(is_downloading=True, progress=0.0)
        logger.info("Starting download of %d memories (concurrency %d)", total, self.settings.max_concurrent)

        try:
            async with self._client() as client:
                downloader = MediaDownloader(
                    client,
                    self.settings.data_dir,
                    stamp_file_times=self.settings.stamp_file_times,
                    write_exif=self.settings.write_exif,
                )
                tasks = self._start_workers(downloader, memories)
                try:
                    for completed, next_done in enumerate(asyncio.as_completed(tasks), start=1):
                        result = await next_done
                        summary.add(result)
                        changes = {"progress": completed / total}
                        if result.ok:
                            changes["downloaded_files"] = self.index.record(result.memory.date, result.path)
                        self._update(**changes)
                finally:
                    for task in tasks:
                        task.cancel()
        finally:
            self._update(
                is_downloading=False,
                downloaded_files=self.index.refresh(self._state.all_memories),
            )

        self._update(status_message=STATUS_COMPLETE)
        logger.info(
            "Download complete: %d downloaded, %d skipped, %d failed",
            summary.downloaded,
            summary.skipped,
            summary.failed,
        )
        return summary

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            follow_redirects=True,
            transport=self.transport,
        )

    def _start_workers(self, downloader: MediaDownloader, memories: list[Memory]) -> list[asyncio.Task]:
        """Schedule one task per memory behind a shared semaphore.

        At most ``max_concurrent`` items are in flight; a finished item frees
        its slot for the next queued one.
        """
        semaphore = asyncio.Semaphore(self.settings.max_concurrent)

        async def worker(memory: Memory) -> DownloadResult:
            async with semaphore:
                return await downloader.download(memory)

        return [asyncio.create_task(worker(m)) for m in memories]


def _read_and_parse(source: bytes | str | os.PathLike) -> list[Memory]:
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        try:
            data = Path(source).read_bytes()
        except (OSError, ValueError) as e:
            raise ParseError(f"Failed to read file: {e}") from e
    return parse_export(data)
