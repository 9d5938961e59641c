"""
Resolve and fetch the media for a single memory.

Memories from older exports only carry a ``Download Link``: POSTing to it
returns the real media URL as a plain text body. Newer exports add a
``Media Download Url`` that can be fetched directly.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path

import exif
import httpx
from pydantic import BaseModel

from .errors import ResolutionError, SnapStashError, TransportError, WriteError
from .file_index import local_path
from .models import Memory, parse_url

logger = logging.getLogger(__name__)

RESOLVE_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


class DownloadResult(BaseModel):
    memory: Memory
    path: Path | None = None
    size: int = 0
    skipped: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.path is not None


# ============== Network ==============

async def resolve_media_url(client: httpx.AsyncClient, download_link: str) -> httpx.URL:
    """POST to a resolution endpoint and return the media URL it answers with."""
    endpoint = parse_url(download_link)
    if endpoint is None:
        raise ResolutionError(f"Download link is not a valid URL: {download_link[:60]!r}")

    try:
        response = await client.post(endpoint, headers=RESOLVE_HEADERS)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise TransportError(f"Resolution request failed: {e}") from e

    try:
        text = response.content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ResolutionError("Resolution response is not UTF-8 text") from e

    url = parse_url(text.strip())
    if url is None:
        raise ResolutionError(f"Resolution response is not a URL: {text[:60]!r}")
    return url


async def fetch_media(client: httpx.AsyncClient, url: httpx.URL | str) -> bytes:
    try:
        response = await client.get(url)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise TransportError(f"Media request failed: {e}") from e
    return response.content


# ============== Disk ==============

def write_media(path: Path, content: bytes) -> None:
    """Write ``content`` to ``path`` via a temporary file and an atomic rename."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise WriteError(f"Could not write {path}: {e}") from e


def stamp_file_time(path: Path, memory: Memory) -> None:
    captured = memory.captured_at
    if captured is None:
        return
    timestamp = captured.timestamp()
    try:
        os.utime(path, (timestamp, timestamp))
    except OSError as e:
        logger.debug("Could not set times on %s: %s", path.name, e)


def add_exif_data(content: bytes, memory: Memory) -> bytes:
    """Return JPEG ``content`` with the capture date written into its EXIF block."""
    captured = memory.captured_at
    if captured is None:
        return content
    try:
        img = exif.Image(content)

        dt_str = captured.strftime("%Y:%m:%d %H:%M:%S")
        img.datetime_original = dt_str
        img.datetime_digitized = dt_str
        img.datetime = dt_str

        return img.get_file()
    except Exception as e:
        # Not every payload served as .jpg is a JPEG exif can handle
        logger.debug("Skipping EXIF for %s: %s", memory.filename, e)
        return content


# ============== Per-item pipeline ==============

class MediaDownloader:
    """Downloads memories into a flat directory, skipping those already on disk."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        directory: Path,
        stamp_file_times: bool = True,
        write_exif: bool = False,
    ):
        self.client = client
        self.directory = Path(directory)
        self.stamp_file_times = stamp_file_times
        self.write_exif = write_exif

    async def media_url_for(self, memory: Memory) -> httpx.URL:
        direct = memory.direct_url
        if direct is not None:
            return direct
        return await resolve_media_url(self.client, memory.download_link)

    async def download(self, memory: Memory) -> DownloadResult:
        """Ensure the media for ``memory`` exists locally.

        Never raises for per-item failures; they are logged and reported
        through ``DownloadResult.error``.
        """
        output_path = local_path(memory, self.directory)
        if output_path.exists():
            return DownloadResult(memory=memory, path=output_path, skipped=True)

        try:
            url = await self.media_url_for(memory)
            content = await fetch_media(self.client, url)
            await asyncio.to_thread(self._store, output_path, content, memory)
        except SnapStashError as e:
            logger.warning("Failed to download %s: %s", memory.date, e)
            return DownloadResult(memory=memory, error=str(e))

        logger.debug("Downloaded %s (%d bytes)", output_path.name, len(content))
        return DownloadResult(memory=memory, path=output_path, size=len(content))

    def _store(self, output_path: Path, content: bytes, memory: Memory) -> None:
        if self.write_exif and not memory.is_video:
            content = add_exif_data(content, memory)
        write_media(output_path, content)
        if self.stamp_file_times:
            stamp_file_time(output_path, memory)
