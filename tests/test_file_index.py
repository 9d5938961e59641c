"""Tests for the local file index."""

from snapstash.file_index import FileIndex, local_path
from snapstash.models import Memory


def memory(date: str, media_type: str = "Image") -> Memory:
    return Memory(date=date, media_type=media_type, download_link="https://x/1")


def test_local_path_uses_safe_filename(tmp_path):
    image = memory("2024-03-15 10:00:00 UTC")
    video = memory("2024-03-15 10:00:00 UTC", "Video")

    assert local_path(image, tmp_path) == tmp_path / "2024-03-15_10-00-00_UTC.jpg"
    assert local_path(video, tmp_path) == tmp_path / "2024-03-15_10-00-00_UTC.mp4"


def test_refresh_finds_existing_files(tmp_path):
    present = memory("2024-03-15 10:00:00 UTC")
    absent = memory("2024-03-16 10:00:00 UTC")
    (tmp_path / present.filename).write_bytes(b"jpg")
    index = FileIndex(tmp_path)

    files = index.refresh([present, absent])

    assert files == {present.date: tmp_path / present.filename}
    assert index.lookup(present.date) == tmp_path / present.filename
    assert index.lookup(absent.date) is None
    assert absent.date not in index


def test_refresh_rebuilds_from_scratch(tmp_path):
    item = memory("2024-03-15 10:00:00 UTC")
    path = tmp_path / item.filename
    path.write_bytes(b"jpg")
    index = FileIndex(tmp_path)
    index.refresh([item])

    path.unlink()
    index.refresh([item])

    assert len(index) == 0


def test_record_updates_without_touching_disk(tmp_path):
    item = memory("2024-03-15 10:00:00 UTC")
    index = FileIndex(tmp_path)

    files = index.record(item.date, tmp_path / item.filename)

    assert files == {item.date: tmp_path / item.filename}
    assert not (tmp_path / item.filename).exists()


def test_snapshot_is_a_copy(tmp_path):
    index = FileIndex(tmp_path)
    snapshot = index.snapshot()

    index.record("2024-03-15 10:00:00 UTC", tmp_path / "a.jpg")

    assert snapshot == {}


def test_same_date_shadows_earlier_entry(tmp_path):
    image = memory("2024-03-15 10:00:00 UTC")
    video = memory("2024-03-15 10:00:00 UTC", "Video")
    (tmp_path / image.filename).write_bytes(b"jpg")
    (tmp_path / video.filename).write_bytes(b"mp4")
    index = FileIndex(tmp_path)

    index.refresh([image, video])

    assert len(index) == 1
    assert index.lookup(image.date) == tmp_path / video.filename
