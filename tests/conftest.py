"""
Shared fixtures for SnapStash tests.

HTTP is served by httpx.MockTransport; media and state files live in tmp_path.
"""

import json

import pytest

from snapstash.settings import Settings


def make_record(date: str, media_type: str = "Image", link: str | None = None, direct: str | None = None) -> dict:
    record = {
        "Date": date,
        "Media Type": media_type,
        "Download Link": link or f"https://app.snapchat.com/dmd/memories?sid={date[:10]}",
    }
    if direct is not None:
        record["Media Download Url"] = direct
    return record


def make_export(*records: dict) -> bytes:
    return json.dumps({"Saved Media": list(records)}).encode("utf-8")


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a fresh data directory, without date stamping."""
    return Settings(data_dir=tmp_path / "data", max_concurrent=5, stamp_file_times=False)


@pytest.fixture
def sample_export():
    return make_export(
        make_record("2024-03-15 10:00:00 UTC", "Image", "https://x/1"),
        make_record("2024-01-02 08:30:00 UTC", "Video", "https://x/2"),
        make_record("2023-12-31 23:59:59 UTC", "Image", "https://x/3", direct="https://cdn.example.com/3.jpg"),
    )
