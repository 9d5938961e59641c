"""Tests for configuration and logging setup."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from snapstash.logging_setup import CallbackHandler, setup_logging
from snapstash.settings import Settings


def test_defaults():
    settings = Settings()

    assert settings.max_concurrent == 5
    assert settings.state_filename == "saved_memories.json"
    assert settings.state_path == settings.data_dir / "saved_memories.json"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SNAPSTASH_MAX_CONCURRENT", "3")
    monkeypatch.setenv("SNAPSTASH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SNAPSTASH_WRITE_EXIF", "true")

    settings = Settings()

    assert settings.max_concurrent == 3
    assert settings.data_dir == tmp_path
    assert settings.write_exif is True


def test_data_dir_expands_user():
    settings = Settings(data_dir="~/snaps")

    assert settings.data_dir == Path.home() / "snaps"


def test_concurrency_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(max_concurrent=0)


def test_callback_handler_forwards_messages():
    received = []
    logger = logging.getLogger("snapstash.test")
    handler = CallbackHandler(received.append)
    logger.addHandler(handler)
    try:
        logger.warning("Failed to download %s", "2024-01-01")
    finally:
        logger.removeHandler(handler)

    assert received == ["Failed to download 2024-01-01"]


def test_setup_logging_accepts_level_names():
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("nonsense")
    assert logging.getLogger().level == logging.INFO
