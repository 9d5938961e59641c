"""
Application settings.

Values come from the environment (prefix ``SNAPSTASH_``) and are loaded once.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / "Documents" / "SnapStash"
DEFAULT_MAX_CONCURRENT = 5


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SNAPSTASH_")

    data_dir: Path = DEFAULT_DATA_DIR
    state_filename: str = "saved_memories.json"
    max_concurrent: int = Field(default=DEFAULT_MAX_CONCURRENT, ge=1, le=64)
    request_timeout: float = Field(default=30.0, gt=0)
    stamp_file_times: bool = True
    write_exif: bool = False
    log_level: str = "INFO"

    @field_validator("data_dir", mode="before")
    @classmethod
    def expand_data_dir(cls, v):
        if isinstance(v, str):
            v = Path(v)
        if isinstance(v, Path):
            return v.expanduser()
        return v

    @property
    def state_path(self) -> Path:
        return self.data_dir / self.state_filename


@lru_cache
def get_settings() -> Settings:
    return Settings()
