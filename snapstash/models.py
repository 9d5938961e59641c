"""
Data models for a Snapchat memories export.

A ``Memory`` is one saved media item. Its ``date`` string doubles as the
display timestamp and as the key used for the local file index.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

import httpx
from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError, field_validator

from .errors import ParseError

DATE_FORMAT = "%Y-%m-%d %H:%M:%S UTC"

MONTH_NAMES = {
    "01": "January",
    "02": "February",
    "03": "March",
    "04": "April",
    "05": "May",
    "06": "June",
    "07": "July",
    "08": "August",
    "09": "September",
    "10": "October",
    "11": "November",
    "12": "December",
}


def month_name(number: str) -> str:
    """Map a two-digit month code to its English name; unknown codes pass through."""
    return MONTH_NAMES.get(number, number)


def parse_url(value: str | None) -> httpx.URL | None:
    """Return ``value`` as an absolute http(s) URL, or None if it is not one."""
    if not value:
        return None
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError, ValueError):
        return None
    if url.scheme not in ("http", "https") or not url.host:
        return None
    return url


# ============== Records ==============

class Memory(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: UUID = Field(default_factory=uuid4)
    date: StrictStr = Field(alias="Date")
    media_type: StrictStr = Field(alias="Media Type")
    download_link: StrictStr = Field(alias="Download Link")
    media_download_url: StrictStr | None = Field(default=None, alias="Media Download Url")

    @field_validator("id", mode="before")
    @classmethod
    def generate_missing_id(cls, v):
        if v is None:
            return uuid4()
        return v

    @property
    def is_video(self) -> bool:
        return self.media_type.lower() == "video"

    @property
    def year(self) -> str:
        return self.date[:4]

    @property
    def month(self) -> str:
        return month_name(self.date[5:7])

    @property
    def extension(self) -> str:
        return "mp4" if self.is_video else "jpg"

    @property
    def filename(self) -> str:
        safe_date = self.date.replace(":", "-").replace(" ", "_")
        return f"{safe_date}.{self.extension}"

    @property
    def direct_url(self) -> httpx.URL | None:
        """The newer-schema direct media URL, if present and valid."""
        return parse_url(self.media_download_url)

    @property
    def effective_url(self) -> httpx.URL | None:
        return self.direct_url or parse_url(self.download_link)

    @property
    def captured_at(self) -> datetime | None:
        """The date as an aware UTC datetime, or None when it does not parse."""
        try:
            return datetime.strptime(self.date, DATE_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            return None

    def to_record(self) -> dict:
        """Serialize with the export's field names, omitting an absent direct URL."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SnapchatExport(BaseModel):
    saved_media: list[Memory] = Field(alias="Saved Media")


MemoryList = TypeAdapter(list[Memory])


def parse_export(data: bytes | str) -> list[Memory]:
    """Decode a ``{"Saved Media": [...]}`` export.

    Raises:
        ParseError: if the document is not valid JSON, the envelope key is
            missing, or any record lacks a required string field. No partial
            list is ever returned.
    """
    try:
        export = SnapchatExport.model_validate_json(data)
    except ValidationError as e:
        raise ParseError(_describe(e)) from e
    return export.saved_media


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = " -> ".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid data")
    count = error.error_count()
    more = f" (and {count - 1} more)" if count > 1 else ""
    if location:
        return f"{location}: {message}{more}"
    return f"{message}{more}"


# ============== Display hierarchy ==============

class MonthSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    memories: list[Memory]

    @property
    def id(self) -> str:
        return self.name


class YearSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: str
    months: list[MonthSection]

    @property
    def id(self) -> str:
        return self.year
