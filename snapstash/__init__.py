"""
SnapStash.

Import a Snapchat memories export, resolve each memory's download link and
keep the media in a local folder.
"""

from .coordinator import AppState, Coordinator, DownloadSummary
from .models import Memory, MonthSection, YearSection, parse_export

__version__ = "0.1.0"

__all__ = [
    "AppState",
    "Coordinator",
    "DownloadSummary",
    "Memory",
    "MonthSection",
    "YearSection",
    "parse_export",
]
