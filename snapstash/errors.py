"""Error types raised by the import and download pipeline."""


class SnapStashError(Exception):
    """Base class for all SnapStash errors."""


class ParseError(SnapStashError):
    """The export (or one of its records) could not be decoded.

    Aborts the whole import; nothing is committed.
    """


class ResolutionError(SnapStashError):
    """The resolution endpoint did not answer with a usable media URL."""


class TransportError(SnapStashError):
    """A network call failed or returned a non-success status."""


class WriteError(SnapStashError):
    """Downloaded media could not be written to disk."""


class PersistenceError(SnapStashError):
    """The state file could not be read or written."""
