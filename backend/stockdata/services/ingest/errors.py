from __future__ import annotations


class IngestError(Exception):
    """Base class for failures that end one ingestion attempt."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(IngestError):
    """Upload rejected before parsing: no file, wrong type or too large."""


class StreamError(IngestError):
    """The CSV stream could not be read or parsed mid-file."""


class PersistenceError(IngestError):
    """Accepted rows could not be written to the database."""
