"""
Ingestion error taxonomy.

Line-level errors (LineFormatError, TimestampParseError) never escalate past
the line. Session-level errors (FetchError, StreamReadError) abort one object
only. IndexingBackendError loses one batch.
"""

from __future__ import annotations


class LogIngestionError(Exception):
    """Base exception for log ingestion failures."""


class LineFormatError(LogIngestionError, ValueError):
    """Raised when a line does not carry the minimum expected fields."""


class TimestampParseError(LogIngestionError, ValueError):
    """
    Timestamp segment of an otherwise valid line could not be parsed.

    Returned next to the parsed document rather than raised.
    """

    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"invalid timestamp '{value}': {reason}")
        self.value = value
        self.reason = reason


class FetchError(LogIngestionError):
    """Raised when an object cannot be fetched from storage."""


class StreamReadError(LogIngestionError):
    """Raised when reading the object byte stream fails mid-way."""


class IndexingBackendError(LogIngestionError):
    """Raised when a bulk call to the indexing backend fails as a whole."""
