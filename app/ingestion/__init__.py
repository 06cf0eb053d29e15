"""
app/ingestion package marker.
"""

from app.ingestion.batch import BatchAccumulator
from app.ingestion.errors import (
    FetchError,
    IndexingBackendError,
    LineFormatError,
    LogIngestionError,
    StreamReadError,
    TimestampParseError,
)
from app.ingestion.time_budget import TimeBudgetMonitor, TimeBudgetWarning

__all__ = [
    "BatchAccumulator",
    "FetchError",
    "IndexingBackendError",
    "LineFormatError",
    "LogIngestionError",
    "StreamReadError",
    "TimeBudgetMonitor",
    "TimeBudgetWarning",
    "TimestampParseError",
]
