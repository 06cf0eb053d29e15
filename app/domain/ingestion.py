"""
app/domain/ingestion.py

Domain models for notification records, bulk submissions and session outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class NotificationRecord:
    """
    One object-store event identifying a log object to ingest.
    """

    bucket: str
    key: str
    event_name: str
    event_time: datetime
    size: int = 0
    etag: str | None = None
    version_id: str | None = None
    region: str | None = None

    @property
    def is_object_created(self) -> bool:
        return self.event_name.startswith("ObjectCreated:")


@dataclass(frozen=True)
class PartialIndexFailure:
    """
    One document the backend did not create within an otherwise successful bulk call.
    """

    position: int
    status: int | None
    error_type: str | None
    reason: str


@dataclass(frozen=True)
class SubmissionResult:
    """
    Reconciled outcome of one bulk submission.
    """

    index_name: str
    submitted: int
    created: tuple[bool, ...]
    failures: tuple[PartialIndexFailure, ...] = ()
    took_ms: int | None = None

    @property
    def created_count(self) -> int:
        return sum(1 for flag in self.created if flag)

    @property
    def missing_count(self) -> int:
        return self.submitted - self.created_count

    @property
    def is_partial_failure(self) -> bool:
        return self.missing_count > 0


class SessionStatus(str, Enum):
    FETCHING = "fetching"
    STREAMING = "streaming"
    FLUSHING = "flushing"
    FINAL_FLUSH = "final_flush"
    DONE = "done"
    TRUNCATED = "truncated"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SessionOutcome:
    """
    Terminal summary for one ingestion session.
    """

    bucket: str
    key: str
    status: SessionStatus
    lines_processed: int = 0
    lines_skipped: int = 0
    timestamp_errors: int = 0
    documents_submitted: int = 0
    documents_created: int = 0
    documents_failed: int = 0
    flushes: int = 0
    error: str | None = None
    index_names: tuple[str, ...] = field(default_factory=tuple)

    @property
    def total_failures(self) -> int:
        return self.documents_failed

    @property
    def succeeded(self) -> bool:
        return self.status in (SessionStatus.DONE, SessionStatus.SKIPPED) and self.documents_failed == 0
