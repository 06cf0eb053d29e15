"""
app/domain package marker.
"""

from app.domain.access_log import ELB_LOG_NAME, ELBAccessLogDocument
from app.domain.ingestion import (
    NotificationRecord,
    PartialIndexFailure,
    SessionOutcome,
    SessionStatus,
    SubmissionResult,
)

__all__ = [
    "ELB_LOG_NAME",
    "ELBAccessLogDocument",
    "NotificationRecord",
    "PartialIndexFailure",
    "SessionOutcome",
    "SessionStatus",
    "SubmissionResult",
]
