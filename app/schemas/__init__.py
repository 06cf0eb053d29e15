"""
app/schemas package marker.
"""

from app.schemas.ingestion import IngestionRunResponse, SessionOutcomeResponse
from app.schemas.s3_event import S3EventPayload, S3EventRecordPayload

__all__ = [
    "IngestionRunResponse",
    "S3EventPayload",
    "S3EventRecordPayload",
    "SessionOutcomeResponse",
]
