"""
app/schemas/ingestion.py

Response schemas for log ingestion runs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.ingestion import SessionOutcome


class SessionOutcomeResponse(BaseModel):
    """
    API response model for one ingested object.
    """

    bucket: str
    key: str
    status: str
    lines_processed: int = Field(..., ge=0)
    lines_skipped: int = Field(..., ge=0)
    timestamp_errors: int = Field(..., ge=0)
    documents_submitted: int = Field(..., ge=0)
    documents_created: int = Field(..., ge=0)
    documents_failed: int = Field(..., ge=0)
    flushes: int = Field(..., ge=0)
    index_names: list[str] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_outcome(cls, outcome: SessionOutcome) -> "SessionOutcomeResponse":
        return cls(
            bucket=outcome.bucket,
            key=outcome.key,
            status=outcome.status.value,
            lines_processed=outcome.lines_processed,
            lines_skipped=outcome.lines_skipped,
            timestamp_errors=outcome.timestamp_errors,
            documents_submitted=outcome.documents_submitted,
            documents_created=outcome.documents_created,
            documents_failed=outcome.documents_failed,
            flushes=outcome.flushes,
            index_names=list(outcome.index_names),
            error=outcome.error,
        )


class IngestionRunResponse(BaseModel):
    """
    Aggregate response for one event.
    """

    status: str
    records: list[SessionOutcomeResponse] = Field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: list[SessionOutcome]) -> "IngestionRunResponse":
        status = "ok" if all(outcome.succeeded for outcome in outcomes) else "partial_failure"
        return cls(
            status=status,
            records=[SessionOutcomeResponse.from_outcome(outcome) for outcome in outcomes],
        )
