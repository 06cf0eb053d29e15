"""
app/api/routers/s3_events.py

HTTP endpoint for S3 event notifications relayed over HTTP.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.config import resolve_environment_name
from app.schemas.ingestion import IngestionRunResponse
from app.schemas.s3_event import S3EventPayload
from app.services.log_ingestion_service import LogIngestionService, get_log_ingestion_service

router = APIRouter(tags=["s3-events"])


def get_ingestion_service() -> LogIngestionService:
    return get_log_ingestion_service(resolve_environment_name())


@router.post("/ingest/s3-events", response_model=IngestionRunResponse)
def ingest_s3_events(
    payload: S3EventPayload,
    ingestion_service: LogIngestionService = Depends(get_ingestion_service),
) -> IngestionRunResponse:
    """
    Ingest every object referenced by the posted event within the request budget.
    """

    monitor = ingestion_service.build_monitor(
        budget_seconds=ingestion_service.settings.request_budget_seconds,
    )
    outcomes = ingestion_service.process_records(payload.to_notification_records(), monitor=monitor)
    return IngestionRunResponse.from_outcomes(outcomes)
