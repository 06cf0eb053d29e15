"""
app/lambda_handler.py

Event-driven Lambda entry point for S3 access log notifications.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from app.config import resolve_environment_name
from app.logging_utils import configure_logging
from app.schemas.ingestion import IngestionRunResponse
from app.schemas.s3_event import S3EventPayload
from app.services.log_ingestion_service import get_log_ingestion_service

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Ingest every object named by the event's records.

    Failures are reported in the returned payload, never raised, so the
    trigger does not redeliver the event. Only a malformed event raises.
    """

    environment = resolve_environment_name(getattr(context, "invoked_function_arn", None))
    service = get_log_ingestion_service(environment)
    configure_logging(debug=service.settings.debug)

    request_id = getattr(context, "aws_request_id", "local-test")
    if service.settings.debug:
        logger.debug("Used configuration env=%s settings=%s", environment, service.settings)
        logger.debug("Received event: %s", event)

    try:
        payload = S3EventPayload.model_validate(event)
    except ValidationError as exc:
        logger.error("Invalid S3 event request_id=%s error=%s", request_id, exc)
        raise ValueError(f"Invalid S3 event: {exc}") from exc

    records = payload.to_notification_records()
    logger.info("Lambda trigger request_id=%s env=%s records=%d", request_id, environment, len(records))

    monitor = service.build_monitor(context=context)
    outcomes = service.process_records(records, monitor=monitor)
    response = IngestionRunResponse.from_outcomes(outcomes)

    if response.status != "ok":
        logger.warning("Invocation finished with failures request_id=%s", request_id)
    return response.model_dump()
