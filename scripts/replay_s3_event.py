"""
Replay a saved S3 event notification through the ingestion pipeline.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from app.config import resolve_environment_name
from app.logging_utils import configure_logging
from app.schemas.ingestion import IngestionRunResponse
from app.schemas.s3_event import S3EventPayload
from app.services.log_ingestion_service import get_log_ingestion_service


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay an S3 event through ELB log ingestion.")
    parser.add_argument("--event", required=True, help="Path to an S3 event JSON file.")
    parser.add_argument(
        "--environment",
        default=None,
        help="Deployment environment (LIVE, DEV, LOCAL). Defaults to DEPLOY_ENVIRONMENT.",
    )
    parser.add_argument(
        "--budget-seconds",
        dest="budget_seconds",
        type=float,
        default=None,
        help="Optional time budget for the whole replay.",
    )
    args = parser.parse_args()

    environment = (args.environment or resolve_environment_name()).upper()
    service = get_log_ingestion_service(environment)
    configure_logging(debug=service.settings.debug)

    event = json.loads(Path(args.event).read_text(encoding="utf-8"))
    payload = S3EventPayload.model_validate(event)

    outcomes = service.process_records(
        payload.to_notification_records(),
        monitor=service.build_monitor(budget_seconds=args.budget_seconds),
    )
    response = IngestionRunResponse.from_outcomes(outcomes)
    print(json.dumps(response.model_dump(), indent=2))
    return 0 if response.status == "ok" else 1


if __name__ == "__main__":
    raise SystemExit(main())
