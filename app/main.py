from __future__ import annotations

import logging

from fastapi import FastAPI

from app.config import get_ingestion_settings, resolve_environment_name
from app.logging_utils import configure_logging


def _validate_env() -> str:
    """
    Resolve the deployment environment and its settings before serving.

    Raises RuntimeError for an unknown environment or a missing ELK_URL, so
    misconfiguration fails at startup instead of on the first event.
    """

    environment = resolve_environment_name()
    settings = get_ingestion_settings(environment)
    configure_logging(debug=settings.debug)
    logging.getLogger(__name__).info(
        "Configuration loaded env=%s elk_url=%s bulk_limit=%d",
        environment,
        settings.elk_url,
        settings.bulk_limit,
    )
    return environment


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    environment = _validate_env()

    application = FastAPI(
        title="ELB Log Ingest API",
        version="1.0.0",
    )

    from app.api.routers import s3_events_router

    application.include_router(s3_events_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok", "environment": environment}

    return application


app = create_app()
