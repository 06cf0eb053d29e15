from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from app.config import IngestionSettings
from app.domain.ingestion import NotificationRecord


@pytest.fixture()
def settings() -> IngestionSettings:
    return IngestionSettings(
        environment="LOCAL",
        debug=False,
        elk_url="http://127.0.0.1:9200",
        bulk_limit=3,
        region="eu-west-1",
    )


@pytest.fixture()
def settings_factory(settings: IngestionSettings):
    def _make(**overrides: object) -> IngestionSettings:
        return replace(settings, **overrides)

    return _make


@pytest.fixture()
def record() -> NotificationRecord:
    return NotificationRecord(
        bucket="elb-logs",
        key="AWSLogs/123/elasticloadbalancing/eu-west-1/2015/05/13/my-elb.log",
        event_name="ObjectCreated:Put",
        event_time=datetime(2015, 5, 13, 23, 40, tzinfo=timezone.utc),
    )
