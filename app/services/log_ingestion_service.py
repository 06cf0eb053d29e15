"""
app/services/log_ingestion_service.py

Invocation-level orchestration: one session per notification record,
processed sequentially.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from functools import lru_cache

from app.config import IngestionSettings, get_ingestion_settings
from app.connectors.s3_object_fetcher import ObjectFetcher, S3ObjectFetcher
from app.domain.ingestion import NotificationRecord, SessionOutcome, SessionStatus
from app.indexing.elasticsearch_bulk import BulkSubmitter, ElasticsearchBulkSubmitter
from app.ingestion.time_budget import TimeBudgetMonitor
from app.parsers.elb_access_log import ELBAccessLogParser
from app.services.ingestion_session import IngestionSession

logger = logging.getLogger(__name__)


class LogIngestionService:
    """
    Runs ingestion sessions for every record of one invocation.

    A failure in one record never stops its siblings.
    """

    def __init__(
        self,
        *,
        settings: IngestionSettings,
        fetcher: ObjectFetcher | None = None,
        submitter_factory: Callable[[], BulkSubmitter] | None = None,
        parser: ELBAccessLogParser | None = None,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher
        self._submitter_factory = submitter_factory or (
            lambda: ElasticsearchBulkSubmitter.from_settings(settings)
        )
        self._parser = parser or ELBAccessLogParser()

    @property
    def settings(self) -> IngestionSettings:
        return self._settings

    def build_monitor(
        self,
        *,
        budget_seconds: float | None = None,
        context: object | None = None,
    ) -> TimeBudgetMonitor:
        """
        Monitor for one invocation: Lambda context first, then a wall-clock deadline.
        """

        kwargs = {
            "low_budget_ms": self._settings.low_budget_ms,
            "initial_delay_ms": self._settings.budget_initial_delay_ms,
        }
        if context is not None:
            return TimeBudgetMonitor.from_lambda_context(context, **kwargs)
        if budget_seconds is not None:
            return TimeBudgetMonitor.with_deadline(budget_seconds, **kwargs)
        return TimeBudgetMonitor.unlimited(**kwargs)

    def process_records(
        self,
        records: Sequence[NotificationRecord],
        *,
        monitor: TimeBudgetMonitor | None = None,
    ) -> list[SessionOutcome]:
        monitor = monitor or self.build_monitor()
        outcomes: list[SessionOutcome] = []

        for record in records:
            if not record.is_object_created:
                logger.info(
                    "Skipping non-create event event_name=%s bucket=%s key=%s",
                    record.event_name,
                    record.bucket,
                    record.key,
                )
                outcomes.append(SessionOutcome(bucket=record.bucket, key=record.key, status=SessionStatus.SKIPPED))
                continue

            warning = monitor.check()
            if warning is not None and self._settings.truncate_on_low_budget:
                logger.warning(
                    "Time budget low before start bucket=%s key=%s remaining_ms=%s",
                    record.bucket,
                    record.key,
                    warning.remaining_ms,
                )
                outcomes.append(
                    SessionOutcome(
                        bucket=record.bucket,
                        key=record.key,
                        status=SessionStatus.TRUNCATED,
                        error="time budget exhausted before start",
                    )
                )
                continue

            outcomes.append(self._process_record(record, monitor))

        return outcomes

    def _process_record(self, record: NotificationRecord, monitor: TimeBudgetMonitor) -> SessionOutcome:
        try:
            session = IngestionSession(
                record,
                settings=self._settings,
                fetcher=self._get_fetcher(),
                submitter=self._submitter_factory(),
                parser=self._parser,
                monitor=monitor,
            )
            return session.run()
        except Exception as exc:
            logger.exception(
                "Unhandled ingestion failure bucket=%s key=%s error=%s",
                record.bucket,
                record.key,
                exc,
            )
            return SessionOutcome(
                bucket=record.bucket,
                key=record.key,
                status=SessionStatus.ERROR,
                error=str(exc),
            )

    def _get_fetcher(self) -> ObjectFetcher:
        if self._fetcher is None:
            self._fetcher = S3ObjectFetcher.from_settings(self._settings)
        return self._fetcher


@lru_cache(maxsize=4)
def get_log_ingestion_service(environment: str = "LOCAL") -> LogIngestionService:
    """
    Build and cache the ingestion service for one environment.
    """

    return LogIngestionService(settings=get_ingestion_settings(environment))
