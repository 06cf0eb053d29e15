"""
app/services/ingestion_session.py

One ingestion session: fetch one notified object, stream its lines through
the parser into a batch, and flush the batch to the indexing backend.

State flow:

    fetching -> streaming -> (flushing)* -> final_flush -> done
    fetching -> error                      fetch failure
    streaming -> error                     unrecoverable stream read failure
    streaming -> final_flush -> truncated  time budget low
"""

from __future__ import annotations

import logging

from app.config import IngestionSettings
from app.connectors.s3_object_fetcher import ObjectFetcher, ObjectStream
from app.domain.access_log import ELBAccessLogDocument
from app.domain.ingestion import NotificationRecord, SessionOutcome, SessionStatus
from app.indexing.elasticsearch_bulk import BulkSubmitter
from app.ingestion.batch import BatchAccumulator
from app.ingestion.errors import FetchError, IndexingBackendError, LineFormatError, StreamReadError
from app.ingestion.time_budget import TimeBudgetMonitor, TimeBudgetWarning
from app.logging_utils import log_event
from app.parsers.elb_access_log import ELBAccessLogParser

logger = logging.getLogger(__name__)


class IngestionSession:
    """
    Processes exactly one NotificationRecord to completion.

    The session owns its batch, its submitter and its stream; nothing is
    shared with other sessions.
    """

    def __init__(
        self,
        record: NotificationRecord,
        *,
        settings: IngestionSettings,
        fetcher: ObjectFetcher,
        submitter: BulkSubmitter,
        parser: ELBAccessLogParser | None = None,
        monitor: TimeBudgetMonitor | None = None,
    ) -> None:
        self._record = record
        self._settings = settings
        self._fetcher = fetcher
        self._submitter = submitter
        self._parser = parser or ELBAccessLogParser()
        self._monitor = monitor or TimeBudgetMonitor.unlimited()
        self._batch: BatchAccumulator[ELBAccessLogDocument] = BatchAccumulator(settings.bulk_limit)
        self._source = f"s3://{record.bucket}/{record.key}"

        self.state = SessionStatus.FETCHING
        self._lines_processed = 0
        self._lines_skipped = 0
        self._timestamp_errors = 0
        self._documents_submitted = 0
        self._documents_created = 0
        self._documents_failed = 0
        self._flushes = 0
        self._index_names: list[str] = []
        self._budget_warned = False

    def run(self) -> SessionOutcome:
        try:
            return self._run()
        finally:
            self._submitter.close()

    def _run(self) -> SessionOutcome:
        self.state = SessionStatus.FETCHING
        try:
            stream = self._fetcher.fetch(self._record)
        except FetchError as exc:
            log_event(logger, logging.ERROR, "fetch_failed", source=self._source, error=str(exc))
            return self._finish(SessionStatus.ERROR, error=str(exc))

        self.state = SessionStatus.STREAMING
        try:
            truncated = self._stream(stream)
        except StreamReadError as exc:
            log_event(
                logger,
                logging.ERROR,
                "stream_read_failed",
                source=self._source,
                lines_processed=self._lines_processed,
                error=str(exc),
            )
            self._final_flush()
            return self._finish(SessionStatus.ERROR, error=str(exc))
        finally:
            stream.close()

        self._final_flush()
        return self._finish(SessionStatus.TRUNCATED if truncated else SessionStatus.DONE)

    def _stream(self, stream: ObjectStream) -> bool:
        """
        Drive the line loop. Returns True when stopped early on low budget.
        """

        check_interval = self._settings.budget_check_interval_lines
        for raw_line in stream.iter_lines():
            self._lines_processed += 1
            line = raw_line.decode("utf-8", errors="replace")
            if self._settings.debug:
                logger.debug("Log line %d: %s", self._lines_processed, line)

            self._ingest_line(line)

            if self._batch.should_flush():
                self.state = SessionStatus.FLUSHING
                self._flush(final=False)
                self.state = SessionStatus.STREAMING

            if self._lines_processed % check_interval == 0 and self._budget_exhausted():
                return True
        return False

    def _ingest_line(self, line: str) -> None:
        try:
            parsed = self._parser.parse(line)
        except LineFormatError as exc:
            self._lines_skipped += 1
            log_event(
                logger,
                logging.WARNING,
                "line_skipped",
                source=self._source,
                line_number=self._lines_processed,
                error=str(exc),
            )
            return

        if parsed.timestamp_error is not None:
            self._timestamp_errors += 1
            log_event(
                logger,
                logging.WARNING,
                "timestamp_parse_failed",
                source=self._source,
                line_number=self._lines_processed,
                error=str(parsed.timestamp_error),
            )

        if self._settings.debug:
            logger.debug("Queueing document for indexing: %s", parsed.document)
        self._batch.add(parsed.document)

    def _budget_exhausted(self) -> bool:
        warning = self._monitor.check()
        if warning is None:
            return False

        if not self._budget_warned:
            self._budget_warned = True
            self._log_budget_warning(warning)
        return self._settings.truncate_on_low_budget

    def _log_budget_warning(self, warning: TimeBudgetWarning) -> None:
        log_event(
            logger,
            logging.WARNING,
            "time_budget_low",
            source=self._source,
            remaining_ms=warning.remaining_ms,
            threshold_ms=warning.threshold_ms,
            lines_processed=self._lines_processed,
            truncate=self._settings.truncate_on_low_budget,
        )

    def _final_flush(self) -> None:
        if self._batch.is_empty:
            return
        self.state = SessionStatus.FINAL_FLUSH
        self._flush(final=True)

    def _flush(self, *, final: bool) -> None:
        documents = self._batch.drain()
        self._flushes += 1
        self._documents_submitted += len(documents)
        logger.info(
            "Bulk indexing source=%s documents=%d final=%s",
            self._source,
            len(documents),
            final,
        )

        try:
            result = self._submitter.submit(documents)
        except IndexingBackendError as exc:
            self._documents_failed += len(documents)
            log_event(
                logger,
                logging.ERROR,
                "bulk_indexing_failed",
                source=self._source,
                documents=len(documents),
                final=final,
                error=str(exc),
            )
            return

        if result.index_name not in self._index_names:
            self._index_names.append(result.index_name)
        self._documents_created += result.created_count
        self._documents_failed += result.missing_count

        if result.is_partial_failure:
            logger.warning(
                "Some documents haven't been created source=%s index=%s missing=%d",
                self._source,
                result.index_name,
                result.missing_count,
            )
            for failure in result.failures:
                log_event(
                    logger,
                    logging.WARNING,
                    "document_not_indexed",
                    source=self._source,
                    index=result.index_name,
                    position=failure.position,
                    status=failure.status,
                    error_type=failure.error_type,
                    reason=failure.reason,
                )

    def _finish(self, status: SessionStatus, *, error: str | None = None) -> SessionOutcome:
        self.state = status
        outcome = SessionOutcome(
            bucket=self._record.bucket,
            key=self._record.key,
            status=status,
            lines_processed=self._lines_processed,
            lines_skipped=self._lines_skipped,
            timestamp_errors=self._timestamp_errors,
            documents_submitted=self._documents_submitted,
            documents_created=self._documents_created,
            documents_failed=self._documents_failed,
            flushes=self._flushes,
            error=error,
            index_names=tuple(self._index_names),
        )
        log_event(
            logger,
            logging.INFO if status is SessionStatus.DONE else logging.WARNING,
            "session_finished",
            source=self._source,
            status=status.value,
            lines_processed=outcome.lines_processed,
            lines_skipped=outcome.lines_skipped,
            documents_submitted=outcome.documents_submitted,
            documents_failed=outcome.documents_failed,
        )
        return outcome
