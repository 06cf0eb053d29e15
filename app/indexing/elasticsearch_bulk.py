"""
app/indexing/elasticsearch_bulk.py

Bulk submitter for Elasticsearch-compatible backends.

One batch is one `POST /_bulk` call. The backend may index some documents and
reject others; that is reported per document, not as a failed call.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any, Protocol

import requests

from app.config import IngestionSettings
from app.domain.access_log import ELBAccessLogDocument
from app.domain.ingestion import PartialIndexFailure, SubmissionResult
from app.ingestion.errors import IndexingBackendError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
NDJSON_CONTENT_TYPE = "application/x-ndjson"


class BulkSubmitter(Protocol):
    def submit(self, batch: Sequence[ELBAccessLogDocument]) -> SubmissionResult:
        ...

    def close(self) -> None:
        ...


def daily_index_name(prefix: str, moment: datetime) -> str:
    """
    Name of the index for the UTC calendar day of `moment`, e.g. logstash-2015.05.13.
    """

    return f"{prefix}-{moment.astimezone(timezone.utc):%Y.%m.%d}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ElasticsearchBulkSubmitter:
    """
    Sends batches with the bulk protocol and reconciles per-document outcomes.
    """

    def __init__(
        self,
        *,
        elk_url: str,
        index_prefix: str = "logstash",
        document_type: str = "elblog",
        timeout_seconds: float = 30.0,
        max_retries: int = 0,
        backoff_initial_seconds: float = 0.5,
        backoff_multiplier: float = 2.0,
        auth: tuple[str, str] | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._bulk_url = f"{elk_url.rstrip('/')}/_bulk"
        self._index_prefix = index_prefix
        self._document_type = document_type
        self._timeout_seconds = timeout_seconds
        self._max_retries = max(0, max_retries)
        self._backoff_initial_seconds = backoff_initial_seconds
        self._backoff_multiplier = backoff_multiplier
        self._session = session or requests.Session()
        if auth is not None:
            self._session.auth = auth
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: IngestionSettings,
        *,
        session: requests.Session | None = None,
    ) -> "ElasticsearchBulkSubmitter":
        auth = None
        if settings.elk_username and settings.elk_password:
            auth = (settings.elk_username, settings.elk_password)
        return cls(
            elk_url=settings.elk_url,
            index_prefix=settings.index_prefix,
            document_type=settings.document_type,
            timeout_seconds=settings.http_timeout_seconds,
            max_retries=settings.bulk_max_retries,
            backoff_initial_seconds=settings.backoff_initial_seconds,
            backoff_multiplier=settings.backoff_multiplier,
            auth=auth,
            session=session,
        )

    def current_index_name(self) -> str:
        return daily_index_name(self._index_prefix, self._clock())

    def submit(self, batch: Sequence[ELBAccessLogDocument]) -> SubmissionResult:
        """
        Index a whole batch in one bulk call.

        Raises IndexingBackendError when the call itself fails; the batch is
        then lost for this invocation.
        """

        if not batch:
            raise ValueError("Cannot submit an empty batch.")

        index_name = self.current_index_name()
        body = self._build_body(batch, index_name)
        response = self._post(body)

        try:
            payload = response.json()
        except ValueError as exc:
            raise IndexingBackendError("Bulk response was not valid JSON.") from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise IndexingBackendError("Bulk response is missing the items list.")

        return self._reconcile(payload, submitted=len(batch), index_name=index_name)

    def close(self) -> None:
        self._session.close()

    def _build_body(self, batch: Sequence[ELBAccessLogDocument], index_name: str) -> str:
        action_meta: dict[str, str] = {"_index": index_name}
        if self._document_type:
            action_meta["_type"] = self._document_type
        action_line = json.dumps({"index": action_meta}, separators=(",", ":"))

        lines: list[str] = []
        for document in batch:
            lines.append(action_line)
            lines.append(json.dumps(document.to_source(), separators=(",", ":")))
        # The bulk API requires a trailing newline.
        return "\n".join(lines) + "\n"

    def _post(self, body: str) -> requests.Response:
        """
        POST the bulk body with bounded retry on transient failures.
        """

        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            try:
                response = self._session.post(
                    self._bulk_url,
                    data=body.encode("utf-8"),
                    headers={"Content-Type": NDJSON_CONTENT_TYPE},
                    timeout=self._timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "Bulk request rejected status=%s url=%s error=%s",
                        status_code,
                        self._bulk_url,
                        exc,
                    )
                    raise IndexingBackendError(f"Bulk request rejected with status {status_code}.") from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc

            if attempt >= self._max_retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "Bulk request retry attempt=%s/%s wait_seconds=%.2f url=%s",
                attempt + 1,
                self._max_retries,
                backoff_seconds,
                self._bulk_url,
            )
            time.sleep(backoff_seconds)

        raise IndexingBackendError(
            f"Bulk request failed after {self._max_retries + 1} attempt(s): {last_error}"
        ) from last_error

    @staticmethod
    def _reconcile(payload: dict[str, Any], *, submitted: int, index_name: str) -> SubmissionResult:
        items = payload["items"]
        created: list[bool] = []
        failures: list[PartialIndexFailure] = []

        for position in range(submitted):
            if position >= len(items):
                created.append(False)
                failures.append(
                    PartialIndexFailure(
                        position=position,
                        status=None,
                        error_type=None,
                        reason="no item reported for document in bulk response",
                    )
                )
                continue

            item = items[position]
            outcome = next(iter(item.values()), None) if isinstance(item, dict) else None
            if not isinstance(outcome, dict):
                raise IndexingBackendError(f"Bulk response item {position} is malformed: {item!r}")
            status = outcome.get("status")
            if outcome.get("result") == "created" or status == 201:
                created.append(True)
                continue

            created.append(False)
            error = outcome.get("error")
            if isinstance(error, dict):
                error_type = error.get("type")
                reason = str(error.get("reason") or error_type or "unknown error")
            elif error:
                error_type = None
                reason = str(error)
            else:
                error_type = None
                reason = f"document not created (result={outcome.get('result')})"
            failures.append(
                PartialIndexFailure(
                    position=position,
                    status=status if isinstance(status, int) else None,
                    error_type=error_type,
                    reason=reason,
                )
            )

        return SubmissionResult(
            index_name=index_name,
            submitted=submitted,
            created=tuple(created),
            failures=tuple(failures),
            took_ms=payload.get("took") if isinstance(payload.get("took"), int) else None,
        )
