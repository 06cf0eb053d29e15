from __future__ import annotations

from dataclasses import replace

from app.domain.ingestion import SessionStatus
from app.ingestion.time_budget import TimeBudgetMonitor
from app.services.log_ingestion_service import LogIngestionService
from tests.fakes import FakeFetcher, FakeStream, FakeSubmitter, make_line


def _service(settings, fetcher, submitters):
    return LogIngestionService(
        settings=settings,
        fetcher=fetcher,
        submitter_factory=lambda: submitters.append(FakeSubmitter()) or submitters[-1],
    )


def test_fetch_failure_does_not_stop_sibling_records(record, settings) -> None:
    missing = replace(record, key="missing.log")
    present = replace(record, key="present.log")
    fetcher = FakeFetcher({"present.log": FakeStream([make_line(0), make_line(1)])})
    submitters: list[FakeSubmitter] = []

    outcomes = _service(settings, fetcher, submitters).process_records([missing, present])

    assert [outcome.status for outcome in outcomes] == [SessionStatus.ERROR, SessionStatus.DONE]
    assert outcomes[1].documents_submitted == 2
    assert fetcher.fetched == ["missing.log", "present.log"]


def test_each_record_gets_its_own_submitter(record, settings) -> None:
    first = replace(record, key="a.log")
    second = replace(record, key="b.log")
    fetcher = FakeFetcher({"a.log": FakeStream([make_line(0)]), "b.log": FakeStream([make_line(1)])})
    submitters: list[FakeSubmitter] = []

    _service(settings, fetcher, submitters).process_records([first, second])

    assert len(submitters) == 2
    assert all(submitter.closed for submitter in submitters)
    assert [len(submitter.batches) for submitter in submitters] == [1, 1]


def test_non_create_events_are_skipped(record, settings) -> None:
    removed = replace(record, event_name="ObjectRemoved:Delete")
    fetcher = FakeFetcher()

    outcomes = _service(settings, fetcher, []).process_records([removed])

    assert outcomes[0].status is SessionStatus.SKIPPED
    assert fetcher.fetched == []


def test_unexpected_error_becomes_error_outcome(record, settings) -> None:
    class ExplodingFetcher:
        def fetch(self, _record):
            raise RuntimeError("boom")

    outcomes = _service(settings, ExplodingFetcher(), []).process_records([record])

    assert outcomes[0].status is SessionStatus.ERROR
    assert outcomes[0].error == "boom"


def test_exhausted_budget_truncates_remaining_records(record, settings) -> None:
    fetcher = FakeFetcher({record.key: FakeStream([make_line(0)])})
    monitor = TimeBudgetMonitor(lambda: 0, initial_delay_ms=0)

    outcomes = _service(settings, fetcher, []).process_records([record], monitor=monitor)

    assert outcomes[0].status is SessionStatus.TRUNCATED
    assert fetcher.fetched == []
