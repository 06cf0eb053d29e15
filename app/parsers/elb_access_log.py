"""
app/parsers/elb_access_log.py

Positional parser for classic ELB access log lines.

Wire format (one entry per line):

    timestamp elb client:port backend:port request_processing_time
    backend_processing_time response_processing_time elb_status_code
    backend_status_code received_bytes sent_bytes "method url protocol"
    "user_agent" ssl_cipher ssl_protocol
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from app.domain.access_log import ELBAccessLogDocument
from app.ingestion.errors import LineFormatError, TimestampParseError

INDEX_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_MIN_POSITIONAL_FIELDS = 14
_QUOTED_SEPARATOR = '" "'

_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


@dataclass(frozen=True)
class ParsedLine:
    """
    Parser output: the document plus a recoverable timestamp error, if any.
    """

    document: ELBAccessLogDocument
    timestamp_error: TimestampParseError | None = None


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp into an aware UTC datetime.

    Fractional seconds of any precision are accepted and truncated to
    microseconds. An explicit offset is required.
    """

    match = _RFC3339_RE.match(value)
    if match is None:
        raise TimestampParseError(value, "not an RFC3339 timestamp")

    fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset in ("Z", "z"):
        offset = "+00:00"

    try:
        parsed = datetime.fromisoformat(f"{match.group('base').replace('t', 'T')}.{fraction}{offset}")
    except ValueError as exc:
        raise TimestampParseError(value, str(exc)) from exc
    return parsed.astimezone(timezone.utc)


def format_index_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime(INDEX_TIMESTAMP_FORMAT)


class ELBAccessLogParser:
    """
    Turns one raw access log line into an ELBAccessLogDocument.
    """

    def parse(self, line: str) -> ParsedLine:
        """
        Parse one line.

        Raises LineFormatError when the line lacks the positional fields or the
        two trailing quoted segments. A malformed timestamp does not raise; it
        is returned on the ParsedLine and the document carries no timestamp.
        """

        text = line.rstrip("\r\n")
        if not text.strip():
            raise LineFormatError("empty line")

        fields = text.split(" ")
        if len(fields) < _MIN_POSITIONAL_FIELDS:
            raise LineFormatError(
                f"expected at least {_MIN_POSITIONAL_FIELDS} space separated fields, got {len(fields)}"
            )

        quoted_segments = text.split(_QUOTED_SEPARATOR)
        if len(quoted_segments) < 2:
            raise LineFormatError("missing quoted user agent segment")

        agent_and_tail = quoted_segments[1].split('"')
        if len(agent_and_tail) < 2:
            raise LineFormatError("unterminated user agent segment")

        ssl_parts = agent_and_tail[1].split(" ")
        if len(ssl_parts) < 3:
            raise LineFormatError("missing ssl cipher/protocol fields")

        timestamp: str | None = None
        timestamp_error: TimestampParseError | None = None
        try:
            timestamp = format_index_timestamp(parse_rfc3339(fields[0]))
        except TimestampParseError as exc:
            timestamp_error = exc

        document = ELBAccessLogDocument(
            timestamp=timestamp,
            elb=fields[1],
            client=fields[2],
            backend=fields[3],
            request_processing_time=fields[4],
            backend_processing_time=fields[5],
            response_processing_time=fields[6],
            elb_status_code=fields[7],
            backend_status_code=fields[8],
            received_bytes=fields[9],
            sent_bytes=fields[10],
            request_type=fields[11].strip('"'),
            request_url=fields[12],
            request_protocol=fields[13].strip('"'),
            user_agent=agent_and_tail[0],
            ssl_cipher=ssl_parts[1],
            ssl_protocol=ssl_parts[2],
        )
        return ParsedLine(document=document, timestamp_error=timestamp_error)
