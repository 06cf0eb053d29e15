"""
app/parsers package marker.
"""

from app.parsers.elb_access_log import ELBAccessLogParser, ParsedLine, parse_rfc3339

__all__ = ["ELBAccessLogParser", "ParsedLine", "parse_rfc3339"]
