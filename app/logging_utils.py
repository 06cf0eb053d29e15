"""
Structured logging helpers for ingestion workflows.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_QUIET_LIBRARY_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3")


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def configure_logging(*, debug: bool = False) -> None:
    """
    Configure root logging for the process.

    DEBUG wins when `debug` is set; otherwise LOG_LEVEL (default INFO). The
    Lambda runtime pre-installs a root handler, so only the level is adjusted
    when handlers already exist. AWS SDK and HTTP transport loggers stay at
    INFO or above so debug runs show ingestion detail only.
    """

    if debug:
        level = logging.DEBUG
    else:
        log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        level = getattr(logging, log_level, logging.INFO)

    for name in _QUIET_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format=_LOG_FORMAT)

