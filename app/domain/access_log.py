"""
app/domain/access_log.py

Fixed-schema document for one parsed ELB access log line.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ELB_LOG_NAME = "elb_access_log"


@dataclass(frozen=True)
class ELBAccessLogDocument:
    """
    One ELB access log entry ready for indexing.

    `timestamp` is already rendered in the index timestamp format, or None
    when the source timestamp could not be parsed.
    """

    timestamp: str | None
    elb: str
    client: str
    backend: str
    request_processing_time: str
    backend_processing_time: str
    response_processing_time: str
    elb_status_code: str
    backend_status_code: str
    received_bytes: str
    sent_bytes: str
    request_type: str
    request_url: str
    request_protocol: str
    user_agent: str
    ssl_cipher: str
    ssl_protocol: str
    log_name: str = ELB_LOG_NAME

    def to_source(self) -> dict[str, Any]:
        """
        Render the document body with the index field names.
        """

        return {
            "@log_name": self.log_name,
            "@timestamp": self.timestamp,
            "elb": self.elb,
            "client": self.client,
            "backend": self.backend,
            "requestprocessingtime": self.request_processing_time,
            "backendprocessingtime": self.backend_processing_time,
            "responseprocessingtime": self.response_processing_time,
            "elbstatuscode": self.elb_status_code,
            "backendstatuscode": self.backend_status_code,
            "receivedbytes": self.received_bytes,
            "sentbytes": self.sent_bytes,
            "requesttype": self.request_type,
            "requesturl": self.request_url,
            "requestprotocol": self.request_protocol,
            "useragent": self.user_agent,
            "sslcipher": self.ssl_cipher,
            "sslprotocol": self.ssl_protocol,
        }
