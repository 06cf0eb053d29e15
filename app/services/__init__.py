"""
app/services package marker.
"""

from app.services.ingestion_session import IngestionSession
from app.services.log_ingestion_service import LogIngestionService, get_log_ingestion_service

__all__ = [
    "IngestionSession",
    "LogIngestionService",
    "get_log_ingestion_service",
]
