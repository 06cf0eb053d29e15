"""
app/api/routers package marker.
"""

from app.api.routers.s3_events import router as s3_events_router

__all__ = ["s3_events_router"]
