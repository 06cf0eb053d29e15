"""
app/connectors package marker.
"""

from app.connectors.s3_object_fetcher import ObjectFetcher, ObjectStream, S3ObjectFetcher, S3ObjectStream

__all__ = [
    "ObjectFetcher",
    "ObjectStream",
    "S3ObjectFetcher",
    "S3ObjectStream",
]
