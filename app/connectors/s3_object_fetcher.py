"""
app/connectors/s3_object_fetcher.py

S3 byte-stream fetch for notified log objects.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import IngestionSettings
from app.domain.ingestion import NotificationRecord
from app.ingestion.errors import FetchError, StreamReadError

logger = logging.getLogger(__name__)


class ObjectStream(Protocol):
    def iter_lines(self) -> Iterator[bytes]:
        ...

    def close(self) -> None:
        ...


class ObjectFetcher(Protocol):
    def fetch(self, record: NotificationRecord) -> ObjectStream:
        ...


class S3ObjectStream:
    """
    Line iterator over a botocore StreamingBody.
    """

    def __init__(self, body: Any, *, source: str) -> None:
        self._body = body
        self._source = source

    def iter_lines(self) -> Iterator[bytes]:
        try:
            yield from self._body.iter_lines()
        except (BotoCoreError, OSError) as exc:
            raise StreamReadError(f"{self._source}: stream read failed: {exc}") from exc

    def close(self) -> None:
        self._body.close()


class S3ObjectFetcher:
    """
    Fetches objects with static credentials when configured, otherwise with
    the ambient credential chain (instance or execution role).
    """

    def __init__(
        self,
        *,
        region: str,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        if client is not None:
            self._client = client
        elif aws_access_key_id and aws_secret_access_key:
            logger.debug("S3 auth with static access key region=%s", region)
            self._client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=aws_access_key_id,
                aws_secret_access_key=aws_secret_access_key,
            )
        else:
            logger.debug("S3 auth with ambient role credentials region=%s", region)
            self._client = boto3.client("s3", region_name=region)

    @classmethod
    def from_settings(cls, settings: IngestionSettings) -> "S3ObjectFetcher":
        return cls(
            region=settings.region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )

    def fetch(self, record: NotificationRecord) -> S3ObjectStream:
        """
        Open the object's byte stream.

        Raises FetchError on any client or transport failure.
        """

        source = f"s3://{record.bucket}/{record.key}"
        params: dict[str, str] = {"Bucket": record.bucket, "Key": record.key}
        if record.version_id:
            params["VersionId"] = record.version_id

        try:
            response = self._client.get_object(**params)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "unknown")
            raise FetchError(f"{source}: get_object failed code={code}") from exc
        except BotoCoreError as exc:
            raise FetchError(f"{source}: get_object failed: {exc}") from exc

        return S3ObjectStream(response["Body"], source=source)
