"""
app/schemas/s3_event.py

S3 event notification payload (the `Records` envelope delivered to Lambda,
or posted to the HTTP endpoint).
"""

from __future__ import annotations

from datetime import datetime
from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field

from app.domain.ingestion import NotificationRecord


class _S3EventModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class S3ObjectPayload(_S3EventModel):
    key: str
    size: int = 0
    e_tag: str | None = Field(default=None, alias="eTag")
    version_id: str | None = Field(default=None, alias="versionId")
    sequencer: str | None = None


class S3BucketPayload(_S3EventModel):
    name: str
    arn: str | None = None


class S3EntityPayload(_S3EventModel):
    schema_version: str | None = Field(default=None, alias="s3SchemaVersion")
    configuration_id: str | None = Field(default=None, alias="configurationId")
    bucket: S3BucketPayload
    object: S3ObjectPayload


class S3EventRecordPayload(_S3EventModel):
    event_version: str | None = Field(default=None, alias="eventVersion")
    event_source: str | None = Field(default=None, alias="eventSource")
    aws_region: str | None = Field(default=None, alias="awsRegion")
    event_time: datetime = Field(..., alias="eventTime")
    event_name: str = Field(..., alias="eventName")
    s3: S3EntityPayload

    def to_notification_record(self) -> NotificationRecord:
        # Keys arrive URL-encoded, with spaces as '+'.
        return NotificationRecord(
            bucket=self.s3.bucket.name,
            key=unquote_plus(self.s3.object.key),
            event_name=self.event_name,
            event_time=self.event_time,
            size=self.s3.object.size,
            etag=self.s3.object.e_tag,
            version_id=self.s3.object.version_id,
            region=self.aws_region,
        )


class S3EventPayload(_S3EventModel):
    records: list[S3EventRecordPayload] = Field(default_factory=list, alias="Records")

    def to_notification_records(self) -> list[NotificationRecord]:
        return [record.to_notification_record() for record in self.records]
