from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from livecast.schemas import RecordingStatus

from .serializers import serialize_optional_utc_datetime


class DeleteRecordingIn(BaseModel):
    recording_id: str = Field(description="Recording to soft-delete")


class RecordingOut(BaseModel):
    recording_id: str
    stream_id: str
    creator_id: str
    status: RecordingStatus
    is_deleted: bool = False
    deleted_at: datetime | None = None

    @field_serializer("deleted_at")
    def serialize_deleted_at(self, dt: datetime | None) -> str | None:
        return serialize_optional_utc_datetime(dt)
