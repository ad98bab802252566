from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from livecast.schemas import SessionMode, SessionStatus, SessionVisibility

from .serializers import serialize_optional_utc_datetime, serialize_utc_datetime


class CreateSessionIn(BaseModel):
    title: str = Field(min_length=1, max_length=200, description="Title of the live session")
    visibility: SessionVisibility = Field(default=SessionVisibility.PUBLIC, description="Who may watch")
    mode: SessionMode = Field(default=SessionMode.VIDEO, description="Broadcast mode")
    creator_id: str | None = Field(
        default=None, description="Creator to stream as; defaults to the authenticated user"
    )


class EndSessionIn(BaseModel):
    session_id: str = Field(description="Session to terminate")


class RefreshSessionIn(BaseModel):
    session_id: str = Field(description="Session to refresh from the provider")


class SessionOut(BaseModel):
    session_id: str
    creator_id: str
    title: str | None = None
    visibility: SessionVisibility
    mode: SessionMode
    status: SessionStatus
    terminated_early: bool = False
    viewer_count: int = 0
    peak_viewer_count: int = 0
    playback_url: str | None = None
    created_at: datetime
    started_at: datetime | None = None
    ended_at: datetime | None = None

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str:
        return serialize_utc_datetime(dt)

    @field_serializer("started_at", "ended_at")
    def serialize_optional_dates(self, dt: datetime | None) -> str | None:
        return serialize_optional_utc_datetime(dt)


class CreateSessionOut(SessionOut):
    ingest_url: str | None = Field(default=None, description="RTMP ingest endpoint")
    stream_key: str | None = Field(default=None, description="Secret stream key, shown once to the creator")


class EndSessionOut(BaseModel):
    session: SessionOut
    recording_id: str | None = None
    recording_created: bool = False


class SessionStatusOut(BaseModel):
    session: SessionOut
    is_active: bool
    is_healthy: bool
