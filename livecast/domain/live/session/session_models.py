"""Session domain models."""

from datetime import datetime

from pydantic import BaseModel, Field

from livecast.schemas import LiveSession, SessionMode, SessionStatus, SessionVisibility


class SessionResponse(BaseModel):
    """Session response model. Never carries the stream key."""

    session_id: str
    provider_session_id: str
    creator_id: str

    title: str | None = None
    visibility: SessionVisibility
    mode: SessionMode

    status: SessionStatus
    terminated_early: bool = False

    viewer_count: int = 0
    peak_viewer_count: int = 0
    playback_url: str | None = None

    # Timestamps
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None = None
    ended_at: datetime | None = None

    @classmethod
    def from_session(cls, session: LiveSession) -> "SessionResponse":
        return cls.model_validate(session.model_dump(include=set(cls.model_fields)))


class SessionCreatedResponse(SessionResponse):
    """Returned to the creator only: includes the ingest credentials."""

    ingest_url: str | None = None
    stream_key: str | None = None

    @classmethod
    def from_session(cls, session: LiveSession) -> "SessionCreatedResponse":
        return cls.model_validate(session.model_dump(include=set(cls.model_fields)))


class SessionCreateParams(BaseModel):
    """Parameters for creating a session."""

    creator_id: str
    title: str = Field(..., min_length=1, max_length=200)
    visibility: SessionVisibility = SessionVisibility.PUBLIC
    mode: SessionMode = SessionMode.VIDEO


class SessionStatusResponse(BaseModel):
    session: SessionResponse
    is_active: bool = False
    is_healthy: bool = False


class SessionEndResult(BaseModel):
    session: SessionResponse
    recording_id: str | None = None
    recording_created: bool = False
