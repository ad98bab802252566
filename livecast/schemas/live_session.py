"""Live session record."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from livecast.shared.utils.timeutil import utc_now

from .lifecycle_states import SessionMode, SessionStatus, SessionVisibility
from .schema_utils import parse_mongo_datetime


class LiveSession(BaseModel):
    """One live broadcast attempt by a creator.

    `provider_session_id` is the stream identifier assigned by the video provider and
    the only key webhooks carry.
    """

    session_id: str
    provider_session_id: str
    creator_id: str

    title: str | None = None
    visibility: SessionVisibility = SessionVisibility.PUBLIC
    mode: SessionMode = SessionMode.VIDEO

    status: SessionStatus = SessionStatus.CONFIGURING
    terminated_early: bool = False

    viewer_count: int = 0
    peak_viewer_count: int = 0

    # Provider endpoints
    ingest_url: str | None = None
    stream_key: str | None = None
    playback_url: str | None = None

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    started_at: datetime | None = None
    ended_at: datetime | None = None

    # Version control for optimistic locking
    version: int = Field(default=1)

    @field_validator("created_at", "updated_at", "started_at", "ended_at", mode="before")
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        """Parse MongoDB Extended JSON datetime format."""
        return parse_mongo_datetime(v)


__all__ = ["LiveSession"]
