"""Recording record, materialized once per ended session."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from livecast.shared.utils.timeutil import utc_now

from .lifecycle_states import RecordingStatus, SessionVisibility
from .schema_utils import parse_mongo_datetime


class Recording(BaseModel):
    recording_id: str
    stream_id: str  # session_id of the originating session
    creator_id: str

    title: str | None = None
    visibility: SessionVisibility = SessionVisibility.PUBLIC

    status: RecordingStatus = RecordingStatus.PENDING

    # Provider asset
    provider_asset_id: str | None = None
    provider_playback_id: str | None = None
    playback_url: str | None = None
    download_url: str | None = None
    duration_seconds: float | None = None
    file_size_bytes: int | None = None
    resolution: str | None = None

    # Copied from the session
    stream_started_at: datetime | None = None
    stream_ended_at: datetime | None = None
    peak_live_viewers: int = 0

    view_count: int = 0

    # Moderation
    is_deleted: bool = False
    deleted_at: datetime | None = None
    deleted_by: str | None = None
    is_hidden: bool = False
    hidden_reason: str | None = None

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    ready_at: datetime | None = None

    # Version control for optimistic locking
    version: int = Field(default=1)

    @field_validator(
        "stream_started_at",
        "stream_ended_at",
        "deleted_at",
        "created_at",
        "updated_at",
        "ready_at",
        mode="before",
    )
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        return parse_mongo_datetime(v)


__all__ = ["Recording"]
