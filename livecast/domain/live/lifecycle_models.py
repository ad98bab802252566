"""Types shared by the session and recording state machines."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from livecast.app_config import get_app_environ_config

R = TypeVar("R")


class LifecycleEvent(str, Enum):
    SESSION_STARTED = "session-started"
    SESSION_IDLE = "session-idle"
    SESSION_TERMINATED = "session-terminated"  # creator ended the session
    ASSET_READY = "asset-ready"
    ASSET_FAILED = "asset-failed"
    MARK_PROCESSING = "mark-processing"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Transition(Generic[R]):
    """Result of applying one event to one record.

    `record` is the next record when `changed`, otherwise the input record.
    `materialize` asks the caller to create the recording for an ended session.
    """

    record: R
    changed: bool
    reason: str
    materialize: bool = False

    @classmethod
    def unchanged(cls, record: R, reason: str) -> "Transition[R]":
        return cls(record=record, changed=False, reason=reason)


class AssetDetails(BaseModel):
    """Normalized asset metadata carried by asset-ready / asset-failed events."""

    provider_asset_id: str
    source_session_id: str | None = None  # provider stream id the asset was recorded from
    playback_id: str | None = None
    playback_url: str | None = None
    download_url: str | None = None
    duration_seconds: float | None = None
    file_size_bytes: int | None = None
    resolution: str | None = None
    error_message: str | None = None
    metadata_invalid: bool = False


class RecordingPolicy(BaseModel):
    min_duration_seconds: float = Field(default=60, ge=0)
    max_duration_seconds: float = Field(default=43200, gt=0)

    @classmethod
    def from_config(cls) -> "RecordingPolicy":
        app_config = get_app_environ_config()
        return cls(
            min_duration_seconds=app_config.RECORDING_MIN_DURATION_SECONDS,
            max_duration_seconds=app_config.RECORDING_MAX_DURATION_SECONDS,
        )


__all__ = ["AssetDetails", "LifecycleEvent", "RecordingPolicy", "Transition"]
