"""Schemas for the live video provider REST API (Livepeer-style)."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from livecast.schemas import SessionMode


class TranscodeProfile(BaseModel):
    name: str
    bitrate: int
    fps: int = 30
    width: int
    height: int


DEFAULT_PROFILES: list[TranscodeProfile] = [
    TranscodeProfile(name="720p", bitrate=2_000_000, width=1280, height=720),
    TranscodeProfile(name="480p", bitrate=1_000_000, width=854, height=480),
    TranscodeProfile(name="360p", bitrate=500_000, width=640, height=360),
]


class ProviderSessionConfig(BaseModel):
    """What we ask the provider for when allocating a stream."""

    name: str = Field(..., description="Stream name shown in the provider dashboard")
    mode: SessionMode = SessionMode.VIDEO
    record: bool = Field(default=True, description="Ask the provider to record the stream")


class CreateStreamBody(BaseModel):
    name: str
    record: bool = True
    profiles: list[TranscodeProfile] = Field(default_factory=list)


class ProviderStream(BaseModel):
    """Stream object returned by the provider."""

    id: str
    stream_key: str = Field(
        ...,
        alias="streamKey",
        validation_alias=AliasChoices("streamKey", "stream_key"),
    )
    playback_id: str = Field(
        ...,
        alias="playbackId",
        validation_alias=AliasChoices("playbackId", "playback_id"),
    )
    is_active: bool = Field(
        default=False,
        alias="isActive",
        validation_alias=AliasChoices("isActive", "is_active"),
    )
    is_healthy: bool | None = Field(
        default=None,
        alias="isHealthy",
        validation_alias=AliasChoices("isHealthy", "is_healthy"),
    )
    viewer_count: int | None = Field(
        default=None,
        alias="viewerCount",
        validation_alias=AliasChoices("viewerCount", "viewer_count"),
    )

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True, extra="ignore")


class ProviderSession(BaseModel):
    provider_session_id: str
    stream_key: str
    ingest_url: str
    playback_url: str


class ProviderSessionStatus(BaseModel):
    is_active: bool = False
    is_healthy: bool = False
    viewer_count: int = 0


__all__ = [
    "CreateStreamBody",
    "DEFAULT_PROFILES",
    "ProviderSession",
    "ProviderSessionConfig",
    "ProviderSessionStatus",
    "ProviderStream",
    "TranscodeProfile",
]
