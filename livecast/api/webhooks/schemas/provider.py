"""Live video provider webhook event schemas.

Events arrive as `{"event": <kind>, "stream": {...}}` or `{"event": <kind>, "asset": {...}}`.
Every payload parses into exactly one of the event models below; anything that
is not a well-formed known event becomes `UnknownEvent`.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from livecast.domain.live.lifecycle_models import AssetDetails


class _ProviderModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProviderStreamRef(_ProviderModel):
    id: str = Field(..., min_length=1, description="Provider stream ID")
    name: str | None = None


class AssetStatus(_ProviderModel):
    phase: str | None = None
    progress: float | None = None
    error_message: str | None = Field(
        None, validation_alias=AliasChoices("errorMessage", "error_message")
    )


class AssetTrack(_ProviderModel):
    type: str
    width: int | None = None
    height: int | None = None


class AssetVideoSpec(_ProviderModel):
    duration: float | None = None
    bitrate: float | None = None
    tracks: list[AssetTrack] = Field(default_factory=list)


class AssetSource(_ProviderModel):
    type: str | None = None
    session_id: str | None = Field(None, validation_alias=AliasChoices("sessionId", "session_id"))


class ProviderAsset(_ProviderModel):
    id: str = Field(..., min_length=1, description="Provider asset ID")
    name: str | None = None
    playback_id: str | None = Field(None, validation_alias=AliasChoices("playbackId", "playback_id"))
    playback_url: str | None = Field(None, validation_alias=AliasChoices("playbackUrl", "playback_url"))
    download_url: str | None = Field(None, validation_alias=AliasChoices("downloadUrl", "download_url"))
    status: AssetStatus | None = None
    video_spec: AssetVideoSpec | None = Field(None, validation_alias=AliasChoices("videoSpec", "video_spec"))
    size: int | None = None
    source: AssetSource | None = None
    # Set when the provider sent an asset id but unusable metadata
    metadata_invalid: bool = False

    def resolution(self) -> str | None:
        if not self.video_spec:
            return None
        for track in self.video_spec.tracks:
            if track.type == "video" and track.width and track.height:
                return f"{track.width}x{track.height}"
        return None

    def to_asset_details(self, playback_base_url: str | None = None) -> AssetDetails:
        playback_url = self.playback_url
        if not playback_url and self.playback_id and playback_base_url:
            playback_url = f"{playback_base_url.rstrip('/')}/{self.playback_id}/index.m3u8"

        return AssetDetails(
            provider_asset_id=self.id,
            source_session_id=self.source.session_id if self.source else None,
            playback_id=self.playback_id,
            playback_url=playback_url,
            download_url=self.download_url,
            duration_seconds=self.video_spec.duration if self.video_spec else None,
            file_size_bytes=self.size,
            resolution=self.resolution(),
            error_message=self.status.error_message if self.status else None,
            metadata_invalid=self.metadata_invalid,
        )


class AssetProcessingEvent(_ProviderModel):
    """asset.created / asset.updated: the provider is working on the recording asset."""

    event: Literal["asset.created", "asset-created", "asset.updated", "asset-updated"]
    asset: ProviderAsset
    timestamp: int | None = None


class StreamStartedEvent(_ProviderModel):
    """stream.started: ingest began."""

    event: Literal["stream.started", "session-started"]
    stream: ProviderStreamRef
    timestamp: int | None = None


class StreamIdleEvent(_ProviderModel):
    """stream.idle: ingest stopped."""

    event: Literal["stream.idle", "session-idle"]
    stream: ProviderStreamRef
    timestamp: int | None = None


class AssetReadyEvent(_ProviderModel):
    """asset.ready: the recording asset is ready for playback."""

    event: Literal["asset.ready", "asset-ready"]
    asset: ProviderAsset
    timestamp: int | None = None


class AssetFailedEvent(_ProviderModel):
    """asset.failed: the provider could not process the recording."""

    event: Literal["asset.failed", "asset-failed"]
    asset: ProviderAsset
    timestamp: int | None = None


class UnknownEvent(BaseModel):
    """Any payload that is not a well-formed known event. Acknowledged and ignored."""

    event: str | None = None
    reason: str


KnownProviderEvent = Annotated[
    Union[StreamStartedEvent, StreamIdleEvent, AssetProcessingEvent, AssetReadyEvent, AssetFailedEvent],
    Field(discriminator="event"),
]

ProviderEvent = Union[
    StreamStartedEvent,
    StreamIdleEvent,
    AssetProcessingEvent,
    AssetReadyEvent,
    AssetFailedEvent,
    UnknownEvent,
]

_known_event_adapter: TypeAdapter[Any] = TypeAdapter(KnownProviderEvent)

_KNOWN_EVENT_NAMES = {
    "stream.started",
    "session-started",
    "stream.idle",
    "session-idle",
    "asset.created",
    "asset-created",
    "asset.updated",
    "asset-updated",
    "asset.ready",
    "asset-ready",
    "asset.failed",
    "asset-failed",
}


def parse_provider_event(data: Any) -> ProviderEvent:
    """Parse a decoded webhook body into a typed event; never raises."""
    if not isinstance(data, dict):
        return UnknownEvent(event=None, reason="payload is not an object")

    kind = data.get("event")
    if not isinstance(kind, str):
        return UnknownEvent(event=None, reason="missing event kind")

    if kind not in _KNOWN_EVENT_NAMES:
        return UnknownEvent(event=kind, reason="unsupported event kind")

    try:
        return _known_event_adapter.validate_python(data)
    except ValidationError as exc:
        salvaged = _salvage_asset_event(kind, data)
        if salvaged is not None:
            return salvaged
        return UnknownEvent(event=kind, reason=f"malformed payload: {exc.error_count()} error(s)")


def _salvage_asset_event(kind: str, data: dict) -> ProviderEvent | None:
    """Keep an asset event whose id is valid but whose metadata is not.

    The recording it refers to still has to reach a final state, so the event
    goes through with only the identifiers and `metadata_invalid` set.
    """
    asset = data.get("asset")
    if not isinstance(asset, dict):
        return None
    asset_id = asset.get("id")
    if not isinstance(asset_id, str) or not asset_id:
        return None

    try:
        source = AssetSource.model_validate(asset.get("source")) if asset.get("source") is not None else None
    except ValidationError:
        source = None

    stripped = ProviderAsset(id=asset_id, source=source, metadata_invalid=True)
    try:
        return _known_event_adapter.validate_python({"event": kind, "asset": stripped})
    except ValidationError:
        return None


__all__ = [
    "AssetFailedEvent",
    "AssetProcessingEvent",
    "AssetReadyEvent",
    "ProviderAsset",
    "ProviderEvent",
    "StreamIdleEvent",
    "StreamStartedEvent",
    "UnknownEvent",
    "parse_provider_event",
]
