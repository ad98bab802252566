"""Webhook schemas for external providers."""

from livecast.api.webhooks.schemas.provider import (
    AssetFailedEvent,
    AssetProcessingEvent,
    AssetReadyEvent,
    ProviderEvent,
    StreamIdleEvent,
    StreamStartedEvent,
    UnknownEvent,
    parse_provider_event,
)

__all__ = [
    "AssetFailedEvent",
    "AssetProcessingEvent",
    "AssetReadyEvent",
    "ProviderEvent",
    "StreamIdleEvent",
    "StreamStartedEvent",
    "UnknownEvent",
    "parse_provider_event",
]
