"""Live video provider webhook endpoint.

Receives stream and asset notifications (at-least-once, possibly out of order)
and drives the session and recording lifecycles.

Event Types:
- stream.started: ingest began (CONFIGURING -> LIVE)
- stream.idle: ingest stopped (LIVE -> ENDED, recording created)
- asset.created / asset.updated: provider is processing the asset (PENDING -> PROCESSING)
- asset.ready: recording asset ready (PENDING/PROCESSING -> READY, or FAILED by policy)
- asset.failed: provider failed to process the asset (PENDING/PROCESSING -> FAILED)

Every accepted delivery is acknowledged with 200 so the provider does not retry
events we chose to ignore. Handlers are idempotent, so transient processing
failures are replayed in-process a bounded number of times before the ack
reports the error.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import time

import orjson
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import ORJSONResponse
from loguru import logger
from pydantic import BaseModel

from livecast.api.v1.dependency import get_recording_materializer, get_session_service
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
from livecast.app_config import get_app_environ_config
from livecast.domain.live.recording.recording_materializer import RecordingMaterializer
from livecast.domain.live.session.session_domain import SessionService
from livecast.shared.api.utils import api_failure
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])

SIGNATURE_TOLERANCE_SECONDS = 300


class WebhookOutcome(BaseModel):
    """What a delivery did; logged and returned to tests, not to the provider."""

    handled: bool
    action: str
    reason: str | None = None


class WebhookAck(BaseModel):
    received: bool = True
    error: str | None = None


def verify_provider_signature(
    payload: bytes,
    signature_header: str,
    signing_secret: str,
    tolerance_seconds: int = SIGNATURE_TOLERANCE_SECONDS,
    now: int | None = None,
) -> bool:
    """Verify an HMAC-SHA256 webhook signature.

    Header format: t=<unix seconds>,v1=<hex digest of "{t}.{raw body}">

    Returns:
        True if a signature matches and the timestamp is within tolerance
    """
    elements: dict[str, list[str]] = {}
    for element in signature_header.split(","):
        if "=" not in element:
            continue
        key, value = element.strip().split("=", 1)
        elements.setdefault(key, []).append(value)

    if "t" not in elements or "v1" not in elements:
        logger.warning("Webhook signature header missing t or v1")
        return False

    try:
        timestamp = int(elements["t"][0])
    except ValueError:
        logger.warning("Invalid timestamp in webhook signature: {}", elements["t"][0])
        return False

    current_time = int(time.time()) if now is None else now
    if abs(current_time - timestamp) > tolerance_seconds:
        logger.warning(
            "Webhook timestamp outside tolerance window: received={} current={}", timestamp, current_time
        )
        return False

    signed_payload = f"{timestamp}.".encode() + payload
    expected = hmac.new(signing_secret.encode(), signed_payload, hashlib.sha256).hexdigest()
    return any(hmac.compare_digest(expected, candidate) for candidate in elements["v1"])


def sign_payload(payload: bytes, signing_secret: str, timestamp: int) -> str:
    """Build the signature header the provider would send for `payload`."""
    digest = hmac.new(signing_secret.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


async def handle_provider_event(
    event: ProviderEvent,
    sessions: SessionService,
    materializer: RecordingMaterializer,
) -> WebhookOutcome:
    """Dispatch one parsed event. Unknown events and unmatched records are no-ops."""
    if isinstance(event, UnknownEvent):
        logger.info("Ignoring provider event {}: {}", event.event, event.reason)
        return WebhookOutcome(handled=False, action="ignored", reason=event.reason)

    if isinstance(event, (StreamStartedEvent, StreamIdleEvent)):
        if isinstance(event, StreamStartedEvent):
            result, _ = await sessions.on_stream_started(event.stream.id)
            action = "session_started"
        else:
            result, recording = await sessions.on_stream_idle(event.stream.id)
            action = "session_ended"
            if recording is not None:
                logger.info("Recording {} tracked for stream {}", recording.recording_id, event.stream.id)
        return WebhookOutcome(
            handled=result.applied,
            action=action if result.applied else "noop",
            reason=result.reason,
        )

    playback_base_url = get_app_environ_config().PROVIDER_PLAYBACK_BASE_URL
    asset = event.asset.to_asset_details(playback_base_url)

    if isinstance(event, AssetProcessingEvent):
        result = await materializer.mark_processing(asset)
    elif isinstance(event, AssetReadyEvent):
        result = await materializer.on_asset_ready(asset)
    elif isinstance(event, AssetFailedEvent):
        result = await materializer.on_asset_failed(asset)
    else:
        return WebhookOutcome(handled=False, action="ignored", reason="unsupported event")

    status = result.record.status if result.record is not None else None
    return WebhookOutcome(
        handled=result.applied,
        action=f"recording_{status}" if result.applied else "noop",
        reason=result.reason,
    )


async def process_provider_event(
    event: ProviderEvent,
    sessions: SessionService,
    materializer: RecordingMaterializer,
    *,
    max_attempts: int | None = None,
    base_delay: float | None = None,
) -> WebhookOutcome:
    """Handle one event, replaying it on transient failures.

    Replaying is safe because every handler is idempotent: a replayed idle event
    on an ended session only completes a missing recording. Non-retryable
    AppErrors are raised immediately.
    """
    app_config = get_app_environ_config()
    if max_attempts is None:
        max_attempts = app_config.WEBHOOK_MAX_PROCESSING_ATTEMPTS
    if base_delay is None:
        base_delay = app_config.WEBHOOK_RETRY_BASE_DELAY_MS / 1000
    max_attempts = max(1, max_attempts)
    delay = base_delay

    attempt = 1
    while True:
        try:
            outcome = await handle_provider_event(event, sessions, materializer)
        except Exception as exc:
            retryable = exc.retryable if isinstance(exc, AppError) else True
            if not retryable or attempt >= max_attempts:
                raise
            logger.warning(
                "⚠️ Provider event {} failed, retrying in {}s (attempt {} of {}): {}",
                event.event,
                delay,
                attempt,
                max_attempts,
                exc,
            )
            await asyncio.sleep(delay)
            delay *= 2
            attempt += 1
            continue

        if attempt > 1:
            logger.info("Provider event {} processed after {} attempts", event.event, attempt)
        return outcome


@router.post("/provider", response_model=WebhookAck)
async def provider_webhook(
    request: Request,
    livepeer_signature: str | None = Header(None, alias="livepeer-signature"),
    sessions: SessionService = Depends(get_session_service),
    materializer: RecordingMaterializer = Depends(get_recording_materializer),
) -> ORJSONResponse:
    """Receive and process provider webhook events.

    Security:
        - When PROVIDER_WEBHOOK_SECRET is set, requires a valid signature (401 otherwise)
        - Timestamp must be within 5 minutes (prevents replay attacks)
        - Uses constant-time signature comparison
    """
    body = await request.body()
    logger.debug(f"Received provider webhook: body_length={len(body)}, has_signature={bool(livepeer_signature)}")

    signing_secret = get_app_environ_config().PROVIDER_WEBHOOK_SECRET
    if signing_secret:
        if not livepeer_signature or not verify_provider_signature(body, livepeer_signature, signing_secret):
            failure = api_failure(
                errcode=AppErrorCode.E_WEBHOOK_SIGNATURE_INVALID,
                errmesg="Invalid webhook signature",
            )
            return ORJSONResponse(status_code=HttpStatusCode.UNAUTHORIZED, content=failure.model_dump())

    try:
        data = orjson.loads(body)
    except orjson.JSONDecodeError:
        data = None
    event = parse_provider_event(data)

    try:
        outcome = await process_provider_event(event, sessions, materializer)
    except Exception as exc:
        logger.exception(f"❌ Provider webhook processing failed for {getattr(event, 'event', None)}: {exc}")
        ack = WebhookAck(error=str(exc))
        return ORJSONResponse(status_code=HttpStatusCode.OK, content=ack.model_dump(exclude_none=True))

    logger.info(
        "✅ Provider webhook {} -> {} (handled={}, reason={})",
        event.event,
        outcome.action,
        outcome.handled,
        outcome.reason,
    )
    return ORJSONResponse(status_code=HttpStatusCode.OK, content=WebhookAck().model_dump(exclude_none=True))
