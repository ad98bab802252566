from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header
from loguru import logger
from pydantic import ValidationError

from livecast.domain.auth.creator_authorizer import (
    Caller,
    CreatorAuthorizer,
    GatewayCreatorAuthorizer,
    UserRole,
    UserStatus,
)
from livecast.domain.feed.boost_domain import BoostService
from livecast.domain.feed.feed_domain import FeedService
from livecast.domain.live.recording.recording_materializer import RecordingMaterializer
from livecast.domain.live.session.session_domain import SessionService
from livecast.services.app_store import get_record_store
from livecast.services.integrations.provider_client import provider_client
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode


def _build_caller(user_id: str, role: str | None, status: str | None, is_member: str | None) -> Caller:
    try:
        return Caller(
            user_id=user_id,
            role=role or UserRole.VIEWER,
            status=status or UserStatus.ACTIVE,
            is_member=(is_member or "").strip().lower() in {"true", "1", "yes"},
        )
    except ValidationError as exc:
        logger.warning("Rejected gateway identity headers: {}", exc.errors())
        raise AppError(
            errcode=AppErrorCode.E_UNAUTHORIZED,
            errmesg="Invalid identity headers",
            status_code=HttpStatusCode.UNAUTHORIZED,
        ) from exc


async def get_current_caller(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
    x_user_status: str | None = Header(None),
    x_user_is_member: str | None = Header(None),
) -> Caller:
    """Identity forwarded by the authenticating gateway."""
    if not x_user_id:
        raise AppError(
            errcode=AppErrorCode.E_UNAUTHORIZED,
            errmesg="Missing caller identity",
            status_code=HttpStatusCode.UNAUTHORIZED,
        )

    caller = _build_caller(x_user_id, x_user_role, x_user_status, x_user_is_member)
    logger.debug("Caller user_id={} role={}", caller.user_id, caller.role)
    return caller


async def get_optional_caller(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
    x_user_status: str | None = Header(None),
    x_user_is_member: str | None = Header(None),
) -> Caller | None:
    if not x_user_id:
        return None
    return _build_caller(x_user_id, x_user_role, x_user_status, x_user_is_member)


async def require_admin(caller: Annotated[Caller, Depends(get_current_caller)]) -> Caller:
    if not (caller.is_admin and caller.is_active):
        raise AppError(
            errcode=AppErrorCode.E_FORBIDDEN,
            errmesg="Admin access required",
            status_code=HttpStatusCode.FORBIDDEN,
        )
    return caller


CurrentCaller = Annotated[Caller, Depends(get_current_caller)]
OptionalCaller = Annotated[Caller | None, Depends(get_optional_caller)]
AdminCaller = Annotated[Caller, Depends(require_admin)]


# Singleton instances, built on first use so the record store backend is read after startup config


@lru_cache
def get_recording_materializer() -> RecordingMaterializer:
    return RecordingMaterializer(get_record_store(), provider_client)


@lru_cache
def get_session_service() -> SessionService:
    return SessionService(get_record_store(), provider_client, materializer=get_recording_materializer())


@lru_cache
def get_feed_service() -> FeedService:
    return FeedService(get_record_store())


@lru_cache
def get_boost_service() -> BoostService:
    return BoostService(get_record_store())


_creator_authorizer = GatewayCreatorAuthorizer()


def get_creator_authorizer() -> CreatorAuthorizer:
    return _creator_authorizer
