from fastapi import APIRouter, Depends, Query

from livecast.api.v1.dependency import CurrentCaller, get_creator_authorizer, get_session_service
from livecast.api.v1.schemas.base import ApiOut
from livecast.api.v1.schemas.session import (
    CreateSessionIn,
    CreateSessionOut,
    EndSessionIn,
    EndSessionOut,
    RefreshSessionIn,
    SessionOut,
    SessionStatusOut,
)
from livecast.domain.auth.creator_authorizer import CreatorAuthorizer
from livecast.domain.live.session.session_domain import SessionService
from livecast.domain.live.session.session_models import SessionCreateParams

router = APIRouter(prefix="/session", tags=["Session"])


@router.post("/create_session")
async def create_session(
    body: CreateSessionIn,
    caller: CurrentCaller,
    service: SessionService = Depends(get_session_service),
    authorizer: CreatorAuthorizer = Depends(get_creator_authorizer),
) -> ApiOut[CreateSessionOut]:
    """Create a live session and return its ingest credentials to the creator."""
    params = SessionCreateParams(
        creator_id=body.creator_id or caller.user_id,
        title=body.title,
        visibility=body.visibility,
        mode=body.mode,
    )

    result = await service.create_session(params, caller=caller, authorizer=authorizer)

    return ApiOut[CreateSessionOut](results=CreateSessionOut.model_validate(result.model_dump()))


@router.post("/end_session")
async def end_session(
    body: EndSessionIn,
    caller: CurrentCaller,
    service: SessionService = Depends(get_session_service),
) -> ApiOut[EndSessionOut]:
    """Terminate a session owned by the caller (admins may end any session)."""
    result = await service.end_session(body.session_id, caller.user_id, is_admin=caller.is_admin)

    return ApiOut[EndSessionOut](
        results=EndSessionOut(
            session=SessionOut.model_validate(result.session.model_dump()),
            recording_id=result.recording_id,
            recording_created=result.recording_created,
        )
    )


@router.get("/get_session")
async def get_session(
    session_id: str = Query(..., description="Session identifier"),
    service: SessionService = Depends(get_session_service),
) -> ApiOut[SessionOut]:
    result = await service.get_session(session_id)

    return ApiOut[SessionOut](results=SessionOut.model_validate(result.model_dump()))


@router.post("/refresh_session_status")
async def refresh_session_status(
    body: RefreshSessionIn,
    caller: CurrentCaller,
    service: SessionService = Depends(get_session_service),
) -> ApiOut[SessionStatusOut]:
    """Pull viewer counts and health for a session from the provider."""
    result = await service.refresh_session_status(body.session_id)

    return ApiOut[SessionStatusOut](
        results=SessionStatusOut(
            session=SessionOut.model_validate(result.session.model_dump()),
            is_active=result.is_active,
            is_healthy=result.is_healthy,
        )
    )
