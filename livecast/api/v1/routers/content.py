from fastapi import APIRouter, Depends

from livecast.api.v1.dependency import AdminCaller, CurrentCaller, get_boost_service, get_creator_authorizer
from livecast.api.v1.schemas.base import ApiOut
from livecast.api.v1.schemas.content import BoostContentIn, BoostOut, ForceBoostContentIn, RemoveBoostIn
from livecast.domain.auth.creator_authorizer import CreatorAuthorizer
from livecast.domain.feed.boost_domain import BoostService
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

router = APIRouter(prefix="/content", tags=["Content"])


@router.post("/boost")
async def boost_content(
    body: BoostContentIn,
    caller: CurrentCaller,
    service: BoostService = Depends(get_boost_service),
    authorizer: CreatorAuthorizer = Depends(get_creator_authorizer),
) -> ApiOut[BoostOut]:
    """Boost the caller's own published content."""
    if not authorizer.can_boost(caller, caller.user_id):
        raise AppError(
            errcode=AppErrorCode.E_FORBIDDEN,
            errmesg="Only active creators can boost content",
            status_code=HttpStatusCode.FORBIDDEN,
        )

    result = await service.boost_content(body.content_id, caller.user_id, body.level, body.duration)

    return ApiOut[BoostOut](results=BoostOut.model_validate(result.model_dump()))


@router.post("/remove_boost")
async def remove_boost(
    body: RemoveBoostIn,
    caller: CurrentCaller,
    service: BoostService = Depends(get_boost_service),
) -> ApiOut[BoostOut]:
    result = await service.remove_boost(body.content_id, caller.user_id, is_admin=caller.is_admin)

    return ApiOut[BoostOut](results=BoostOut.model_validate(result.model_dump()))


@router.post("/force_boost", tags=["Admin"])
async def force_boost(
    body: ForceBoostContentIn,
    admin: AdminCaller,
    service: BoostService = Depends(get_boost_service),
) -> ApiOut[BoostOut]:
    """Admin boost of any published content, replacing an existing boost."""
    result = await service.admin_force_boost(body.content_id, admin.user_id, body.level, body.duration)

    return ApiOut[BoostOut](results=BoostOut.model_validate(result.model_dump()))
