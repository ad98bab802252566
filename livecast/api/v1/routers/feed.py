from fastapi import APIRouter, Depends, Query

from livecast.api.v1.dependency import OptionalCaller, get_feed_service
from livecast.api.v1.schemas.base import ApiOut
from livecast.api.v1.schemas.feed import FeedItemOut, FeedOut
from livecast.domain.feed.feed_domain import FeedService
from livecast.domain.feed.feed_models import FeedViewer

router = APIRouter(prefix="/feed", tags=["Feed"])


@router.get("")
async def get_feed(
    caller: OptionalCaller,
    service: FeedService = Depends(get_feed_service),
    limit: int | None = Query(None, description="Items per page; out-of-range values are clamped"),
    cursor: str | None = Query(None, description="Cursor returned by the previous page"),
) -> ApiOut[FeedOut]:
    """Boosted content first (by level, then recency), followed by regular content by recency."""
    viewer = FeedViewer(
        user_id=caller.user_id if caller else None,
        is_member=bool(caller and (caller.is_member or caller.is_admin)),
    )

    page = await service.get_feed(limit=limit, cursor=cursor, viewer=viewer)

    return ApiOut[FeedOut](
        results=FeedOut(
            items=[FeedItemOut.model_validate(item.model_dump()) for item in page.items],
            has_more=page.has_more,
            cursor=page.cursor,
        )
    )
