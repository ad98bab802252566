"""Feed ranking and cursor pagination."""

from datetime import datetime

from loguru import logger

from livecast.app_config import get_app_environ_config
from livecast.schemas import Content
from livecast.services.record_store.base import RecordStore
from livecast.shared.utils.timeutil import utc_now

from .feed_cursor import decode_cursor, encode_cursor
from .feed_models import FeedItem, FeedPage, FeedSegment, FeedViewer
from .feed_ordering import position_of


class FeedService:
    """
    Serves published content as one deterministic order through opaque cursors.

    Pages are read independently, so content that changes between two page
    reads (new items, boosts starting or expiring) may be skipped or repeated
    across pages; within a page the order is exact.
    """

    def __init__(
        self,
        store: RecordStore,
        default_page_size: int | None = None,
        max_page_size: int | None = None,
    ):
        app_config = get_app_environ_config()
        self.store = store
        self.default_page_size = default_page_size or app_config.FEED_DEFAULT_PAGE_SIZE
        self.max_page_size = max_page_size or app_config.FEED_MAX_PAGE_SIZE

    def resolve_page_size(self, limit: int | None) -> int:
        if limit is None or limit < 1:
            if limit is not None:
                logger.warning(f"Invalid feed limit {limit}, defaulting to {self.default_page_size}")
            return self.default_page_size
        return min(limit, self.max_page_size)

    async def get_feed(
        self,
        limit: int | None = None,
        cursor: str | None = None,
        viewer: FeedViewer | None = None,
        now: datetime | None = None,
    ) -> FeedPage:
        """
        Get one page of the feed.

        Raises:
            AppError: E_INVALID_CURSOR when the cursor cannot be decoded
        """
        page_size = self.resolve_page_size(limit)
        position = decode_cursor(cursor) if cursor else None
        viewer = viewer or FeedViewer()
        now = now or utc_now()
        visibilities = viewer.allowed_visibilities()

        # One extra row tells us whether another page exists
        wanted = page_size + 1
        items: list[Content] = []

        if position is None or position.segment == FeedSegment.BOOSTED:
            items.extend(
                await self.store.list_boosted_content(
                    visibilities, now, position.boosted if position else None, wanted
                )
            )

        if len(items) < wanted:
            regular_after = position.regular if position and position.segment == FeedSegment.REGULAR else None
            items.extend(
                await self.store.list_regular_content(visibilities, now, regular_after, wanted - len(items))
            )

        has_more = len(items) > page_size
        page = items[:page_size]
        next_cursor = encode_cursor(position_of(page[-1], now)) if page else None

        logger.debug(
            "Feed page: size={} returned={} has_more={} from={}",
            page_size,
            len(page),
            has_more,
            position.segment if position else "start",
        )
        return FeedPage(
            items=[FeedItem.from_content(content, now) for content in page],
            has_more=has_more,
            cursor=next_cursor,
        )


__all__ = ["FeedService"]
