"""Feed order: boosted tier (level desc, boosted_at desc, id asc), then recency (created_at desc, id asc)."""

from datetime import datetime

from livecast.schemas import Content
from livecast.services.record_store.base import BoostedKey, RegularKey

from .feed_cursor import FeedPosition
from .feed_models import FeedSegment


def position_of(content: Content, now: datetime) -> FeedPosition:
    """Where `content` sits in the feed at `now`. Expired boosts count as regular."""
    if content.is_boost_active(now):
        return FeedPosition(
            segment=FeedSegment.BOOSTED,
            boosted=BoostedKey(content.boost_level, content.boosted_at, content.content_id),  # type: ignore[arg-type]
        )
    return FeedPosition(
        segment=FeedSegment.REGULAR,
        regular=RegularKey(content.created_at, content.content_id),
    )


def feed_sort_key(content: Content, now: datetime) -> tuple:
    """Total order over the whole feed; smaller sorts first."""
    position = position_of(content, now)
    if position.segment == FeedSegment.BOOSTED:
        key = position.boosted
        return (0, -key.boost_level, -key.boosted_at.timestamp(), key.content_id)  # type: ignore[union-attr]
    key = position.regular
    return (1, 0, -key.created_at.timestamp(), key.content_id)  # type: ignore[union-attr]


__all__ = ["feed_sort_key", "position_of"]
