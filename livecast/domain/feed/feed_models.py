"""Feed domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from livecast.schemas import BoostedBy, Content, ContentVisibility


class FeedSegment(str, Enum):
    """Feed segments in serving order: every boosted item precedes every regular one."""

    BOOSTED = "b"
    REGULAR = "r"

    def __str__(self) -> str:
        return self.value


class FeedViewer(BaseModel):
    user_id: str | None = None
    is_member: bool = False

    def allowed_visibilities(self) -> tuple[ContentVisibility, ...]:
        if self.is_member:
            return (ContentVisibility.PUBLIC, ContentVisibility.MEMBERS_ONLY)
        return (ContentVisibility.PUBLIC,)


class FeedItem(BaseModel):
    content_id: str
    creator_id: str
    title: str | None = None
    visibility: ContentVisibility
    is_boosted: bool
    boost_level: int
    boosted_by: BoostedBy | None = None
    view_count: int = 0
    created_at: datetime

    @classmethod
    def from_content(cls, content: Content, now: datetime) -> "FeedItem":
        active = content.is_boost_active(now)
        return cls(
            content_id=content.content_id,
            creator_id=content.creator_id,
            title=content.title,
            visibility=content.visibility,
            is_boosted=active,
            boost_level=content.boost_level if active else 0,
            boosted_by=content.boosted_by if active else None,
            view_count=content.view_count,
            created_at=content.created_at,
        )


class FeedPage(BaseModel):
    items: list[FeedItem]
    has_more: bool
    cursor: str | None = None


__all__ = ["FeedItem", "FeedPage", "FeedSegment", "FeedViewer"]
