from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from livecast.schemas import BoostedBy, ContentVisibility

from .serializers import serialize_utc_datetime


class FeedItemOut(BaseModel):
    content_id: str
    creator_id: str
    title: str | None = None
    visibility: ContentVisibility
    is_boosted: bool
    boost_level: int
    boosted_by: BoostedBy | None = None
    view_count: int = 0
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str:
        return serialize_utc_datetime(dt)


class FeedOut(BaseModel):
    items: list[FeedItemOut]
    has_more: bool = Field(description="True when another page exists")
    cursor: str | None = Field(default=None, description="Opaque cursor for the next page")
