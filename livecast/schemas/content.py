"""Published content record served by the feed."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from livecast.shared.utils.timeutil import utc_now

from .lifecycle_states import BoostedBy, ContentStatus, ContentVisibility
from .schema_utils import parse_mongo_datetime

MIN_BOOST_LEVEL = 1
MAX_BOOST_LEVEL = 5


class Content(BaseModel):
    """Feed item.

    Boost invariant: a boosted item has a level in [1, 5] and a boost time;
    an item with level 0 is never boosted.
    """

    content_id: str
    creator_id: str
    title: str | None = None

    status: ContentStatus = ContentStatus.PENDING
    visibility: ContentVisibility = ContentVisibility.PUBLIC

    # Boost
    is_boosted: bool = False
    boost_level: int = Field(default=0, ge=0, le=MAX_BOOST_LEVEL)
    boosted_at: datetime | None = None
    boosted_by: BoostedBy | None = None
    boost_expires_at: datetime | None = None  # None while boosted means no expiry

    view_count: int = 0

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Version control for optimistic locking
    version: int = Field(default=1)

    @field_validator("boosted_at", "boost_expires_at", "created_at", "updated_at", mode="before")
    @classmethod
    def _parse_datetime(cls, v: Any) -> Any:
        return parse_mongo_datetime(v)

    @model_validator(mode="after")
    def _check_boost(self) -> "Content":
        if self.is_boosted:
            if self.boost_level < MIN_BOOST_LEVEL:
                raise ValueError("boosted content requires boost_level >= 1")
            if self.boosted_at is None:
                raise ValueError("boosted content requires boosted_at")
        elif self.boost_level != 0:
            raise ValueError("boost_level must be 0 when content is not boosted")
        return self

    def is_boost_active(self, now: datetime) -> bool:
        """Boosted and not past its expiry at `now`."""
        if not self.is_boosted:
            return False
        return self.boost_expires_at is None or self.boost_expires_at > now


__all__ = ["Content", "MAX_BOOST_LEVEL", "MIN_BOOST_LEVEL"]
