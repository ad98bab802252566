"""Boost domain models."""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel

from livecast.schemas import BoostedBy, Content

DEFAULT_ADMIN_BOOST_LEVEL = 4


class BoostDuration(str, Enum):
    HOURS_24 = "24h"
    HOURS_48 = "48h"
    DAYS_7 = "7d"
    DAYS_14 = "14d"
    DAYS_30 = "30d"
    UNLIMITED = "unlimited"

    def __str__(self) -> str:
        return self.value

    def to_timedelta(self) -> timedelta | None:
        """None for UNLIMITED."""
        return _DURATIONS[self]

    def expires_at(self, start: datetime) -> datetime | None:
        delta = self.to_timedelta()
        return start + delta if delta is not None else None


_DURATIONS: dict[BoostDuration, timedelta | None] = {
    BoostDuration.HOURS_24: timedelta(hours=24),
    BoostDuration.HOURS_48: timedelta(hours=48),
    BoostDuration.DAYS_7: timedelta(days=7),
    BoostDuration.DAYS_14: timedelta(days=14),
    BoostDuration.DAYS_30: timedelta(days=30),
    BoostDuration.UNLIMITED: None,
}


class BoostResponse(BaseModel):
    content_id: str
    is_boosted: bool
    boost_level: int
    boosted_at: datetime | None = None
    boosted_by: BoostedBy | None = None
    boost_expires_at: datetime | None = None

    @classmethod
    def from_content(cls, content: Content) -> "BoostResponse":
        return cls.model_validate(content.model_dump(include=set(cls.model_fields)))


__all__ = ["BoostDuration", "BoostResponse", "DEFAULT_ADMIN_BOOST_LEVEL"]
