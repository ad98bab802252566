from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from livecast.domain.feed.boost_models import DEFAULT_ADMIN_BOOST_LEVEL, BoostDuration
from livecast.schemas import BoostedBy

from .serializers import serialize_optional_utc_datetime


class BoostContentIn(BaseModel):
    content_id: str = Field(description="Content to boost")
    level: int = Field(default=1, description="Boost level, clamped to 1-5")
    duration: BoostDuration = Field(default=BoostDuration.HOURS_24, description="How long the boost lasts")


class ForceBoostContentIn(BaseModel):
    content_id: str
    level: int = Field(default=DEFAULT_ADMIN_BOOST_LEVEL, description="Boost level, clamped to 1-5")
    duration: BoostDuration = BoostDuration.UNLIMITED


class RemoveBoostIn(BaseModel):
    content_id: str


class BoostOut(BaseModel):
    content_id: str
    is_boosted: bool
    boost_level: int
    boosted_at: datetime | None = None
    boosted_by: BoostedBy | None = None
    boost_expires_at: datetime | None = None

    @field_serializer("boosted_at", "boost_expires_at")
    def serialize_optional_dates(self, dt: datetime | None) -> str | None:
        return serialize_optional_utc_datetime(dt)
