from datetime import date, datetime

from pydantic import field_validator

from travelmap.core.types import Base, InternalBase, PhotoId, PinId, UserId


class Location(Base):
    latitude: float
    longitude: float

    @field_validator("latitude")
    @classmethod
    def validate_latitude(cls, latitude):
        if not -90 <= latitude <= 90:
            raise ValueError("Invalid latitude")
        return latitude

    @field_validator("longitude")
    @classmethod
    def validate_longitude(cls, longitude):
        if not -180 <= longitude <= 180:
            raise ValueError("Invalid longitude")
        return longitude


class Photo(Base):
    id: PhotoId
    url: str
    caption: str | None = None
    created_at: datetime | None = None


class Pin(Base):
    """
    A geo-tagged memory as seen by one viewer.

    Coordinates are deliberately unvalidated here. Records fetched from the API may carry bad geometry and are
    dropped when the map culls them instead of failing the whole collection.
    """

    id: PinId
    latitude: float
    longitude: float
    user_id: UserId
    author_name: str | None = None
    is_mine: bool = False
    like_count: int = 0
    is_liked: bool = False
    photos: list[Photo] = []
    location_name: str | None = None
    visit_date: date | None = None
    notes: str | None = None
    created_at: datetime | None = None

    @field_validator("like_count")
    @classmethod
    def validate_like_count(cls, like_count):
        return max(like_count, 0)


class InternalPhoto(InternalBase):
    id: PhotoId
    pin_id: PinId
    user_id: UserId
    url: str
    blob_name: str | None
    caption: str | None
    position: int
    created_at: datetime


class InternalPin(InternalBase):
    id: PinId
    user_id: UserId
    latitude: float
    longitude: float
    location_name: str | None
    visit_date: date | None
    notes: str | None
    created_at: datetime
    photos: list[InternalPhoto]
    like_count: int

    def to_pin(self, viewer_id: UserId, author_name: str | None, is_liked: bool) -> Pin:
        return Pin(
            id=self.id,
            latitude=self.latitude,
            longitude=self.longitude,
            user_id=self.user_id,
            author_name=author_name,
            is_mine=self.user_id == viewer_id,
            like_count=self.like_count,
            is_liked=is_liked,
            photos=[Photo(id=p.id, url=p.url, caption=p.caption, created_at=p.created_at) for p in self.photos],
            location_name=self.location_name,
            visit_date=self.visit_date,
            notes=self.notes,
            created_at=self.created_at,
        )
