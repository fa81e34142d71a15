from datetime import date

from pydantic import field_validator

from travelmap.core.types import Base
from travelmap.features.pins.entities import Location, Photo, Pin


class PhotoRequest(Base):
    url: str
    blob_name: str | None = None
    caption: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, url):
        url = url.strip()
        if not url.startswith(("https://", "http://")):
            raise ValueError("Invalid photo URL")
        return url

    @field_validator("caption")
    @classmethod
    def validate_caption(cls, caption):
        if caption is None:
            return caption
        caption = caption.strip()
        if len(caption) > 500:
            raise ValueError("Caption too long (max length 500 chars)")
        return caption


class CreatePinRequest(Location):
    location_name: str
    visit_date: date | None = None
    notes: str | None = None
    photos: list[PhotoRequest] = []

    @field_validator("location_name")
    @classmethod
    def validate_location_name(cls, location_name):
        location_name = location_name.strip()
        if len(location_name) == 0 or len(location_name) > 1000:
            raise ValueError("Invalid location name")
        return location_name

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, notes):
        if notes is None:
            return notes
        notes = notes.strip()
        if len(notes) > 5000:
            raise ValueError("Notes too long (max length 5000 chars)")
        return notes

    @field_validator("photos")
    @classmethod
    def validate_photos(cls, photos):
        if len(photos) > 20:
            raise ValueError("Too many photos, max is 20")
        return photos


class PinsResponse(Base):
    pins: list[Pin]


class GalleryItem(Base):
    photo: Photo
    pin: Pin


class GalleryResponse(Base):
    items: list[GalleryItem]


class DeleteResponse(Base):
    deleted: bool
