from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from travelmap.core.firebase import FirebaseUser, get_firebase_user
from travelmap.core.types import PhotoId, PinId, UserId
from travelmap.features.map.entities import MapType
from travelmap.features.pins.entities import InternalPin, Photo, Pin
from travelmap.features.pins.pin_store import PinStore
from travelmap.features.pins.types import (
    CreatePinRequest,
    DeleteResponse,
    GalleryItem,
    GalleryResponse,
    PhotoRequest,
    PinsResponse,
)
from travelmap.features.stores import get_pin_store
from travelmap.features.users.dependencies import get_caller_user
from travelmap.features.users.entities import InternalUser
from travelmap.utils import get_logger

router = APIRouter()
log = get_logger(__name__)


async def get_pin_or_raise(pin_store: PinStore, pin_id: PinId) -> InternalPin:
    pin: Optional[InternalPin] = await pin_store.get_pin(pin_id)
    if pin is None:
        raise HTTPException(404, detail="Pin not found")
    return pin


@router.get("", response_model=PinsResponse)
async def get_pins(
    user_id: Optional[UserId] = None,
    map_type: MapType = "community",
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
):
    """Get the full pin collection the caller can see, optionally limited to one author."""
    pins = await pin_store.get_pins(viewer_id=user.id, user_id=user_id, map_type=map_type)
    return PinsResponse(pins=pins)


@router.get("/gallery", response_model=GalleryResponse)
async def get_gallery(
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
):
    """Get every photo from the caller's pins, most recent visits first."""
    pins = await pin_store.get_pins(viewer_id=user.id, user_id=user.id)
    pins.sort(key=lambda pin: pin.visit_date or date.min, reverse=True)
    items = [GalleryItem(photo=photo, pin=pin) for pin in pins for photo in pin.photos]
    return GalleryResponse(items=items)


@router.post("", response_model=Pin)
async def create_pin(
    request: CreatePinRequest,
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
):
    """Create a new pin with its photos."""
    try:
        pin = await pin_store.create_pin(user.id, request)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))
    log.info("Created pin %s for user %s", pin.id, user.id)
    return pin.to_pin(user.id, author_name=user.display_name, is_liked=False)


@router.get("/{pin_id}", response_model=Pin)
async def get_pin(
    pin_id: PinId,
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
):
    """Get the given pin."""
    pin = await get_pin_or_raise(pin_store, pin_id)
    return await pin_store.to_public_pin(pin, viewer_id=user.id)


@router.delete("/{pin_id}", response_model=DeleteResponse)
async def delete_pin(
    pin_id: PinId,
    firebase_user: FirebaseUser = Depends(get_firebase_user),
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
):
    """Delete the given pin if the caller created it."""
    pin: Optional[InternalPin] = await pin_store.get_pin(pin_id)
    if pin is None or pin.user_id != user.id:
        return DeleteResponse(deleted=False)
    await pin_store.delete_pin(pin.id)
    for photo in pin.photos:
        if photo.blob_name is not None:
            await firebase_user.shared_firebase.delete_image(photo.blob_name)
    return DeleteResponse(deleted=True)


@router.post("/{pin_id}/photos", response_model=Photo)
async def add_photo(
    pin_id: PinId,
    request: PhotoRequest,
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
):
    """Attach an already-uploaded photo to the given pin."""
    pin = await get_pin_or_raise(pin_store, pin_id)
    if pin.user_id != user.id:
        raise HTTPException(403)
    try:
        photo = await pin_store.add_photo(pin, request)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))
    return Photo(id=photo.id, url=photo.url, caption=photo.caption, created_at=photo.created_at)


@router.delete("/photos/{photo_id}", response_model=DeleteResponse)
async def delete_photo(
    photo_id: PhotoId,
    firebase_user: FirebaseUser = Depends(get_firebase_user),
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
):
    """Delete the given photo and its stored file."""
    photo = await pin_store.get_photo(photo_id)
    if photo is None:
        raise HTTPException(404, detail="Photo not found")
    if photo.user_id != user.id:
        raise HTTPException(403)
    if photo.blob_name is not None and not await firebase_user.shared_firebase.delete_image(photo.blob_name):
        raise HTTPException(500, detail="Failed to delete photo")
    await pin_store.delete_photo(photo.id)
    return DeleteResponse(deleted=True)
