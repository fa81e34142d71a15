from typing import Optional

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travelmap.core.database.helpers import eager_load_pin_options
from travelmap.core.database.models import FollowRow, PinLikeRow, PinPhotoRow, PinRow, UserRow
from travelmap.core.types import PhotoId, PinId, UserId
from travelmap.features.map.entities import MapType, Viewport
from travelmap.features.pins.entities import InternalPhoto, InternalPin, Pin
from travelmap.features.pins.types import CreatePinRequest, PhotoRequest


class PinStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    # Scalar queries

    async def get_like_count(self, pin_id: PinId) -> int:
        """Return the like count of the given pin."""
        query = sa.select(sa.func.count()).where(PinLikeRow.pin_id == pin_id)
        result = await self.db.execute(query)
        like_count: int = result.scalar()  # type: ignore
        return like_count

    async def is_pin_liked(self, pin_id: PinId, liked_by: UserId) -> bool:
        """Return whether the given pin is liked by the given user."""
        query = sa.select(PinLikeRow.id).where(PinLikeRow.pin_id == pin_id, PinLikeRow.user_id == liked_by)
        result = await self.db.execute(query.exists().select())
        is_liked: bool = result.scalar()  # type: ignore
        return is_liked

    # Pins

    async def get_pin(self, pin_id: PinId) -> Optional[InternalPin]:
        """Return the pin with the given id or None if no such pin exists."""
        query = (
            sa.select(PinRow)
            .options(*eager_load_pin_options())
            .where(PinRow.id == pin_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        pin = result.scalars().first()
        return InternalPin.model_validate(pin) if pin else None

    async def get_pins(
        self,
        viewer_id: UserId,
        user_id: Optional[UserId] = None,
        map_type: MapType = "community",
        viewport: Optional[Viewport] = None,
        limit: Optional[int] = None,
        prioritized: bool = False,
    ) -> list[Pin]:
        """
        Get the pins visible to the viewer, newest first, with viewer-relative like and ownership state.

        `user_id` restricts the result to one author (profile pages). `viewport` is a coarse database-side bounding
        box; precise culling happens in `map.culling`. With `prioritized` the rows come in map priority (the viewer's
        own pins, then the most liked) instead of newest first, so a `limit` keeps the pins the map would show.
        """
        query = sa.select(PinRow).options(*eager_load_pin_options())
        if user_id is not None:
            query = query.where(PinRow.user_id == user_id)
        if map_type == "me":
            query = query.where(PinRow.user_id == viewer_id)
        elif map_type == "following":
            following = sa.select(FollowRow.following_id).where(FollowRow.follower_id == viewer_id)
            query = query.where((PinRow.user_id == viewer_id) | PinRow.user_id.in_(following))
        if viewport is not None:
            query = query.where(
                PinRow.latitude.between(viewport.south, viewport.north),
                PinRow.longitude.between(viewport.west, viewport.east),
            )
        if prioritized:
            query = query.order_by((PinRow.user_id == viewer_id).desc(), PinRow.like_count.desc())
        query = query.order_by(PinRow.created_at.desc(), PinRow.id.desc())
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        rows = result.scalars().all()
        liked_pin_ids = await self.get_liked_pins(viewer_id, [row.id for row in rows])
        return [
            InternalPin.model_validate(row).to_pin(
                viewer_id, author_name=row.user.display_name, is_liked=row.id in liked_pin_ids
            )
            for row in rows
        ]

    async def get_liked_pins(self, user_id: UserId, pin_ids: list[PinId]) -> set[PinId]:
        if not pin_ids:
            return set()
        query = sa.select(PinLikeRow.pin_id).where(PinLikeRow.user_id == user_id, PinLikeRow.pin_id.in_(pin_ids))
        result = await self.db.execute(query)
        liked_pins: list[PinId] = result.scalars().all()  # type: ignore
        return set(liked_pins)

    async def to_public_pin(self, pin: InternalPin, viewer_id: UserId) -> Pin:
        author_name = await self.db.scalar(sa.select(UserRow.display_name).where(UserRow.id == pin.user_id))
        is_liked = await self.is_pin_liked(pin.id, liked_by=viewer_id)
        return pin.to_pin(viewer_id, author_name=author_name, is_liked=is_liked)

    async def create_pin(self, user_id: UserId, request: CreatePinRequest) -> InternalPin:
        """Create a pin along with its photo records, raising a ValueError if the request is invalid."""
        pin = PinRow(
            user_id=user_id,
            latitude=request.latitude,
            longitude=request.longitude,
            location_name=request.location_name,
            visit_date=request.visit_date,
            notes=request.notes,
        )
        for position, photo in enumerate(request.photos):
            pin.photos.append(
                PinPhotoRow(
                    user_id=user_id,
                    url=photo.url,
                    blob_name=photo.blob_name,
                    caption=photo.caption or request.location_name,
                    position=position,
                )
            )
        try:
            self.db.add(pin)
            await self.db.commit()
            await self.db.refresh(pin, ["id"])
        except IntegrityError:
            await self.db.rollback()
            raise ValueError("Could not create pin.")
        created_pin = await self.get_pin(pin.id)
        if created_pin is None:
            raise ValueError("Created pin but failed to retrieve it.")
        return created_pin

    async def delete_pin(self, pin_id: PinId) -> None:
        """Delete the given pin, its photo records and likes."""
        await self.db.execute(sa.delete(PinLikeRow).where(PinLikeRow.pin_id == pin_id))
        await self.db.execute(sa.delete(PinPhotoRow).where(PinPhotoRow.pin_id == pin_id))
        await self.db.execute(sa.delete(PinRow).where(PinRow.id == pin_id))
        await self.db.commit()

    # Photos

    async def add_photo(self, pin: InternalPin, request: PhotoRequest) -> InternalPhoto:
        position = max((photo.position for photo in pin.photos), default=-1) + 1
        photo = PinPhotoRow(
            pin_id=pin.id,
            user_id=pin.user_id,
            url=request.url,
            blob_name=request.blob_name,
            caption=request.caption or pin.location_name,
            position=position,
        )
        try:
            self.db.add(photo)
            await self.db.commit()
            await self.db.refresh(photo)
        except IntegrityError:
            await self.db.rollback()
            raise ValueError("Could not add photo.")
        return InternalPhoto.model_validate(photo)

    async def get_photo(self, photo_id: PhotoId) -> Optional[InternalPhoto]:
        query = sa.select(PinPhotoRow).where(PinPhotoRow.id == photo_id)
        result = await self.db.execute(query)
        photo = result.scalars().first()
        return InternalPhoto.model_validate(photo) if photo else None

    async def delete_photo(self, photo_id: PhotoId) -> None:
        query = sa.delete(PinPhotoRow).where(PinPhotoRow.id == photo_id)
        await self.db.execute(query)
        await self.db.commit()

    # Likes

    async def like_pin(self, user_id: UserId, pin_id: PinId) -> None:
        """Like the given pin."""
        pin_like = PinLikeRow(user_id=user_id, pin_id=pin_id)
        self.db.add(pin_like)
        try:
            await self.db.commit()
        except IntegrityError:
            # Ignore error when trying to like a pin twice
            await self.db.rollback()
            return

    async def unlike_pin(self, user_id: UserId, pin_id: PinId) -> None:
        """Unlike the given pin."""
        query = sa.delete(PinLikeRow).where(PinLikeRow.user_id == user_id, PinLikeRow.pin_id == pin_id)
        await self.db.execute(query)
        await self.db.commit()

    async def toggle_like(self, user_id: UserId, pin_id: PinId) -> bool:
        """Flip the user's like on the given pin, returning whether the pin is now liked."""
        if await self.is_pin_liked(pin_id, liked_by=user_id):
            await self.unlike_pin(user_id, pin_id)
            return False
        await self.like_pin(user_id, pin_id)
        return True
