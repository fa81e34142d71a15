import uuid
from typing import Any

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    select,
)
from sqlalchemy.orm import (
    Mapped,
    aliased,
    column_property,
    declarative_base,
    mapped_column,
    relationship,
)


Base: Any = declarative_base()


# region Users
class UserRow(Base):
    __tablename__ = "user"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    uid = mapped_column(Text, unique=True, nullable=False)  # Firebase id, maps to Firebase users
    display_name = mapped_column(Text, nullable=True)
    created_at = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Computed column properties (set at end of file)
    # follower_count: Mapped[int]
    # following_count: Mapped[int]


class FollowRow(Base):
    __tablename__ = "follow"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    follower_id = mapped_column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    following_id = mapped_column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    created_at = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="_follower_following_uc"),
        Index("follow_following_id_idx", following_id),
    )


# endregion Users

# region Pins
class PinRow(Base):
    __tablename__ = "pin"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = mapped_column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    latitude = mapped_column(Float, nullable=False)
    longitude = mapped_column(Float, nullable=False)
    location_name = mapped_column(Text, nullable=True)
    visit_date = mapped_column(Date, nullable=True)
    notes = mapped_column(Text, nullable=True)
    created_at = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user: Mapped[UserRow] = relationship("UserRow")
    photos: Mapped[list["PinPhotoRow"]] = relationship(
        "PinPhotoRow",
        order_by="PinPhotoRow.position",
        cascade="all, delete-orphan",
    )

    # Computed column properties (set at end of file)
    # like_count: Mapped[int]

    __table_args__ = (
        Index("idx_pin_user_id", "user_id"),
        Index("idx_pin_lat_lng", "latitude", "longitude"),
    )


class PinPhotoRow(Base):
    __tablename__ = "pin_photo"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    pin_id = mapped_column(Uuid, ForeignKey("pin.id", ondelete="CASCADE"), nullable=False)
    user_id = mapped_column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    url = mapped_column(Text, nullable=False)
    blob_name = mapped_column(Text, nullable=True)  # Set when the photo lives in our storage bucket
    caption = mapped_column(Text, nullable=True)
    position = mapped_column(Integer, nullable=False, default=0)
    created_at = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PinLikeRow(Base):
    __tablename__ = "pin_like"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = mapped_column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    pin_id = mapped_column(Uuid, ForeignKey("pin.id", ondelete="CASCADE"), nullable=False)
    created_at = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Only want one row per (user, pin) pair
    __table_args__ = (
        UniqueConstraint("user_id", "pin_id", name="_pin_like_user_pin_uc"),
        Index("pin_like_pin_id_idx", "pin_id"),
    )


# endregion Pins

# region Computed properties
FollowRowAlias = aliased(FollowRow)
PinLikeAlias = aliased(PinLikeRow)

UserRow.follower_count = column_property(
    select(func.count()).select_from(FollowRowAlias).where(FollowRowAlias.following_id == UserRow.id).scalar_subquery(),
    deferred=True,
)

UserRow.following_count = column_property(
    select(func.count()).select_from(FollowRowAlias).where(FollowRowAlias.follower_id == UserRow.id).scalar_subquery(),
    deferred=True,
)

PinRow.like_count = column_property(
    select(func.count()).select_from(PinLikeAlias).where(PinRow.id == PinLikeAlias.pin_id).scalar_subquery(),
    deferred=True,
)
# endregion Computed properties
