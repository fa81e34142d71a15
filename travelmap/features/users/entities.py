from datetime import datetime
from typing import Optional

from travelmap.core.types import Base, InternalBase, UserId


class PublicUser(Base):
    id: UserId
    display_name: Optional[str]
    created_at: datetime
    follower_count: int
    following_count: int


class Profile(PublicUser):
    is_following: bool
    is_own_profile: bool


class InternalUser(InternalBase):
    id: UserId
    uid: str
    display_name: Optional[str]
    created_at: datetime
    follower_count: int
    following_count: int

    def to_public(self) -> PublicUser:
        return PublicUser.model_validate(self)
