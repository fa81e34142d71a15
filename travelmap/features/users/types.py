from typing import Optional

from pydantic import field_validator

from travelmap.core.types import Base, UserId


class CreateUserRequest(Base):
    display_name: str

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, display_name):
        display_name = display_name.strip()
        if len(display_name) == 0 or len(display_name) > 100:
            raise ValueError("Invalid display name")
        return display_name


class ToggleFollowRequest(Base):
    user_id: Optional[UserId] = None


class ToggleFollowResponse(Base):
    following: bool
    followers: int
