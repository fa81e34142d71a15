from typing import Optional

from travelmap.core.types import Base, PinId


class ToggleLikeRequest(Base):
    pin_id: Optional[PinId] = None
    # Desired state. When omitted the like is flipped, which is not safe to retry.
    liked: Optional[bool] = None


class ToggleLikeResponse(Base):
    liked: bool
    like_count: int
