from pydantic import field_validator

from travelmap.core.types import Base
from travelmap.features.map.entities import MapType, Viewport
from travelmap.features.pins.entities import Pin


class LoadMapRequest(Base):
    viewport: Viewport
    map_type: MapType = "community"
    cap: int | None = None

    @field_validator("cap")
    @classmethod
    def validate_cap(cls, cap):
        if cap is not None and cap < 0:
            raise ValueError("cap must be non-negative")
        return cap


class LoadMapResponse(Base):
    pins: list[Pin]
