from typing import Literal

from pydantic import field_validator, model_validator

from travelmap.core.types import Base


class Viewport(Base):
    """The displayed map rectangle, given by its south-west and north-east corners."""

    south: float
    west: float
    north: float
    east: float

    @field_validator("south", "north")
    @classmethod
    def validate_latitude(cls, latitude):
        if not -90 <= latitude <= 90:
            raise ValueError("Invalid latitude")
        return latitude

    @field_validator("west", "east")
    @classmethod
    def validate_longitude(cls, longitude):
        if not -180 <= longitude <= 180:
            raise ValueError("Invalid longitude")
        return longitude

    @model_validator(mode="after")
    def validate_corners(self):
        if self.south > self.north:
            raise ValueError("South edge must not be above the north edge")
        if self.west > self.east:
            raise ValueError("West edge must not be east of the east edge")
        return self

    @property
    def center(self) -> tuple[float, float]:
        return (self.south + self.north) / 2, (self.west + self.east) / 2

    def recentered(self, latitude: float, longitude: float) -> "Viewport":
        """Return a viewport with the same span centered on the given point, shifted to stay on the map."""
        lat_span = self.north - self.south
        lng_span = self.east - self.west
        south = min(max(latitude - lat_span / 2, -90), 90 - lat_span)
        west = min(max(longitude - lng_span / 2, -180), 180 - lng_span)
        return Viewport(south=south, west=west, north=min(south + lat_span, 90), east=min(west + lng_span, 180))


WORLD = Viewport(south=-90, west=-180, north=90, east=180)

MapType = Literal["community", "following", "me"]
