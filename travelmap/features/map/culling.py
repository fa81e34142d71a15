"""
Viewport culling for map markers.

The full pin collection can be global and arbitrarily large, so the map only renders the pins inside the current
viewport, with the viewer's own pins first and then the most liked ones, truncated to a fixed cap.
"""
import math
from typing import Iterable, Optional

from travelmap.core import config
from travelmap.features.map.entities import Viewport
from travelmap.features.pins.entities import Pin


def is_valid_location(latitude: float, longitude: float) -> bool:
    """Return whether the coordinates are finite and within the valid latitude/longitude range."""
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def viewport_contains(viewport: Viewport, latitude: float, longitude: float) -> bool:
    """Inclusive bounds check; invalid coordinates are never contained."""
    if not is_valid_location(latitude, longitude):
        return False
    return viewport.south <= latitude <= viewport.north and viewport.west <= longitude <= viewport.east


def pin_priority(pin: Pin) -> tuple[bool, int]:
    # Sorts ascending: own pins, then most liked
    return not pin.is_mine, -pin.like_count


def compute_visible(pins: Iterable[Pin], viewport: Viewport, cap: Optional[int] = None) -> list[Pin]:
    """
    Return the pins to render for the viewport.

    Pins outside the viewport or with invalid coordinates are dropped. The rest are ordered by `pin_priority`
    (sorting is stable, so ties keep their input order) and truncated to `cap`, which defaults to
    `config.VISIBLE_PIN_CAP`. The inputs are never mutated.
    """
    if cap is None:
        cap = config.VISIBLE_PIN_CAP
    if cap <= 0:
        return []
    inside = [pin for pin in pins if viewport_contains(viewport, pin.latitude, pin.longitude)]
    return sorted(inside, key=pin_priority)[:cap]
