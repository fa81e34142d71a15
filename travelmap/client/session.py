import asyncio
import uuid
from typing import Mapping, Optional, Protocol

from travelmap.client.collection import PinCollection
from travelmap.client.coordinator import LikeConfirmer, LikeCoordinator
from travelmap.client.notices import NoticeBoard
from travelmap.core import config
from travelmap.core.types import PinId
from travelmap.features.map.culling import compute_visible, is_valid_location
from travelmap.features.map.entities import WORLD, Viewport
from travelmap.features.pins.entities import Pin
from travelmap.utils import get_logger

log = get_logger(__name__)


class PinSource(Protocol):
    async def fetch_pins(self) -> Optional[list[Pin]]:
        ...


class MapApi(PinSource, LikeConfirmer, Protocol):
    pass


class MapSession:
    """
    State behind one map view: the pin collection, the viewport, and the markers to render for it.

    `visible` is derived. It is recomputed from scratch on mount, on every viewport change, and whenever the
    collection changes.
    """

    def __init__(
        self,
        api: MapApi,
        viewport: Viewport = WORLD,
        cap: Optional[int] = None,
        notices: Optional[NoticeBoard] = None,
    ):
        self.api = api
        self.viewport = viewport
        self.cap = config.VISIBLE_PIN_CAP if cap is None else cap
        self.notices = notices if notices is not None else NoticeBoard()
        self.collection = PinCollection()
        self.coordinator = LikeCoordinator(self.collection, api, self.notices)
        self.selected_pin_id: Optional[PinId] = None
        self.visible: list[Pin] = []
        self.collection.subscribe(self._recompute)
        self._recompute()

    @property
    def selected_pin(self) -> Optional[Pin]:
        return self.collection.get(self.selected_pin_id) if self.selected_pin_id else None

    async def load(self) -> bool:
        """Fetch the pins and replace the collection. On failure the current pins are kept."""
        pins = await self.api.fetch_pins()
        if pins is None:
            self.notices.post("Could not load pins", level="error")
            return False
        self.collection.replace(pins)
        log.debug("Loaded %d pins, %d visible", len(self.collection), len(self.visible))
        return True

    async def refresh(self) -> bool:
        return await self.load()

    def on_viewport_change(self, viewport: Viewport) -> list[Pin]:
        self.viewport = viewport
        self._recompute()
        return self.visible

    def toggle_like(self, pin_id: PinId) -> Optional[asyncio.Task]:
        return self.coordinator.toggle_like(pin_id)

    def navigate_to_pin(self, pin_id: Optional[PinId], latitude: float, longitude: float, select: bool = True) -> bool:
        """Center the map on the given coordinates, keeping the zoom, and optionally select the pin for details."""
        if not is_valid_location(latitude, longitude):
            log.info("Ignoring navigation to invalid location (%s, %s)", latitude, longitude)
            return False
        self.viewport = self.viewport.recentered(latitude, longitude)
        if select:
            # Kept even if the pin is not loaded yet so a later load resolves it
            self.selected_pin_id = pin_id
        self._recompute()
        return True

    def navigate_from_query(self, query: Mapping[str, str]) -> bool:
        """Handle a `?lat=..&lng=..&pin=..` link, as produced by the profile page."""
        try:
            latitude = float(query["lat"])
            longitude = float(query["lng"])
        except (KeyError, ValueError):
            return False
        pin_id: Optional[PinId] = None
        if query.get("pin"):
            try:
                pin_id = uuid.UUID(query["pin"])
            except ValueError:
                log.info("Ignoring malformed pin id %s", query["pin"])
        return self.navigate_to_pin(pin_id, latitude, longitude, select=pin_id is not None)

    def _recompute(self) -> None:
        self.visible = compute_visible(self.collection, self.viewport, self.cap)
