from typing import Callable, Iterable, Iterator, Optional

from travelmap.core.types import PinId
from travelmap.features.pins.entities import Pin

Listener = Callable[[], None]


class PinCollection:
    """
    The single in-memory pin collection backing a map view.

    It is replaced wholesale on load and refresh. The only in-place mutations are the like transitions used by
    optimistic updates. Every replacement bumps `version` so pending work can tell its pins were swapped out.
    """

    def __init__(self, pins: Iterable[Pin] = ()):
        self._pins: list[Pin] = []
        self._by_id: dict[PinId, Pin] = {}
        self._listeners: list[Listener] = []
        self.version = 0
        self._set(pins)

    def __iter__(self) -> Iterator[Pin]:
        return iter(self._pins)

    def __len__(self) -> int:
        return len(self._pins)

    def __contains__(self, pin_id: object) -> bool:
        return pin_id in self._by_id

    @property
    def pins(self) -> list[Pin]:
        return list(self._pins)

    def get(self, pin_id: PinId) -> Optional[Pin]:
        return self._by_id.get(pin_id)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def replace(self, pins: Iterable[Pin]) -> None:
        self._set(pins)
        self.version += 1
        self._notify()

    def toggle_like(self, pin_id: PinId) -> Optional[int]:
        """Flip the pin's like state, returning the change applied to its like count (None for unknown pins)."""
        pin = self.get(pin_id)
        if pin is None:
            return None
        pin.is_liked = not pin.is_liked
        delta = 1 if pin.is_liked else -1
        if pin.like_count + delta < 0:
            delta = 0
        pin.like_count += delta
        self._notify()
        return delta

    def set_like(self, pin_id: PinId, liked: bool, like_count: int) -> bool:
        """Put the pin back into a known like state, e.g. the last one the server confirmed."""
        pin = self.get(pin_id)
        if pin is None:
            return False
        pin.is_liked = liked
        pin.like_count = max(like_count, 0)
        self._notify()
        return True

    def _set(self, pins: Iterable[Pin]) -> None:
        # First occurrence of an id wins
        self._pins = []
        self._by_id = {}
        for pin in pins:
            if pin.id not in self._by_id:
                self._by_id[pin.id] = pin
                self._pins.append(pin)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()
