"""
Optimistic likes.

A toggle is applied to the local pin collection immediately and then confirmed with the API in the background. Each
pin carries an in-flight token: a failure only counts when it belongs to the most recent toggle, so an older request
resolving late can't undo a newer intent. Once every request for a pin has resolved and the latest one failed, the
pin is restored to the last state the server confirmed and a notice is posted.
"""
import asyncio
import itertools
from dataclasses import dataclass
from typing import Optional, Protocol

from travelmap.client.collection import PinCollection
from travelmap.client.notices import NoticeBoard
from travelmap.core.types import PinId
from travelmap.features.likes.types import ToggleLikeResponse
from travelmap.utils import get_logger

log = get_logger(__name__)

LIKE_FAILED_MESSAGE = "Failed to update like"


class LikeConfirmer(Protocol):
    async def toggle_like(self, pin_id: PinId, liked: Optional[bool] = None) -> Optional[ToggleLikeResponse]:
        """Return the server's response, or None if the change was rejected or could not be sent."""
        ...


@dataclass
class PendingLike:
    token: int
    version: int
    # Last (is_liked, like_count) the server is known to hold
    confirmed: tuple[bool, int]
    requests: int = 0
    latest_failed: bool = False


class LikeCoordinator:
    def __init__(self, collection: PinCollection, confirmer: LikeConfirmer, notices: Optional[NoticeBoard] = None):
        self.collection = collection
        self.confirmer = confirmer
        self.notices = notices if notices is not None else NoticeBoard()
        self._pending: dict[PinId, PendingLike] = {}
        self._tasks: set[asyncio.Task] = set()
        self._token_counter = itertools.count(1)

    def in_flight(self, pin_id: PinId) -> bool:
        return pin_id in self._pending

    def toggle_like(self, pin_id: PinId) -> Optional[asyncio.Task]:
        """
        Flip the like on the given pin now and confirm it in the background.

        Must be called from a running event loop. Returns the confirmation task, or None for unknown pins. The
        coordinator holds on to the task, so callers are free to drop it.
        """
        pin = self.collection.get(pin_id)
        if pin is None:
            log.warning("Tried to toggle like on unknown pin %s", pin_id)
            return None
        pending = self._pending.get(pin_id)
        if pending is None or pending.version != self.collection.version:
            pending = PendingLike(token=0, version=self.collection.version, confirmed=(pin.is_liked, pin.like_count))
            self._pending[pin_id] = pending
        self.collection.toggle_like(pin_id)
        pending.token = next(self._token_counter)
        pending.requests += 1
        pending.latest_failed = False

        task = asyncio.get_running_loop().create_task(self._confirm(pin_id, pin.is_liked, pending, pending.token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _confirm(self, pin_id: PinId, liked: bool, pending: PendingLike, token: int) -> bool:
        try:
            response = await self.confirmer.toggle_like(pin_id, liked)
        except Exception:  # noqa
            log.exception("Unexpected error confirming like on pin %s", pin_id)
            response = None

        pending.requests -= 1
        if response is not None:
            pending.confirmed = (response.liked, response.like_count)
        elif pending.token == token:
            pending.latest_failed = True
        else:
            log.info("Like confirmation for pin %s failed but was superseded by a newer toggle", pin_id)
        if pending.requests == 0:
            self._settle(pin_id, pending)
        return response is not None

    def _settle(self, pin_id: PinId, pending: PendingLike) -> None:
        if self._pending.get(pin_id) is not pending:
            return
        del self._pending[pin_id]
        if not pending.latest_failed:
            return
        if self.collection.version != pending.version:
            log.info("Like confirmation for pin %s failed after the pins were refreshed, not reverting", pin_id)
            return
        liked, like_count = pending.confirmed
        self.collection.set_like(pin_id, liked, like_count)
        log.warning("Like confirmation for pin %s failed, restored to liked=%s count=%s", pin_id, liked, like_count)
        self.notices.post(LIKE_FAILED_MESSAGE, level="error")
