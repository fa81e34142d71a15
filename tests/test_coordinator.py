import asyncio
import gc
import weakref
from typing import Optional

import pytest

from travelmap.client.collection import PinCollection
from travelmap.client.coordinator import LIKE_FAILED_MESSAGE, LikeCoordinator
from travelmap.client.notices import NoticeBoard
from travelmap.core.types import PinId
from travelmap.features.likes.types import ToggleLikeResponse
from tests.utils import make_pin

pytestmark = pytest.mark.asyncio


class FakeConfirmer:
    """Confirms likes once released, with a per-call outcome."""

    def __init__(self, outcomes: Optional[list[str]] = None, liked: bool = False, like_count: int = 0):
        self.outcomes = list(outcomes or [])
        # Server-side state of the pin
        self.liked = liked
        self.like_count = like_count
        self.calls: list[tuple[PinId, Optional[bool]]] = []
        self.gates: list[asyncio.Event] = []

    async def toggle_like(self, pin_id: PinId, liked: Optional[bool] = None) -> Optional[ToggleLikeResponse]:
        index = len(self.calls)
        self.calls.append((pin_id, liked))
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        outcome = self.outcomes[index] if index < len(self.outcomes) else "ok"
        if outcome == "raise":
            raise RuntimeError("connection reset")
        if outcome == "reject":
            return None
        if liked is not None and liked != self.liked:
            self.liked = liked
            self.like_count = max(self.like_count + (1 if liked else -1), 0)
        return ToggleLikeResponse(liked=self.liked, like_count=self.like_count)

    def release(self, index: int):
        self.gates[index].set()


def state(collection: PinCollection, pin_id: PinId) -> tuple[bool, int]:
    pin = collection.get(pin_id)
    assert pin is not None
    return pin.is_liked, pin.like_count


async def test_like_succeeds():
    pin = make_pin(is_liked=False, like_count=3)
    collection = PinCollection([pin])
    confirmer = FakeConfirmer(["ok"], liked=False, like_count=3)
    coordinator = LikeCoordinator(collection, confirmer)

    task = coordinator.toggle_like(pin.id)
    assert state(collection, pin.id) == (True, 4)
    assert coordinator.in_flight(pin.id)

    await asyncio.sleep(0)
    assert confirmer.calls == [(pin.id, True)]
    confirmer.release(0)
    assert await task is True
    assert state(collection, pin.id) == (True, 4)
    assert not coordinator.in_flight(pin.id)
    assert coordinator.notices.notices == []


@pytest.mark.parametrize("outcome", ["reject", "raise"])
async def test_unlike_fails_and_reverts(outcome):
    pin = make_pin(is_liked=True, like_count=4)
    collection = PinCollection([pin])
    notices = NoticeBoard()
    confirmer = FakeConfirmer([outcome], liked=True, like_count=4)
    coordinator = LikeCoordinator(collection, confirmer, notices)

    task = coordinator.toggle_like(pin.id)
    assert state(collection, pin.id) == (False, 3)

    await asyncio.sleep(0)
    confirmer.release(0)
    assert await task is False
    assert state(collection, pin.id) == (True, 4)
    assert [n.message for n in notices.drain()] == [LIKE_FAILED_MESSAGE]
    assert notices.notices == []


async def test_unknown_pin_is_ignored():
    collection = PinCollection([make_pin()])
    confirmer = FakeConfirmer()
    coordinator = LikeCoordinator(collection, confirmer)
    assert coordinator.toggle_like(make_pin().id) is None
    assert confirmer.calls == []


async def test_stale_failure_does_not_revert_newer_toggle():
    pin = make_pin(is_liked=False, like_count=3)
    collection = PinCollection([pin])
    confirmer = FakeConfirmer(["reject", "ok"], liked=False, like_count=3)
    coordinator = LikeCoordinator(collection, confirmer)

    first = coordinator.toggle_like(pin.id)
    second = coordinator.toggle_like(pin.id)
    assert state(collection, pin.id) == (False, 3)
    await asyncio.sleep(0)
    assert confirmer.calls == [(pin.id, True), (pin.id, False)]

    # The newer request resolves first, then the older one fails
    confirmer.release(1)
    assert await second is True
    confirmer.release(0)
    assert await first is False
    assert state(collection, pin.id) == (False, 3)
    assert coordinator.notices.notices == []


async def test_latest_failure_restores_last_confirmed_state():
    pin = make_pin(is_liked=False, like_count=3)
    collection = PinCollection([pin])
    confirmer = FakeConfirmer(["ok", "reject"], liked=False, like_count=3)
    coordinator = LikeCoordinator(collection, confirmer)

    first = coordinator.toggle_like(pin.id)
    second = coordinator.toggle_like(pin.id)
    await asyncio.sleep(0)
    confirmer.release(1)
    assert await second is False
    # Nothing is restored while the first request is still pending
    assert state(collection, pin.id) == (False, 3)
    assert coordinator.in_flight(pin.id)
    confirmer.release(0)
    assert await first is True
    # Back to the state the first, accepted toggle produced on the server
    assert state(collection, pin.id) == (True, 4)
    assert len(coordinator.notices.notices) == 1


async def test_failure_after_refresh_does_not_revert():
    pin = make_pin(is_liked=False, like_count=3)
    collection = PinCollection([pin])
    confirmer = FakeConfirmer(["reject"])
    coordinator = LikeCoordinator(collection, confirmer)

    task = coordinator.toggle_like(pin.id)
    refreshed = make_pin(id=pin.id, is_liked=False, like_count=10)
    collection.replace([refreshed])
    await asyncio.sleep(0)
    confirmer.release(0)
    assert await task is False
    assert state(collection, pin.id) == (False, 10)


async def test_pins_are_independent():
    a = make_pin(is_liked=False, like_count=0)
    b = make_pin(is_liked=True, like_count=1)
    collection = PinCollection([a, b])
    confirmer = FakeConfirmer(["reject", "ok"])
    coordinator = LikeCoordinator(collection, confirmer)

    task_a = coordinator.toggle_like(a.id)
    task_b = coordinator.toggle_like(b.id)
    await asyncio.sleep(0)
    confirmer.release(1)
    assert await task_b is True
    assert coordinator.in_flight(a.id)
    confirmer.release(0)
    assert await task_a is False
    assert state(collection, a.id) == (False, 0)
    assert state(collection, b.id) == (False, 0)


async def test_count_never_goes_negative():
    pin = make_pin(is_liked=True, like_count=0)
    collection = PinCollection([pin])
    confirmer = FakeConfirmer(["reject"])
    coordinator = LikeCoordinator(collection, confirmer)

    task = coordinator.toggle_like(pin.id)
    assert state(collection, pin.id) == (False, 0)
    await asyncio.sleep(0)
    confirmer.release(0)
    await task
    assert state(collection, pin.id) == (True, 0)


async def test_overlapping_failures_restore_server_state():
    pin = make_pin(is_liked=False, like_count=3)
    collection = PinCollection([pin])
    notices = NoticeBoard()
    confirmer = FakeConfirmer(["reject", "reject"], liked=False, like_count=3)
    coordinator = LikeCoordinator(collection, confirmer, notices)

    first = coordinator.toggle_like(pin.id)
    second = coordinator.toggle_like(pin.id)
    assert state(collection, pin.id) == (False, 3)
    await asyncio.sleep(0)

    confirmer.release(0)
    assert await first is False
    confirmer.release(1)
    assert await second is False
    assert state(collection, pin.id) == (confirmer.liked, confirmer.like_count) == (False, 3)
    assert [n.message for n in notices.drain()] == [LIKE_FAILED_MESSAGE]
    assert not coordinator.in_flight(pin.id)


async def test_overlapping_failures_after_odd_number_of_toggles():
    pin = make_pin(is_liked=False, like_count=3)
    collection = PinCollection([pin])
    confirmer = FakeConfirmer(["reject", "reject", "reject"], liked=False, like_count=3)
    coordinator = LikeCoordinator(collection, confirmer)

    tasks = [coordinator.toggle_like(pin.id) for _ in range(3)]
    assert state(collection, pin.id) == (True, 4)
    await asyncio.sleep(0)
    for index in (2, 0, 1):
        confirmer.release(index)
    assert await asyncio.gather(*tasks) == [False, False, False]
    assert state(collection, pin.id) == (False, 3)
    assert len(coordinator.notices.notices) == 1


class HangingConfirmer:
    """Never answers on its own. The pending future is only weakly referenced here."""

    def __init__(self):
        self.future_ref: Optional[weakref.ref] = None

    async def toggle_like(self, pin_id: PinId, liked: Optional[bool] = None) -> Optional[ToggleLikeResponse]:
        future = asyncio.get_running_loop().create_future()
        self.future_ref = weakref.ref(future)
        return await future


async def test_dropped_confirmation_task_still_resolves():
    pin = make_pin(is_liked=False, like_count=3)
    collection = PinCollection([pin])
    confirmer = HangingConfirmer()
    coordinator = LikeCoordinator(collection, confirmer)

    coordinator.toggle_like(pin.id)
    await asyncio.sleep(0)
    gc.collect()

    assert confirmer.future_ref is not None
    future = confirmer.future_ref()
    assert future is not None
    future.set_result(None)
    for _ in range(10):
        if not coordinator.in_flight(pin.id):
            break
        await asyncio.sleep(0)
    assert not coordinator.in_flight(pin.id)
    assert state(collection, pin.id) == (False, 3)
    assert [n.message for n in coordinator.notices.notices] == [LIKE_FAILED_MESSAGE]
