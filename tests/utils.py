import uuid
from contextlib import contextmanager
from typing import Optional

from travelmap.core.firebase import FirebaseUser, get_firebase_user
from travelmap.features.pins.entities import Pin
from travelmap.main import app as main_app
from tests.mock_firebase import MockFirebaseAdmin


@contextmanager
def request_as(uid: str, firebase_admin: Optional[MockFirebaseAdmin] = None):
    firebase_user = FirebaseUser(firebase_admin or MockFirebaseAdmin(), uid=uid)
    main_app.dependency_overrides[get_firebase_user] = lambda: firebase_user
    yield firebase_user
    main_app.dependency_overrides = {}


def make_pin(
    latitude: float = 0,
    longitude: float = 0,
    is_mine: bool = False,
    like_count: int = 0,
    is_liked: bool = False,
    **kwargs,
) -> Pin:
    return Pin(
        id=kwargs.pop("id", uuid.uuid4()),
        latitude=latitude,
        longitude=longitude,
        user_id=kwargs.pop("user_id", uuid.uuid4()),
        is_mine=is_mine,
        like_count=like_count,
        is_liked=is_liked,
        **kwargs,
    )
