import uuid

import pytest
import pytest_asyncio

from travelmap.core.database.models import FollowRow, UserRow
from travelmap.features.users.types import ToggleFollowResponse
from tests.utils import request_as

pytestmark = pytest.mark.asyncio
USER_A_ID = uuid.uuid4()
USER_B_ID = uuid.uuid4()
USER_C_ID = uuid.uuid4()


@pytest_asyncio.fixture(autouse=True)
async def setup_fixture(session):
    session.add(UserRow(id=USER_A_ID, uid="a", display_name="a"))
    session.add(UserRow(id=USER_B_ID, uid="b", display_name="b"))
    session.add(UserRow(id=USER_C_ID, uid="c", display_name="c"))
    await session.commit()
    session.add(FollowRow(follower_id=USER_C_ID, following_id=USER_B_ID))
    await session.commit()


async def test_toggle_follow(client):
    with request_as(uid="a"):
        response = await client.post("/follow/toggle", json={"userId": str(USER_B_ID)})
        assert response.status_code == 200
        assert ToggleFollowResponse.model_validate(response.json()) == ToggleFollowResponse(following=True, followers=2)

        response = await client.post("/follow/toggle", json={"userId": str(USER_B_ID)})
        assert response.status_code == 200
        assert ToggleFollowResponse.model_validate(response.json()) == ToggleFollowResponse(following=False, followers=1)


async def test_toggle_follow_self(client):
    with request_as(uid="a"):
        response = await client.post("/follow/toggle", json={"userId": str(USER_A_ID)})
    assert response.status_code == 400


async def test_toggle_follow_missing_user_id(client):
    with request_as(uid="a"):
        response = await client.post("/follow/toggle", json={})
    assert response.status_code == 400


async def test_toggle_follow_unknown_user(client):
    with request_as(uid="a"):
        response = await client.post("/follow/toggle", json={"userId": str(uuid.uuid4())})
    assert response.status_code == 404
