from typing import Optional

from fastapi import Depends, HTTPException, Request

from travelmap.core.firebase import FirebaseUser, get_firebase_user
from travelmap.core.types import UserId
from travelmap.features.stores import get_user_store
from travelmap.features.users.entities import InternalUser
from travelmap.features.users.user_store import UserStore


def get_authorization_header(request: Request) -> str:
    """Used for rate limiting."""
    authorization = request.headers.get("authorization")
    if authorization is None or not authorization.startswith("Bearer "):
        return "default"
    return authorization[7:]


async def get_caller_user(
    firebase_user: FirebaseUser = Depends(get_firebase_user),
    user_store: UserStore = Depends(get_user_store),
) -> InternalUser:
    user: Optional[InternalUser] = await user_store.get_user(uid=firebase_user.uid)
    if user is None:
        raise HTTPException(403)
    return user


async def get_requested_user(user_id: UserId, user_store: UserStore = Depends(get_user_store)) -> InternalUser:
    user: Optional[InternalUser] = await user_store.get_user(user_id=user_id)
    if user is None:
        raise HTTPException(404, detail="User not found")
    return user
