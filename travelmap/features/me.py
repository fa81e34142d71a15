from fastapi import APIRouter, Depends, HTTPException

from travelmap.core.firebase import FirebaseUser, get_firebase_user
from travelmap.features.stores import get_user_store
from travelmap.features.users.dependencies import get_caller_user
from travelmap.features.users.entities import InternalUser, PublicUser
from travelmap.features.users.types import CreateUserRequest
from travelmap.features.users.user_store import UserStore

router = APIRouter()


@router.get("", response_model=PublicUser)
async def get_me(user: InternalUser = Depends(get_caller_user)):
    """Get the current user."""
    return user.to_public()


@router.post("", response_model=PublicUser)
async def create_me(
    request: CreateUserRequest,
    firebase_user: FirebaseUser = Depends(get_firebase_user),
    user_store: UserStore = Depends(get_user_store),
):
    """Register the signed-in Firebase user."""
    try:
        user = await user_store.create_user(uid=firebase_user.uid, display_name=request.display_name)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))
    return user.to_public()
