from fastapi import APIRouter, Depends, HTTPException, Request

from travelmap.core import config
from travelmap.features.limiter import limiter
from travelmap.features.pins.pin_store import PinStore
from travelmap.features.pins.types import PinsResponse
from travelmap.features.stores import get_pin_store, get_relation_store, get_user_store
from travelmap.features.users.dependencies import get_caller_user, get_requested_user
from travelmap.features.users.entities import InternalUser, Profile
from travelmap.features.users.relation_store import RelationStore
from travelmap.features.users.types import ToggleFollowRequest, ToggleFollowResponse
from travelmap.features.users.user_store import UserStore
from travelmap.utils import get_logger

router = APIRouter()
follow_router = APIRouter()
log = get_logger(__name__)


@router.get("/{user_id}", response_model=Profile)
async def get_profile(
    relation_store: RelationStore = Depends(get_relation_store),
    user: InternalUser = Depends(get_caller_user),
    requested_user: InternalUser = Depends(get_requested_user),
):
    """Get the given user's profile, with follow counts and whether the caller follows them."""
    return Profile(
        **requested_user.to_public().model_dump(),
        is_following=await relation_store.is_following(user.id, requested_user.id),
        is_own_profile=user.id == requested_user.id,
    )


@router.get("/{user_id}/pins", response_model=PinsResponse)
async def get_user_pins(
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
    requested_user: InternalUser = Depends(get_requested_user),
):
    """Get the given user's pins, newest first."""
    pins = await pin_store.get_pins(viewer_id=user.id, user_id=requested_user.id)
    return PinsResponse(pins=pins)


@follow_router.post("/toggle", response_model=ToggleFollowResponse)
@limiter.limit(config.TOGGLE_RATE_LIMIT)
async def toggle_follow(
    request: Request,  # This needs to be here for limiter
    req: ToggleFollowRequest,
    relation_store: RelationStore = Depends(get_relation_store),
    user_store: UserStore = Depends(get_user_store),
    user: InternalUser = Depends(get_caller_user),
):
    """Follow the given user, or unfollow them if the caller already follows them."""
    if req.user_id is None or req.user_id == user.id:
        raise HTTPException(400, detail="Invalid user ID")
    if await user_store.get_user(user_id=req.user_id) is None:
        raise HTTPException(404, detail="User not found")
    try:
        following = await relation_store.toggle_follow(user.id, req.user_id)
    except ValueError as e:
        raise HTTPException(400, detail=str(e))
    except Exception:  # noqa
        log.exception("Error toggling follow")
        raise HTTPException(500, detail="Failed to toggle follow")
    return ToggleFollowResponse(following=following, followers=await relation_store.get_follower_count(req.user_id))
