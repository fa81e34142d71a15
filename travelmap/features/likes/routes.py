from fastapi import APIRouter, Depends, HTTPException, Request

from travelmap.core import config
from travelmap.features.likes.types import ToggleLikeRequest, ToggleLikeResponse
from travelmap.features.limiter import limiter
from travelmap.features.pins.pin_store import PinStore
from travelmap.features.stores import get_pin_store
from travelmap.features.users.dependencies import get_caller_user
from travelmap.features.users.entities import InternalUser
from travelmap.utils import get_logger

router = APIRouter()
log = get_logger(__name__)


@router.post("/toggle", response_model=ToggleLikeResponse)
@limiter.limit(config.TOGGLE_RATE_LIMIT)
async def toggle_like(
    request: Request,  # This needs to be here for limiter
    req: ToggleLikeRequest,
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
):
    """
    Like or unlike the given pin. With `liked` set the like is forced to that state, otherwise it is flipped.

    This is the confirmation endpoint for optimistic likes: clients flip their local state first and revert it when
    this returns an error.
    """
    if req.pin_id is None:
        raise HTTPException(400, detail="Pin ID required")
    pin = await pin_store.get_pin(req.pin_id)
    if pin is None:
        raise HTTPException(404, detail="Pin not found")
    try:
        if req.liked is None:
            liked = await pin_store.toggle_like(user.id, pin.id)
        elif req.liked:
            await pin_store.like_pin(user.id, pin.id)
            liked = True
        else:
            await pin_store.unlike_pin(user.id, pin.id)
            liked = False
        like_count = await pin_store.get_like_count(pin.id)
    except Exception:  # noqa
        log.exception("Error toggling like")
        raise HTTPException(500, detail="Failed to toggle like")
    return ToggleLikeResponse(liked=liked, like_count=like_count)
