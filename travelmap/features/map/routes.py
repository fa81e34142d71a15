from fastapi import APIRouter, Depends

from travelmap.core import config
from travelmap.features.map import culling
from travelmap.features.map.types import LoadMapRequest, LoadMapResponse
from travelmap.features.pins.pin_store import PinStore
from travelmap.features.stores import get_pin_store
from travelmap.features.users.dependencies import get_caller_user
from travelmap.features.users.entities import InternalUser

router = APIRouter()


@router.post("/load", response_model=LoadMapResponse)
async def load_map(
    request: LoadMapRequest,
    pin_store: PinStore = Depends(get_pin_store),
    user: InternalUser = Depends(get_caller_user),
):
    """Get the pins to render for the given viewport, own pins first, then the most liked."""
    cap = config.VISIBLE_PIN_CAP if request.cap is None else min(request.cap, config.VISIBLE_PIN_CAP)
    # Rows arrive in map priority, so the fetch limit never drops a pin that culling would keep
    pins = await pin_store.get_pins(
        viewer_id=user.id,
        map_type=request.map_type,
        viewport=request.viewport,
        limit=max(config.MAP_FETCH_LIMIT, cap),
        prioritized=True,
    )
    return LoadMapResponse(pins=culling.compute_visible(pins, request.viewport, cap))
