from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from travelmap.core import config
from travelmap.core.types import PinId, UserId
from travelmap.features.likes.types import ToggleLikeRequest, ToggleLikeResponse
from travelmap.features.map.entities import MapType, Viewport
from travelmap.features.map.types import LoadMapRequest, LoadMapResponse
from travelmap.features.pins.entities import Pin
from travelmap.features.pins.types import PinsResponse
from travelmap.features.users.types import ToggleFollowRequest, ToggleFollowResponse
from travelmap.utils import get_logger

log = get_logger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class TravelMapClient:
    """
    Async client for the TravelMap API.

    Failures never raise: network errors, non-2xx statuses and malformed bodies are logged and reported as None so
    the map can keep its current state.
    """

    def __init__(
        self,
        base_url: str = config.API_URL,
        id_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        headers = {"Authorization": f"Bearer {id_token}"} if id_token else {}
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)

    async def __aenter__(self) -> "TravelMapClient":
        return self

    async def __aexit__(self, *_exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def fetch_pins(self, user_id: Optional[UserId] = None, map_type: MapType = "community") -> Optional[list[Pin]]:
        """Fetch the full pin collection the viewer can see."""
        params: dict[str, Any] = {"map_type": map_type}
        if user_id is not None:
            params["user_id"] = str(user_id)
        response = await self._request("GET", "/pins", PinsResponse, params=params)
        return response.pins if response else None

    async def load_map(
        self, viewport: Viewport, map_type: MapType = "community", cap: Optional[int] = None
    ) -> Optional[list[Pin]]:
        """Fetch the server-culled pins for a viewport."""
        request = LoadMapRequest(viewport=viewport, map_type=map_type, cap=cap)
        response = await self._request("POST", "/map/load", LoadMapResponse, json=request)
        return response.pins if response else None

    async def toggle_like(self, pin_id: PinId, liked: Optional[bool] = None) -> Optional[ToggleLikeResponse]:
        request = ToggleLikeRequest(pin_id=pin_id, liked=liked)
        return await self._request("POST", "/likes/toggle", ToggleLikeResponse, json=request)

    async def toggle_follow(self, user_id: UserId) -> Optional[ToggleFollowResponse]:
        request = ToggleFollowRequest(user_id=user_id)
        return await self._request("POST", "/follow/toggle", ToggleFollowResponse, json=request)

    async def _request(
        self,
        method: str,
        url: str,
        response_model: Type[ResponseT],
        json: Optional[BaseModel] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[ResponseT]:
        body = json.model_dump(mode="json", by_alias=True, exclude_none=True) if json is not None else None
        try:
            response = await self._http.request(method, url, json=body, params=params)
            response.raise_for_status()
            return response_model.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            log.warning("%s %s failed with status %s", method, url, e.response.status_code)
        except httpx.HTTPError as e:
            log.warning("%s %s failed: %s", method, url, e)
        except (ValueError, ValidationError):
            log.exception("Malformed response from %s %s", method, url)
        return None
