from travelmap.client.api import TravelMapClient
from travelmap.client.collection import PinCollection
from travelmap.client.coordinator import LikeCoordinator
from travelmap.client.notices import Notice, NoticeBoard
from travelmap.client.session import MapSession

__all__ = ["TravelMapClient", "PinCollection", "LikeCoordinator", "Notice", "NoticeBoard", "MapSession"]
