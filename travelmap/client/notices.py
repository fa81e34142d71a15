import logging
from collections import deque
from dataclasses import dataclass

from travelmap.utils import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Notice:
    message: str
    level: str = "info"  # "info" | "success" | "error"


class NoticeBoard:
    """Transient, non-blocking messages for the user, e.g. a failed like."""

    def __init__(self, max_notices: int = 20):
        self._notices: deque[Notice] = deque(maxlen=max_notices)

    def post(self, message: str, level: str = "info") -> Notice:
        notice = Notice(message=message, level=level)
        log.log(logging.WARNING if level == "error" else logging.INFO, "Notice: %s", message)
        self._notices.append(notice)
        return notice

    @property
    def notices(self) -> list[Notice]:
        return list(self._notices)

    def drain(self) -> list[Notice]:
        """Return and clear the pending notices."""
        notices = list(self._notices)
        self._notices.clear()
        return notices
