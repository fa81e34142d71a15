import os
from typing import Optional

from travelmap.utils import get_logger

log = get_logger(__name__)

# Database connection URL (async)
# Example: "postgresql+asyncpg://user@localhost/travelmap_db"
SQLALCHEMY_DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///./travelmap.db")

# Allow requests from this origin
ALLOW_ORIGIN: Optional[str] = os.environ.get("ALLOW_ORIGIN")

# If true, enable docs and openapi.json endpoints
ENABLE_DOCS: bool = os.environ.get("ENABLE_DOCS") == "1"

# Firebase storage bucket for pin photos
STORAGE_BUCKET: str = os.environ.get("STORAGE_BUCKET", "travelmap-app.appspot.com")

# Rate limit applied to the like and follow toggles
TOGGLE_RATE_LIMIT: str = os.environ.get("TOGGLE_RATE_LIMIT", "60/minute")

# Base URL of the API, used by the map client
API_URL: str = os.environ.get("TRAVELMAP_API_URL", "http://localhost:8000")


def _int_from_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        log.warning("Could not convert %s to int, defaulting to %s", name, default)
        return default


# Max number of markers rendered for a viewport
VISIBLE_PIN_CAP: int = _int_from_env("VISIBLE_PIN_CAP", 200)

# Max number of pins pulled from the database for a single map load, before culling
MAP_FETCH_LIMIT: int = _int_from_env("MAP_FETCH_LIMIT", 1000)
