import asyncio

from travelmap.core.database.engine import engine
from travelmap.core.database.models import Base
from travelmap.utils import get_logger

log = get_logger(__name__)


async def init_db():
    log.info("Creating tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    log.info("Created all tables!")


if __name__ == "__main__":
    asyncio.run(init_db())
