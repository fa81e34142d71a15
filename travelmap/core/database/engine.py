from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession

from travelmap.core.config import SQLALCHEMY_DATABASE_URL

engine_options: dict[str, Any] = dict(pool_pre_ping=True, echo=False)
if not SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # Some information about pool sizing: https://github.com/brettwooldridge/HikariCP/wiki/About-Pool-Sizing
    engine_options.update(
        pool_size=16,
        max_overflow=0,
        pool_timeout=15,  # seconds
        pool_recycle=1800,
    )

engine = create_async_engine(SQLALCHEMY_DATABASE_URL, **engine_options)
SessionLocal = async_sessionmaker(engine, autocommit=False, autoflush=False, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with get_db_context() as db:
        yield db


@asynccontextmanager
async def get_db_context():
    db: AsyncSession = SessionLocal()
    try:
        yield db
    finally:
        await db.close()
