# app/data/database.py
import logging

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)


def to_async_url(url: str) -> str:
    """Swap a sync driver for its async counterpart (asyncpg, aiosqlite)."""
    if url.startswith("postgresql://"):
        adapted = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("sqlite://"):
        adapted = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    else:
        return url
    logger.warning(f"Adapted database URL to: {adapted}. Please update your configuration.")
    return adapted


async_database_url = to_async_url(settings.DATABASE_URL)

engine = create_async_engine(async_database_url, echo=False)

AsyncSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine, class_=AsyncSession, expire_on_commit=False
)

Base = declarative_base()


async def get_db():
    db = AsyncSessionLocal()
    try:
        yield db
    finally:
        await db.close()
