# app/core/startup.py
import logging

from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis

from app.core.config import settings
from app.core.dependencies import get_redis_client
from app.data.bazi import load_bazi_data
from app.data.iching import load_iching_data
from app.data.tarot import load_tarot_data
from app.data.zodiac import load_zodiac_data

logger = logging.getLogger(__name__)

redis_client_instance: Redis = None


def load_knowledge_tables() -> None:
    load_tarot_data()
    load_zodiac_data()
    load_bazi_data()
    load_iching_data()
    logger.info("Divination knowledge tables loaded successfully.")


async def startup_event(app: FastAPI):
    """
    Initialize resources on application startup.
    """
    global redis_client_instance

    try:
        load_knowledge_tables()

        if settings.RATE_LIMIT_ENABLED:
            async for client in get_redis_client():
                redis_client_instance = client
                break

            await FastAPILimiter.init(redis_client_instance, prefix="limit:")
            logger.info("FastAPILimiter initialized successfully.")

    except Exception as e:
        logger.error(f"Failed to startup: {e}")
        raise


async def shutdown_event(app: FastAPI):
    if redis_client_instance is not None:
        await FastAPILimiter.close()
        await redis_client_instance.close()
