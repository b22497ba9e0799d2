# app/api/routes/system_routes.py
import logging
import time

import psutil
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import cache_manager
from app.core.config import settings
from app.core.errors import utc_timestamp
from app.core.middleware import request_metrics
from app.core.responses import success_response
from app.data.database import engine, get_db
from app.models.database_models.prediction_record import PredictionRecord
from app.models.database_models.user import User
from app.services.auth_services import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])

SLOW_DATABASE_MS = 1000


def process_memory_mb() -> float:
    """Current resident set size of this process."""
    return round(psutil.Process().memory_info().rss / 1024 / 1024, 2)


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    database = {"status": "disconnected"}
    try:
        start = time.perf_counter()
        await db.execute(text("SELECT 1"))
        database = {"status": "connected", "responseTime": round((time.perf_counter() - start) * 1000, 2)}
    except Exception:
        logger.exception("Database health check failed")
        database = {"status": "error"}

    if database["status"] == "error":
        status = "unhealthy"
    elif database.get("responseTime", 0) > SLOW_DATABASE_MS:
        status = "degraded"
    else:
        status = "healthy"

    body = success_response(
        {
            "status": status,
            "timestamp": utc_timestamp(),
            "uptime": round(request_metrics.uptime, 2),
            "services": {"database": database, "memory": {"rssMb": process_memory_mb()}},
            "version": settings.APP_VERSION,
        }
    )
    return JSONResponse(status_code=503 if status == "unhealthy" else 200, content=body)


@router.get("/metrics")
async def metrics(user: User = Depends(get_current_user)):
    return success_response({**request_metrics.snapshot(), "timestamp": utc_timestamp()})


@router.get("/cache")
async def cache_stats(user: User = Depends(get_current_user)):
    stats = cache_manager.stats()
    lookups = stats["hits"] + stats["misses"]
    return success_response(
        {
            **stats,
            "hitRate": round(stats["hits"] / lookups * 100, 2) if lookups else 0,
            "memoryUsageMB": round(stats["memory_usage"] / 1024 / 1024, 2),
        }
    )


@router.get("/database")
async def database_stats(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    users = (await db.execute(select(func.count(User.id)))).scalar() or 0
    records = (await db.execute(select(func.count(PredictionRecord.id)))).scalar() or 0
    return success_response(
        {
            "pool": engine.pool.status(),
            "dialect": engine.dialect.name,
            "tables": {"users": users, "predictionRecords": records},
        }
    )


@router.get("/performance")
async def performance(user: User = Depends(get_current_user)):
    return success_response(
        {
            "totalRequests": request_metrics.total_requests,
            "averageResponseTime": request_metrics.average_response_time,
            "slowRequests": request_metrics.recent_slow_requests(),
        }
    )
