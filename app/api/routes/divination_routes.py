# app/api/routes/divination_routes.py
import logging
from typing import Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import cache_key, cache_manager, invalidate_user_cache
from app.core.errors import NotFoundError, ValidationError
from app.core.responses import success_response
from app.core.security import divination_rate_limit
from app.data.database import get_db
from app.models.database_models.user import User
from app.models.divination_models import (
    SERVICE_TYPES,
    AstrologyRequest,
    BaziRequest,
    TarotRequest,
    YijingRequest,
)
from app.services import divination_services
from app.services.auth_services import get_current_user, get_optional_user
from app.services.database import prediction_database_services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Divination"])

HISTORY_CACHE_TTL = 300
RECORD_CACHE_TTL = 600
MAX_HISTORY_LIMIT = 100


async def _respond(service_type, run, payload, user: Optional[User], db: AsyncSession) -> dict:
    """Generate a reading, store it for signed-in users and wrap it in the success envelope."""
    try:
        data, result = run(payload)
    except ValueError as e:
        raise ValidationError("Invalid input data", details=str(e))

    data["result"] = result.model_dump()
    if user is not None:
        record = await prediction_database_services.create_prediction_record(
            db, user.id, service_type, divination_services.input_data(payload), result
        )
        invalidate_user_cache(user.id)
        data["recordId"] = record.id
        logger.info(f"Saved {service_type} prediction {record.id} for user {user.id}")

    return success_response(data)


async def _cached(request: Request, user: User, ttl: int, build: Callable[[], Awaitable[dict]]) -> JSONResponse:
    key = cache_key(user.id, request.url.path, request.url.query)
    cached = cache_manager.get(key)
    if cached is not None:
        return JSONResponse(content=cached, headers={"X-Cache": "HIT"})

    body = await build()
    if body.get("success") is not False:
        cache_manager.set(key, body, ttl)
    return JSONResponse(content=body, headers={"X-Cache": "MISS"})


@router.post("/tarot")
@divination_rate_limit
async def tarot_reading(
    request: Request,
    payload: TarotRequest,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await _respond("tarot", divination_services.run_tarot, payload, user, db)


@router.post("/astrology")
@divination_rate_limit
async def astrology_reading(
    request: Request,
    payload: AstrologyRequest,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await _respond("astrology", divination_services.run_astrology, payload, user, db)


@router.post("/bazi")
@divination_rate_limit
async def bazi_reading(
    request: Request,
    payload: BaziRequest,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await _respond("bazi", divination_services.run_bazi, payload, user, db)


@router.post("/yijing")
@divination_rate_limit
async def yijing_reading(
    request: Request,
    payload: YijingRequest,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await _respond("yijing", divination_services.run_yijing, payload, user, db)


@router.get("/history")
async def prediction_history(
    request: Request,
    service_type: Optional[str] = Query(default=None, alias="serviceType"),
    limit: int = 50,
    page: int = 1,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if service_type and service_type not in SERVICE_TYPES:
        raise ValidationError("Service type must be tarot, astrology, bazi, or yijing", code="INVALID_SERVICE_TYPE")
    limit = min(MAX_HISTORY_LIMIT, max(1, limit))
    page = max(1, page)

    async def build():
        history = await prediction_database_services.get_user_history(db, user.id, service_type, page, limit)
        return success_response(
            {
                "records": [record.to_summary_dict() for record in history["records"]],
                "pagination": {
                    "total": history["total"],
                    "page": history["page"],
                    "limit": history["limit"],
                    "totalPages": history["total_pages"],
                },
            }
        )

    return await _cached(request, user, HISTORY_CACHE_TTL, build)


@router.get("/stats")
async def prediction_stats(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    async def build():
        return success_response(await prediction_database_services.get_user_stats(db, user.id))

    return await _cached(request, user, HISTORY_CACHE_TTL, build)


@router.get("/history/{record_id}")
async def prediction_detail(
    request: Request,
    record_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    async def build():
        record = await prediction_database_services.get_record_by_id(db, user.id, record_id)
        if record is None:
            raise NotFoundError("Prediction record")
        return success_response(record.to_dict())

    return await _cached(request, user, RECORD_CACHE_TTL, build)


@router.delete("/history/{record_id}")
async def delete_prediction(
    record_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deleted = await prediction_database_services.delete_record(db, user.id, record_id)
    if not deleted:
        raise NotFoundError("Prediction record")

    invalidate_user_cache(user.id)
    logger.info(f"Deleted prediction {record_id} for user {user.id}")
    return success_response({"id": record_id}, "Prediction record deleted")
