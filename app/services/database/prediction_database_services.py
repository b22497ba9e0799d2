# app/services/database/prediction_database_services.py
import math
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database_models.prediction_record import PredictionRecord
from app.models.divination_models import SERVICE_TYPES, PredictionResult


def _check_service_type(service_type: str) -> None:
    if service_type not in SERVICE_TYPES:
        raise ValueError("Service type must be tarot, astrology, bazi, or yijing")


async def create_prediction_record(
    db: AsyncSession,
    user_id: int,
    service_type: str,
    input_data: Dict[str, Any],
    result: PredictionResult,
) -> PredictionRecord:
    _check_service_type(service_type)
    if not input_data:
        raise ValueError("Input data must be a non-empty object")
    # re-validate in case the caller built the result by hand
    result = PredictionResult.model_validate(result.model_dump())

    record = PredictionRecord(
        user_id=user_id,
        service_type=service_type,
        input_data=input_data,
        title=result.title,
        content=result.content,
        summary=result.summary,
        advice=result.advice,
        imagery=result.imagery,
    )
    try:
        db.add(record)
        await db.commit()
        await db.refresh(record)
    except SQLAlchemyError:
        await db.rollback()
        raise
    return record


async def get_record_by_id(db: AsyncSession, user_id: int, record_id: int) -> Optional[PredictionRecord]:
    result = await db.execute(
        select(PredictionRecord).filter(PredictionRecord.id == record_id, PredictionRecord.user_id == user_id)
    )
    return result.scalars().first()


async def get_user_history(
    db: AsyncSession,
    user_id: int,
    service_type: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
) -> Dict[str, Any]:
    """Newest-first page of a user's records with pagination totals."""
    if service_type:
        _check_service_type(service_type)

    filters = [PredictionRecord.user_id == user_id]
    if service_type:
        filters.append(PredictionRecord.service_type == service_type)

    total = (await db.execute(select(func.count(PredictionRecord.id)).filter(*filters))).scalar() or 0
    result = await db.execute(
        select(PredictionRecord)
        .filter(*filters)
        .order_by(desc(PredictionRecord.created_at), desc(PredictionRecord.id))
        .offset((page - 1) * limit)
        .limit(limit)
    )

    return {
        "records": result.scalars().all(),
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


async def get_latest_by_service_type(db: AsyncSession, user_id: int, service_type: str) -> Optional[PredictionRecord]:
    _check_service_type(service_type)
    result = await db.execute(
        select(PredictionRecord)
        .filter(PredictionRecord.user_id == user_id, PredictionRecord.service_type == service_type)
        .order_by(desc(PredictionRecord.created_at), desc(PredictionRecord.id))
    )
    return result.scalars().first()


async def get_user_stats(db: AsyncSession, user_id: int) -> Dict[str, Any]:
    record_count = func.count(PredictionRecord.id).label("record_count")
    result = await db.execute(
        select(PredictionRecord.service_type, record_count, func.max(PredictionRecord.created_at).label("last_prediction"))
        .filter(PredictionRecord.user_id == user_id)
        .group_by(PredictionRecord.service_type)
        .order_by(desc(record_count))
    )
    rows = result.all()

    by_service_type: List[Dict[str, Any]] = [
        {
            "serviceType": row.service_type,
            "count": row.record_count,
            "lastPrediction": row.last_prediction.isoformat() if row.last_prediction else None,
        }
        for row in rows
    ]
    return {"total": sum(item["count"] for item in by_service_type), "byServiceType": by_service_type}


async def delete_record(db: AsyncSession, user_id: int, record_id: int) -> bool:
    record = await get_record_by_id(db, user_id, record_id)
    if not record:
        return False
    try:
        await db.delete(record)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
    return True


async def delete_all_user_records(db: AsyncSession, user_id: int) -> int:
    try:
        result = await db.execute(delete(PredictionRecord).where(PredictionRecord.user_id == user_id))
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
    return result.rowcount
