# app/services/database/user_database_services.py
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database_models.user import User

PROFILE_FIELDS = ("birth_date", "birth_time", "birth_place", "gender")


async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(select(User).filter(User.id == user_id))
    return result.scalars().first()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).filter(User.username == username))
    return result.scalars().first()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).filter(User.email == email.lower()))
    return result.scalars().first()


async def _check_available(db: AsyncSession, username: str, email: str):
    if await get_user_by_username(db, username) is not None:
        raise ValueError("Username already taken")
    if await get_user_by_email(db, email) is not None:
        raise ValueError("Email already registered")


async def create_user(
    db: AsyncSession,
    username: str,
    email: str,
    hashed_password: bytes,
    profile: Optional[Dict[str, Any]] = None,
) -> User:
    email = email.lower()
    await _check_available(db, username, email)

    db_user = User(username=username, email=email, hashed_password=hashed_password)
    for field, value in (profile or {}).items():
        if field in PROFILE_FIELDS:
            setattr(db_user, field, value)

    try:
        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
    except IntegrityError:
        # lost a race with a concurrent registration
        await db.rollback()
        await _check_available(db, username, email)
        raise ValueError("Email already registered")
    except SQLAlchemyError:
        await db.rollback()
        raise
    return db_user


async def update_last_login(db: AsyncSession, user: User) -> User:
    user.last_login_at = datetime.utcnow()
    await db.commit()
    await db.refresh(user)
    return user


async def update_profile(db: AsyncSession, user: User, profile: Dict[str, Any]) -> User:
    for field, value in profile.items():
        if field in PROFILE_FIELDS:
            setattr(user, field, value)
    try:
        await db.commit()
        await db.refresh(user)
    except SQLAlchemyError:
        await db.rollback()
        raise
    return user
