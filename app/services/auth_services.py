# app/services/auth_services.py
import logging
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from fastapi import Depends, Request, Response
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import AuthenticationError
from app.data.database import get_db
from app.models.auth_models import PasswordValidationError, TokenData
from app.models.database_models.user import User
from app.services.database.user_database_services import get_user_by_email, get_user_by_id

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 100


def verify_password(plain_password, hashed_password):
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8") if isinstance(hashed_password, str) else hashed_password,
    )


def hash_password(password):
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())


async def authenticate_user(db: AsyncSession, email: str, password: str):
    user = await get_user_by_email(db, email)
    if not user or not user.is_active:
        return False
    if not verify_password(password, user.hashed_password):
        return False
    return user


def _token_claims(user: User) -> dict:
    return {"sub": str(user.id), "email": user.email}


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str, expected_type: str = "access") -> TokenData:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired", code="TOKEN_EXPIRED")
    except JWTError:
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")

    subject = payload.get("sub")
    if payload.get("type") != expected_type or not subject or not str(subject).isdigit():
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")
    return TokenData(user_id=int(subject), email=payload.get("email"), token_type=payload.get("type"))


def validate_password(password: str):
    """Ensure password length is within bounds."""
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"at least {MIN_PASSWORD_LENGTH} characters")
    if len(password) > MAX_PASSWORD_LENGTH:
        errors.append(f"at most {MAX_PASSWORD_LENGTH} characters")

    if errors:
        raise PasswordValidationError(errors)

    return True


def extract_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()
        if token:
            return token
    return request.cookies.get("access_token")


def get_token_data(request: Request) -> TokenData:
    token = extract_token(request)
    if not token:
        raise AuthenticationError("Authentication required", code="UNAUTHORIZED")
    return decode_token(token)


async def get_current_user(
    token_data: TokenData = Depends(get_token_data), db: AsyncSession = Depends(get_db)
) -> User:
    user = await get_user_by_id(db, token_data.user_id)
    if not user or not user.is_active:
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")
    return user


async def get_optional_user(request: Request, db: AsyncSession = Depends(get_db)) -> Optional[User]:
    token = extract_token(request)
    if not token:
        return None
    try:
        token_data = decode_token(token)
    except AuthenticationError as e:
        logger.debug(f"Ignoring bad token on {request.url.path}: {e.code}")
        return None

    user = await get_user_by_id(db, token_data.user_id)
    if not user or not user.is_active:
        return None
    return user


def issue_tokens(response: Response, user: User) -> str:
    """Create both tokens, set them as HTTP-only cookies and return the access token."""
    access_token = create_access_token(data=_token_claims(user))
    refresh_token = create_refresh_token(data=_token_claims(user))
    set_auth_cookies(response, access_token, refresh_token)
    return access_token


def set_auth_cookies(response: Response, access_token: str, refresh_token: Optional[str] = None):
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
        expires=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )
    if refresh_token:
        response.set_cookie(
            key="refresh_token",
            value=refresh_token,
            httponly=True,
            secure=not settings.DEBUG,
            samesite="lax",
            expires=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
            path="/",
        )


def clear_auth_cookies(response: Response):
    response.delete_cookie("access_token", path="/")
    response.delete_cookie("refresh_token", path="/")
