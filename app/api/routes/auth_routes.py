# app/api/routes/auth_routes.py
import logging

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Cookie, Depends, Response, status
from fastapi_limiter.depends import RateLimiter
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.core.responses import success_response
from app.data.database import get_db
from app.models.auth_models import LoginRequest, PasswordValidationError, ProfileUpdate, TokenData, UserCreate
from app.models.database_models.user import User
from app.services.auth_services import (
    authenticate_user,
    clear_auth_cookies,
    create_access_token,
    decode_token,
    get_current_user,
    get_token_data,
    hash_password,
    issue_tokens,
    set_auth_cookies,
    validate_password,
)
from app.services.database.user_database_services import (
    create_user,
    get_user_by_id,
    update_last_login,
    update_profile,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])

register_limiter = RateLimiter(
    times=settings.REGISTER_RATE_LIMIT_TIMES, seconds=settings.REGISTER_RATE_LIMIT_SECONDS
)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)] if settings.RATE_LIMIT_ENABLED else [],
)
async def register(user_data: UserCreate, response: Response, db: AsyncSession = Depends(get_db)):
    """Register a new user and log them in."""
    try:
        validate_password(user_data.password)
    except PasswordValidationError as e:
        raise ValidationError(
            "Invalid input data",
            details=[{"field": "password", "message": message} for message in e.messages],
        )

    try:
        email = validate_email(user_data.email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError("Invalid input data", details=[{"field": "email", "message": str(e)}])

    profile = user_data.profile.model_dump(exclude_none=True) if user_data.profile else None
    try:
        user = await create_user(db, user_data.username, email, hash_password(user_data.password), profile)
    except ValueError as e:
        raise ConflictError(str(e), code="USER_EXISTS")

    logger.info(f"Registered user {user.id} ({user.username})")
    token = issue_tokens(response, user)
    return success_response({"token": token, "user": user.to_public_dict()}, "User registered successfully")


@router.post("/login")
async def login(login_data: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    """Log a user in by email and set the access and refresh tokens as HTTP-only cookies."""
    user = await authenticate_user(db, login_data.email, login_data.password)
    if not user:
        raise AuthenticationError("Invalid email or password", code="INVALID_CREDENTIALS")

    user = await update_last_login(db, user)
    token = issue_tokens(response, user)
    return success_response({"token": token, "user": user.to_public_dict()}, "Logged in successfully")


@router.post("/logout")
async def logout(response: Response):
    clear_auth_cookies(response)
    return success_response(None, "Successfully logged out")


@router.get("/profile")
async def get_profile(token_data: TokenData = Depends(get_token_data), db: AsyncSession = Depends(get_db)):
    current = await get_user_by_id(db, token_data.user_id)
    if current is None:
        raise NotFoundError("User", code="USER_NOT_FOUND")
    return success_response(current.to_public_dict())


@router.put("/profile")
async def edit_profile(
    profile: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await update_profile(db, user, profile.model_dump(exclude_unset=True))
    logger.info(f"Updated profile for user {user.id}")
    return success_response(user.to_public_dict(), "Profile updated")


@router.post("/refresh")
async def refresh_token_route(
    response: Response,
    refresh_token: str | None = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Issue a new access token from the refresh-token cookie."""
    if refresh_token is None:
        raise AuthenticationError("Refresh token missing", code="UNAUTHORIZED")

    token_data = decode_token(refresh_token, expected_type="refresh")
    user = await get_user_by_id(db, token_data.user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")

    new_access_token = create_access_token(data={"sub": str(user.id), "email": user.email})
    set_auth_cookies(response, new_access_token)
    return success_response({"token": new_access_token}, "Access token refreshed")
