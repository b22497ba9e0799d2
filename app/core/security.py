# app/core/security.py
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

# Per-client limiter for the divination endpoints. Storage is in memory, each worker counts on its own.
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

divination_rate_limit = limiter.limit(settings.DIVINATION_RATE_LIMIT)
