# app/core/responses.py
from typing import Any, Optional

from app.core.errors import utc_timestamp


def success_response(data: Any, message: Optional[str] = None) -> dict:
    body = {"success": True, "data": data, "timestamp": utc_timestamp()}
    if message:
        body["message"] = message
    return body
