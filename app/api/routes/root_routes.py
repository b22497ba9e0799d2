# app/api/routes/root_routes.py
from fastapi import APIRouter

from app.core.config import settings
from app.core.responses import success_response

router = APIRouter(tags=["Root"])


@router.get("/api")
async def read_root():
    return success_response(
        {
            "name": "Divination API",
            "version": settings.APP_VERSION,
            "endpoints": {
                "auth": "/api/auth",
                "divination": "/api/divination",
                "system": "/api/system",
            },
        },
        "Divination API is running",
    )
