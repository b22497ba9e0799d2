# app/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from app.api.routes import (
    auth_routes,
    divination_routes,
    root_routes,
    system_routes,
)
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.middleware import RequestLoggingMiddleware
from app.core.security import limiter
from app.core.startup import shutdown_event, startup_event

app = FastAPI(title="Divination API", version=settings.APP_VERSION)

# slowapi looks the limiter up on app state; its 429 goes through the HTTP exception handler
app.state.limiter = limiter

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1024)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time", "X-Cache"],
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

register_exception_handlers(app)

app.include_router(root_routes.router)
app.include_router(auth_routes.router, prefix="/api/auth")
app.include_router(divination_routes.router, prefix="/api/divination")
app.include_router(system_routes.router, prefix="/api/system")


@app.on_event("startup")
async def app_startup():
    await startup_event(app)


@app.on_event("shutdown")
async def app_shutdown():
    await shutdown_event(app)
