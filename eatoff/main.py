from __future__ import annotations

import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eatoff.api.admin import router as admin_router
from eatoff.api.auth import router as auth_router
from eatoff.api.help import router as help_router
from eatoff.api.restaurants import router as restaurants_router
from eatoff.api.support import router as support_router
from eatoff.core.config import settings
from eatoff.core.database import init_db
from eatoff.core.logging import setup_logging

logger = structlog.get_logger(__name__)

app = FastAPI(title="EatOff Support API")


@app.middleware("http")
async def bind_request_context(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id, method=request.method, path=request.url.path
    )
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.on_event("startup")
async def on_startup() -> None:
    setup_logging()
    if settings.APP_ENV.lower() != "development" and settings.JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in non-development environments")
    await init_db()


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(support_router)
app.include_router(help_router)
app.include_router(restaurants_router)
app.include_router(admin_router)
