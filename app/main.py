"""RescueConnect FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api import alerts, auth, health, lifecycle, requests, volunteers
from app.core.config import settings
from app.core.deps import close_notifier

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures are fatal for the call; the client should retry the whole operation."""
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": {"code": "STORE_UNAVAILABLE", "message": "Backing store unavailable, retry"}},
    )


@app.on_event("shutdown")
def release_notifier() -> None:
    close_notifier()


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(volunteers.router)
app.include_router(requests.router)
app.include_router(lifecycle.router)
app.include_router(alerts.router)
