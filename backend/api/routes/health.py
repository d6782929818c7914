"""Health check endpoint."""

import time
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.config import get_settings
from app.dependencies import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_start_time = time.monotonic()


@router.get("/health", response_model=dict[str, Any])
async def health_check(db: AsyncSession = Depends(get_db)) -> Any:
    """
    Liveness plus a database round trip.
    Returns 503 if the database is unreachable.
    """
    settings = get_settings()

    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        database = "unavailable"

    body = {
        "status": "ok" if database == "ok" else "degraded",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": database,
        "uptime_seconds": round(time.monotonic() - _start_time, 1),
    }
    if database != "ok":
        return JSONResponse(status_code=503, content=body)
    return body
