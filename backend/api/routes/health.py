"""Liveness and database health endpoints."""

import asyncio
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.config import get_settings
from infrastructure.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health")
settings = get_settings()

DB_PROBE_TIMEOUT = 5.0


def _service_info(healthy: bool) -> dict:
    return {
        "success": healthy,
        "status": "healthy" if healthy else "degraded",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def _probe_database(db: AsyncSession) -> str:
    """Round-trip ``SELECT 1``; the result names the failure, never its details."""
    try:
        await asyncio.wait_for(db.execute(text("SELECT 1")), timeout=DB_PROBE_TIMEOUT)
    except TimeoutError:
        logger.error("Database probe timed out after %.0fs", DB_PROBE_TIMEOUT)
        return "error: database timeout"
    except Exception as e:
        logger.error("Database probe failed: %s", type(e).__name__)
        return "error: database check failed"
    return "connected"


@router.get("")
async def health_check():
    return _service_info(healthy=True)


@router.get("/db")
async def health_check_db(db: AsyncSession = Depends(get_db)):
    database = await _probe_database(db)
    return {**_service_info(healthy=database == "connected"), "database": database}
