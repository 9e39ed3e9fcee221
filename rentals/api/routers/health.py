"""
Health check endpoints for monitoring and orchestration.

- /health: liveness check (always 200 while the process runs)
- /health/ready: readiness check; pings the database in SQL mode
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentals.api.dependencies import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "service": "rental-ledger"}


@router.get("/health/ready")
async def health_check_ready(session: AsyncSession | None = Depends(get_session)):
    """
    Readiness probe.

    The in-memory store is always ready. In SQL mode returns 503 when the
    database does not answer.
    """
    if session is None:
        return {"status": "ready", "checks": {"storage": "in_memory"}}

    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
    except (SQLAlchemyError, OSError) as e:
        logger.error("Readiness check: database unhealthy", exc_info=e)
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "checks": {"database": "unhealthy"}},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
