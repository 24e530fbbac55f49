"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from newsdesk_ledger.api.dependencies import DbSession, LedgerCache
from newsdesk_ledger.models import LedgerTransaction, Order

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class CacheStatus(BaseModel):
    """Business view cache counters."""

    entries: int
    stale_paths: int
    hits: int
    misses: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str
    orders: int | None = None
    ledger_entries: int | None = None
    cache: CacheStatus


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(db: DbSession, cache: LedgerCache) -> HealthResponse:
    """Check that the ledger tables answer and report cache state."""
    orders = ledger_entries = None
    db_status = "unhealthy"
    try:
        orders = await db.scalar(select(func.count()).select_from(Order))
        ledger_entries = await db.scalar(select(func.count()).select_from(LedgerTransaction))
        db_status = "healthy"
    except SQLAlchemyError:
        logger.warning("Ledger health check failed", exc_info=True)

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        orders=orders,
        ledger_entries=ledger_entries,
        cache=CacheStatus(**cache.stats()),
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check(db: DbSession):
    """Ready once the ledger schema exists."""
    try:
        await db.scalar(select(func.count()).select_from(LedgerTransaction))
    except SQLAlchemyError:
        logger.warning("Ledger schema not ready", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready"},
        )
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
