"""Health check endpoints."""

import asyncio
import logging
from datetime import UTC, datetime

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from adapters.supabase import SupabaseAdapter, SupabaseConfigError, get_supabase_adapter
from infrastructure.config import get_settings
from infrastructure.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


def _base_info() -> dict:
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health")
async def health_check():
    """Basic health check."""
    return {"status": "healthy", **_base_info()}


@router.get("/health/live")
async def liveness_check():
    """Liveness check."""
    return {"alive": True}


@router.get("/health/db")
async def health_check_db(db: AsyncSession = Depends(get_db)):
    """Health check with database connectivity."""
    try:
        result = await asyncio.wait_for(db.execute(text("SELECT 1")), timeout=5.0)
        result.scalar()
        db_status = "connected"
    except TimeoutError:
        logger.error("Health check DB timeout")
        db_status = "error: database timeout"
    except (SQLAlchemyError, OSError) as e:
        logger.error("Health check DB error: %s", str(e))
        db_status = "error: database check failed"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        **_base_info(),
    }


@router.get("/health/supabase")
async def health_check_supabase(
    adapter: SupabaseAdapter = Depends(get_supabase_adapter),
):
    """Check that the Supabase REST API is reachable."""
    try:
        result = await asyncio.wait_for(asyncio.to_thread(adapter.check_connection), timeout=10.0)
    except SupabaseConfigError as e:
        return {"status": "not_configured", "supabase": str(e), **_base_info()}
    except TimeoutError:
        logger.error("Supabase health check timeout")
        raise HTTPException(status_code=503, detail="Supabase timeout")

    if not result.reachable:
        raise HTTPException(status_code=503, detail="Supabase unavailable")

    return {"status": "healthy", "supabase": "connected", **_base_info()}


@router.get("/health/redis")
async def health_redis():
    """Check Redis connectivity (rate limiter storage)."""
    if not settings.redis_url:
        return {"status": "not_configured", "service": "redis"}

    r = aioredis.from_url(settings.redis_url)
    try:
        await asyncio.wait_for(r.ping(), timeout=3.0)
    except TimeoutError:
        raise HTTPException(status_code=503, detail="Redis timeout")
    except RedisError as e:
        raise HTTPException(status_code=503, detail=f"Redis unavailable: {str(e)}")
    finally:
        await r.aclose()
    return {"status": "healthy", "service": "redis"}
