"""Health check that also confirms the database answers.

A "disconnected" database does not change the overall status: the endpoint
always returns 200 so load balancers keep routing.
"""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter
from sqlalchemy import text

from renova.config import settings
from renova.db import get_engine

logger = structlog.get_logger()

router = APIRouter(tags=["health"])

_CHECK_TIMEOUT = 3.0  # seconds


async def _check_postgres() -> str:
    try:
        async with asyncio.timeout(_CHECK_TIMEOUT):
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
        return "connected"
    except Exception as exc:
        logger.debug("health_postgres_failed", error=str(exc))
        return "disconnected"


@router.get("/health")
async def health_check() -> dict:
    return {
        "status": "ok",
        "version": "0.1.0",
        "environment": settings.environment,
        "postgres": await _check_postgres(),
    }
