"""Current identity endpoints."""

import structlog
from fastapi import APIRouter

from renova.api.auth import CurrentSession
from renova.models.contracts import Identity

logger = structlog.get_logger()

router = APIRouter(tags=["session"])


@router.get("/me", response_model=Identity)
async def get_me(session: CurrentSession) -> Identity:
    return session.identity


@router.post("/me/refresh", response_model=Identity)
async def refresh_me(session: CurrentSession) -> Identity:
    """Re-read the stored profile (after a purchase or an admin edit)."""
    identity = await session.refresh()
    logger.info("session_refreshed", credits=identity.credits)
    return identity
