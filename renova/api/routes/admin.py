"""Admin console: list identities and overwrite balances."""

import structlog
from fastapi import APIRouter

from renova.api.auth import AdminSession
from renova.api.errors import error_response
from renova.models.contracts import AdminSetCreditsRequest, ErrorResponse, Identity
from renova.services import profiles

logger = structlog.get_logger()

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/users",
    response_model=list[Identity],
    responses={403: {"model": ErrorResponse}},
)
async def list_users(session: AdminSession) -> list[Identity]:
    rows = await profiles.list_profiles(session.db)
    return [profiles.to_identity(p) for p in rows]


@router.put(
    "/users/{user_id}/credits",
    response_model=Identity,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def set_user_credits(user_id: str, body: AdminSetCreditsRequest, session: AdminSession):
    try:
        profile = await profiles.set_credits(session.db, user_id, body.credits)
    except (profiles.ProfileNotFoundError, ValueError):
        return error_response(404, "not_found", "User not found")

    logger.info("admin_credits_set", target_user_id=user_id, credits=body.credits)
    if user_id == session.user_id:
        await session.refresh()
    return profiles.to_identity(profile)
