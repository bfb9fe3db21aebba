"""Bearer-token authentication.

Tokens are HS256 JWTs from the auth provider: `sub` is the user id, plus
`email` and `user_metadata.first_name/last_name`. The first authenticated
request creates the profile with the signup credit grant.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from renova.api.errors import ApiError
from renova.config import settings
from renova.db import get_db
from renova.services import profiles
from renova.services.session import UserSession

logger = structlog.get_logger()

_bearer = HTTPBearer(auto_error=False)

_SESSION_EXPIRED = "Your session has expired. Please sign in again."


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature, expiry and audience. Raises ApiError(401)."""
    try:
        return jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=["HS256"],
            audience=settings.auth_jwt_audience,
        )
    except ExpiredSignatureError as exc:
        raise ApiError(401, "session_expired", _SESSION_EXPIRED) from exc
    except JWTError as exc:
        logger.info("auth_token_rejected", error=str(exc))
        raise ApiError(401, "session_expired", _SESSION_EXPIRED) from exc


async def get_user_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserSession:
    if credentials is None:
        raise ApiError(401, "not_authenticated", "Sign in to continue.")

    claims = decode_token(credentials.credentials)
    user_id = claims.get("sub")
    email = claims.get("email")
    if not user_id or not email:
        raise ApiError(401, "session_expired", _SESSION_EXPIRED)

    metadata = claims.get("user_metadata") or {}
    try:
        profile = await profiles.get_or_create_profile(
            db,
            user_id,
            email,
            first_name=metadata.get("first_name", ""),
            last_name=metadata.get("last_name", ""),
        )
    except ValueError as exc:
        # sub is not a UUID
        raise ApiError(401, "session_expired", _SESSION_EXPIRED) from exc

    structlog.contextvars.bind_contextvars(user_id=user_id)
    return UserSession(db, profiles.to_identity(profile))


async def require_admin(
    session: Annotated[UserSession, Depends(get_user_session)],
) -> UserSession:
    if not session.identity.is_admin:
        raise ApiError(403, "forbidden", "Administrator access required.")
    return session


CurrentSession = Annotated[UserSession, Depends(get_user_session)]
AdminSession = Annotated[UserSession, Depends(require_admin)]
