"""Profile rows: lookup, first-login creation and balance writes."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from renova.config import settings
from renova.models.contracts import Identity
from renova.models.db import Profile

logger = structlog.get_logger()


class ProfileNotFoundError(LookupError):
    pass


class CreditDebitError(RuntimeError):
    """The balance write after a successful generation did not go through."""


def to_identity(profile: Profile) -> Identity:
    return Identity(
        id=str(profile.id),
        first_name=profile.first_name or "",
        last_name=profile.last_name or "",
        email=profile.email,
        credits=profile.credits,
        is_admin=profile.is_admin,
    )


def _as_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(value)


async def get_profile(db: AsyncSession, user_id: str | uuid.UUID) -> Profile | None:
    return await db.get(Profile, _as_uuid(user_id), populate_existing=True)


async def get_or_create_profile(
    db: AsyncSession,
    user_id: str,
    email: str,
    first_name: str = "",
    last_name: str = "",
) -> Profile:
    """Return the caller's profile, creating it with signup credits on first login."""
    profile = await get_profile(db, user_id)
    if profile is not None:
        return profile

    profile = Profile(
        id=_as_uuid(user_id),
        email=email,
        first_name=first_name,
        last_name=last_name,
        credits=settings.signup_credits,
        is_admin=False,
    )
    db.add(profile)
    try:
        await db.commit()
    except IntegrityError:
        # Concurrent first request created it already
        await db.rollback()
        existing = await get_profile(db, user_id)
        if existing is None:
            raise
        return existing
    logger.info("profile_created", user_id=user_id, credits=settings.signup_credits)
    return profile


async def debit_credits(db: AsyncSession, user_id: str, cost: int) -> int:
    """Atomically subtract `cost` and return the new balance.

    Refuses to take the balance below zero; any failure surfaces as
    CreditDebitError.
    """
    stmt = (
        update(Profile)
        .where(Profile.id == _as_uuid(user_id), Profile.credits >= cost)
        .values(credits=Profile.credits - cost)
        .returning(Profile.credits)
    )
    try:
        new_balance = (await db.execute(stmt)).scalar_one_or_none()
        if new_balance is None:
            await db.rollback()
            raise CreditDebitError("Balance changed before the debit could be applied")
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("credits_debit_failed", user_id=user_id, cost=cost, error=str(exc))
        raise CreditDebitError("Could not write the new balance") from exc
    logger.info("credits_debited", user_id=user_id, cost=cost, balance=new_balance)
    return new_balance


async def add_credits_by_email(db: AsyncSession, email: str, amount: int) -> tuple[int, int]:
    """Increment the balance of the profile with this email.

    Returns (old_balance, new_balance). Raises ProfileNotFoundError.
    """
    profile = (
        await db.execute(select(Profile).where(Profile.email == email))
    ).scalar_one_or_none()
    if profile is None:
        raise ProfileNotFoundError(email)
    old_balance = profile.credits
    stmt = (
        update(Profile)
        .where(Profile.id == profile.id)
        .values(credits=Profile.credits + amount)
        .returning(Profile.credits)
    )
    new_balance = (await db.execute(stmt)).scalar_one()
    await db.commit()
    logger.info("credits_added", user_id=str(profile.id), amount=amount, balance=new_balance)
    return old_balance, new_balance


async def set_credits(db: AsyncSession, user_id: str, credits: int) -> Profile:
    """Overwrite a balance (admin console)."""
    profile = await get_profile(db, user_id)
    if profile is None:
        raise ProfileNotFoundError(user_id)
    profile.credits = credits
    await db.commit()
    logger.info("credits_overwritten", user_id=user_id, credits=credits)
    return profile


async def list_profiles(db: AsyncSession) -> list[Profile]:
    result = await db.execute(select(Profile).order_by(Profile.created_at.desc()))
    return list(result.scalars().all())
