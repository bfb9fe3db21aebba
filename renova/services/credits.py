"""Credit accounting for paid AI actions.

Order for every paid action:
1. credit check against the cached balance (admins skip it),
2. the external call,
3. on success only, a single debit of the action's cost (admins skip it).

A failed call never debits. A debit, or the profile re-read after it, that
fails after a successful call still returns the result, with a warning that
the shown balance may be stale.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

from renova.models.contracts import Identity
from renova.services.profiles import CreditDebitError, ProfileNotFoundError
from renova.services.session import UserSession
from renova.utils.gemini import Err, ErrKind, Ok

logger = structlog.get_logger()

T = TypeVar("T")


class PaidAction(StrEnum):
    REDESIGN = "redesign"
    FLOORPLAN_CONCEPT = "floorplan_concept"
    VARIATION = "variation"
    COST_ESTIMATE = "cost_estimate"
    INTERNAL_VIEWS = "internal_views"
    CREATIVITY = "creativity"


ACTION_COSTS: dict[PaidAction, int] = {
    PaidAction.REDESIGN: 2,
    PaidAction.FLOORPLAN_CONCEPT: 3,
    PaidAction.VARIATION: 2,
    PaidAction.COST_ESTIMATE: 1,
    PaidAction.INTERNAL_VIEWS: 5,
    PaidAction.CREATIVITY: 5,
}

DEBIT_WARNING = (
    "Your result is ready, but we could not deduct the credits. "
    "The balance shown may be out of date."
)

REFRESH_WARNING = (
    "Your result is ready and the credits were deducted, but we could not reload "
    "your profile. The balance shown may be out of date."
)


@dataclass(frozen=True)
class InsufficientCredits:
    action: PaidAction
    required: int
    balance: int

    @property
    def message(self) -> str:
        return f"Insufficient credits: this action needs {self.required} credits."


@dataclass(frozen=True)
class Charged(Generic[T]):
    value: T
    credits_charged: int
    balance: int
    debit_warning: str | None = None


@dataclass(frozen=True)
class Failed:
    reason: str
    kind: ErrKind


def check_credits(identity: Identity, action: PaidAction) -> InsufficientCredits | None:
    """Return the shortfall, or None when the action may proceed."""
    if identity.is_admin:
        return None
    cost = ACTION_COSTS[action]
    if identity.credits < cost:
        return InsufficientCredits(action=action, required=cost, balance=identity.credits)
    return None


async def run_paid_action(
    session: UserSession,
    action: PaidAction,
    call: Callable[[], Awaitable[Ok[T] | Err]],
) -> Charged[T] | InsufficientCredits | Failed:
    identity = session.identity
    log = logger.bind(action=str(action), user_id=identity.id)

    shortfall = check_credits(identity, action)
    if shortfall is not None:
        log.info("insufficient_credits", required=shortfall.required, balance=shortfall.balance)
        return shortfall

    result = await call()
    if isinstance(result, Err):
        log.warning("paid_action_failed", kind=result.kind, reason=result.reason[:200])
        return Failed(reason=result.reason, kind=result.kind)

    if identity.is_admin:
        log.info("paid_action_admin_not_charged")
        return Charged(value=result.value, credits_charged=0, balance=identity.credits)

    cost = ACTION_COSTS[action]
    try:
        balance = await session.debit(cost)
    except CreditDebitError:
        log.error("paid_action_debit_failed", cost=cost)
        return Charged(
            value=result.value,
            credits_charged=0,
            balance=identity.credits,
            debit_warning=DEBIT_WARNING,
        )

    # The debit is committed; a failed re-read must not lose the result
    try:
        balance = (await session.refresh()).credits
    except (SQLAlchemyError, ProfileNotFoundError) as exc:
        log.warning("paid_action_refresh_failed", cost=cost, error=str(exc))
        await session.db.rollback()
        return Charged(
            value=result.value,
            credits_charged=cost,
            balance=balance,
            debit_warning=REFRESH_WARNING,
        )
    return Charged(value=result.value, credits_charged=cost, balance=balance)
