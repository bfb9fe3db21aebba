"""Per-request user session.

The session caches the caller's identity and is the only writer of the
credit balance. A debit updates the cached balance from the value the write
returned; `refresh()` re-reads the whole profile row.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from renova.models.contracts import Identity
from renova.services import profiles


class UserSession:
    def __init__(self, db: AsyncSession, identity: Identity) -> None:
        self.db = db
        self._identity = identity

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def user_id(self) -> str:
        return self._identity.id

    async def refresh(self) -> Identity:
        """Re-read the authoritative profile row."""
        profile = await profiles.get_profile(self.db, self.user_id)
        if profile is None:
            raise profiles.ProfileNotFoundError(self.user_id)
        self._identity = profiles.to_identity(profile)
        return self._identity

    async def debit(self, cost: int) -> int:
        """Subtract `cost` from the stored balance and return the new balance.

        The cached identity takes the balance the write returned. Raises
        CreditDebitError; the cached identity is left as it was.
        """
        new_balance = await profiles.debit_credits(self.db, self.user_id, cost)
        self._identity = self._identity.model_copy(update={"credits": new_balance})
        return new_balance
