"""Built-in hold predicates."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from datacompliance.adapters.protocol import DomainAdapter
from datacompliance.core.logging import get_logger
from datacompliance.holds.types import HoldVerdict
from datacompliance.types import UserID

logger = get_logger(__name__)

RECENT_SETTLEMENT_HOLD = "recent_settlement"


class RecentSettlementHold:
    """Veto deletion while the user has recently settled records.

    A settled transaction created within the window may still be disputed
    or not yet reported for tax purposes, so the account has to stay.

    Args:
        adapter: Adapter whose records are inspected
        window_days: Protection window; values below 1 disable the hold
        noun: How the records are named in the veto reason
        clock: Returns the current time (UTC)
    """

    def __init__(
        self,
        adapter: DomainAdapter,
        window_days: int,
        noun: str = "record(s)",
        clock: Callable[[], datetime] | None = None,
    ):
        self._adapter = adapter
        self.window_days = window_days
        self._noun = noun
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def name(self) -> str:
        return f"{RECENT_SETTLEMENT_HOLD}:{self._adapter.domain}"

    async def count_recent(self, user_id: UserID) -> int:
        """Count the user's settled records created within the window."""
        since = self._clock() - timedelta(days=self.window_days)
        count = 0
        async for record in self._adapter.list_user_records(user_id):
            if record.settled and record.created_at is not None and record.created_at >= since:
                count += 1
        return count

    async def __call__(self, user_id: UserID) -> HoldVerdict:
        if self.window_days < 1:
            return HoldVerdict.allow()

        count = await self.count_recent(user_id)
        if count == 0:
            return HoldVerdict.allow()

        logger.debug("recent_settlements_found", user_id=user_id, count=count)
        return HoldVerdict.veto(
            self.name,
            f"The user has {count} settled {self._noun} created within "
            f"the last {self.window_days} days",
        )
