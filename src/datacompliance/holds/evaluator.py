"""Hold evaluator: runs every registered can-delete predicate.

Predicates run one after another in registration order so that the same
user always produces the same veto message. The first veto wins.
"""

from datacompliance.core.logging import get_logger
from datacompliance.core.timeouts import bounded
from datacompliance.holds.types import HoldPredicate, HoldVerdict
from datacompliance.observability.metrics import record_hold_veto
from datacompliance.types import UserID

logger = get_logger(__name__)

EVALUATION_FAILED_REASON = "evaluation failed"


class HoldEvaluator:
    """Evaluate registered holds against a user.

    Usage:
        evaluator = HoldEvaluator()
        evaluator.register("recent_settlement", RecentSettlementHold(adapter, days=90))

        verdict = await evaluator.evaluate(user_id)
        if verdict.vetoed:
            print(verdict.source, verdict.reason)
    """

    def __init__(self, timeout: float | None = None):
        """Initialize the evaluator.

        Args:
            timeout: Default bound on each predicate call, in seconds
        """
        self._holds: dict[str, HoldPredicate] = {}
        self._timeout = timeout

    def register(self, name: str, predicate: HoldPredicate) -> None:
        """Register a hold; evaluation follows registration order.

        Raises:
            ValueError: If a hold with the same name is already registered.
        """
        if name in self._holds:
            raise ValueError(f"Hold already registered: {name}")
        self._holds[name] = predicate
        logger.info("hold_registered", hold=name)

    def unregister(self, name: str) -> bool:
        """Remove a hold; returns False if it was not registered."""
        return self._holds.pop(name, None) is not None

    @property
    def hold_names(self) -> list[str]:
        """Registered hold names in evaluation order."""
        return list(self._holds)

    async def evaluate(self, user_id: UserID, timeout: float | None = None) -> HoldVerdict:
        """Run every hold until one vetoes.

        A hold that cannot be evaluated counts as a veto: failing to confirm
        that deletion is safe must never permit it.

        Args:
            user_id: The user to check
            timeout: Bound on each predicate call (defaults to the evaluator's)

        Returns:
            The first vetoing verdict, or a non-vetoed verdict
        """
        effective_timeout = timeout if timeout is not None else self._timeout

        for name, predicate in self._holds.items():
            try:
                verdict = await bounded(
                    predicate(user_id),
                    timeout=effective_timeout,
                    domain=f"hold:{name}",
                    operation="evaluate",
                )
            except Exception as e:
                logger.warning(
                    "hold_evaluation_failed",
                    hold=name,
                    user_id=user_id,
                    error_type=type(e).__name__,
                )
                record_hold_veto(name)
                return HoldVerdict.veto(name, EVALUATION_FAILED_REASON)

            if verdict.vetoed:
                if verdict.source != name:
                    verdict = HoldVerdict.veto(name, verdict.reason or "vetoed")
                logger.info("hold_vetoed", hold=name, user_id=user_id)
                record_hold_veto(name)
                return verdict

        logger.debug("holds_passed", user_id=user_id, holds=len(self._holds))
        return HoldVerdict.allow()
