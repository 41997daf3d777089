"""Deletion holds: business rules that can veto a user's erasure.

Example Usage:
    ```python
    from datacompliance.holds import HoldEvaluator, RecentSettlementHold

    evaluator = HoldEvaluator(timeout=30.0)
    hold = RecentSettlementHold(subscriptions_adapter, window_days=90)
    evaluator.register(hold.name, hold)

    verdict = await evaluator.evaluate(user_id)
    ```
"""

from datacompliance.holds.evaluator import EVALUATION_FAILED_REASON, HoldEvaluator
from datacompliance.holds.predicates import RECENT_SETTLEMENT_HOLD, RecentSettlementHold
from datacompliance.holds.types import HoldPredicate, HoldVerdict

__all__ = [
    "HoldEvaluator",
    "HoldPredicate",
    "HoldVerdict",
    "RecentSettlementHold",
    "EVALUATION_FAILED_REASON",
    "RECENT_SETTLEMENT_HOLD",
]
