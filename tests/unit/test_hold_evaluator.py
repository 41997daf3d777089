"""Unit tests for the hold evaluator."""

import asyncio

import pytest
from prometheus_client import REGISTRY

from datacompliance.core.exceptions import StoreUnavailable
from datacompliance.holds import EVALUATION_FAILED_REASON, HoldEvaluator, HoldVerdict


def allow_hold(calls: list[str], name: str):
    async def predicate(user_id):
        calls.append(name)
        return HoldVerdict.allow()

    return predicate


def veto_hold(calls: list[str], name: str, reason: str):
    async def predicate(user_id):
        calls.append(name)
        return HoldVerdict.veto(name, reason)

    return predicate


class TestHoldRegistration:
    """Tests for registering holds."""

    def test_registration_order_is_kept(self):
        """Test that hold names come back in registration order."""
        evaluator = HoldEvaluator()
        calls: list[str] = []
        for name in ("b", "a", "c"):
            evaluator.register(name, allow_hold(calls, name))

        assert evaluator.hold_names == ["b", "a", "c"]

    def test_duplicate_name_rejected(self):
        """Test that a hold name can only be registered once."""
        evaluator = HoldEvaluator()
        evaluator.register("a", allow_hold([], "a"))

        with pytest.raises(ValueError, match="already registered"):
            evaluator.register("a", allow_hold([], "a"))

    def test_unregister(self):
        """Test removing a hold."""
        evaluator = HoldEvaluator()
        evaluator.register("a", allow_hold([], "a"))

        assert evaluator.unregister("a") is True
        assert evaluator.unregister("a") is False
        assert evaluator.hold_names == []


class TestHoldEvaluation:
    """Tests for HoldEvaluator.evaluate."""

    @pytest.mark.asyncio
    async def test_no_holds_allows(self):
        """Test that an evaluator without holds never vetoes."""
        verdict = await HoldEvaluator().evaluate(42)

        assert verdict.vetoed is False
        assert verdict.reason is None

    @pytest.mark.asyncio
    async def test_all_pass(self):
        """Test that every hold runs when none vetoes."""
        calls: list[str] = []
        evaluator = HoldEvaluator()
        evaluator.register("first", allow_hold(calls, "first"))
        evaluator.register("second", allow_hold(calls, "second"))

        verdict = await evaluator.evaluate(42)

        assert verdict.vetoed is False
        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_first_veto_wins_and_short_circuits(self):
        """Test that evaluation stops at the first veto."""
        calls: list[str] = []
        evaluator = HoldEvaluator()
        evaluator.register("first", allow_hold(calls, "first"))
        evaluator.register("second", veto_hold(calls, "second", "second says no"))
        evaluator.register("third", veto_hold(calls, "third", "third says no"))

        verdict = await evaluator.evaluate(42)

        assert verdict.vetoed is True
        assert verdict.source == "second"
        assert verdict.reason == "second says no"
        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_veto_source_is_hold_name(self):
        """Test that the verdict names the hold it was registered under."""
        evaluator = HoldEvaluator()

        async def predicate(user_id):
            return HoldVerdict.veto("something-else", "no")

        evaluator.register("disputes", predicate)

        verdict = await evaluator.evaluate(42)

        assert verdict.source == "disputes"
        assert verdict.reason == "no"

    @pytest.mark.asyncio
    async def test_failing_hold_is_a_veto(self):
        """Test that a hold which cannot be evaluated blocks deletion."""
        calls: list[str] = []
        evaluator = HoldEvaluator()

        async def broken(user_id):
            raise StoreUnavailable("subscriptions", "list_user_records")

        evaluator.register("broken", broken)
        evaluator.register("after", allow_hold(calls, "after"))

        verdict = await evaluator.evaluate(42)

        assert verdict.vetoed is True
        assert verdict.source == "broken"
        assert verdict.reason == EVALUATION_FAILED_REASON
        assert calls == []

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_a_veto(self):
        """Test that any exception, not only store errors, vetoes."""
        evaluator = HoldEvaluator()

        async def buggy(user_id):
            raise KeyError("oops")

        evaluator.register("buggy", buggy)

        verdict = await evaluator.evaluate(42)

        assert verdict.vetoed is True
        assert verdict.reason == EVALUATION_FAILED_REASON

    @pytest.mark.asyncio
    async def test_timeout_is_a_veto(self):
        """Test that a hold exceeding the timeout vetoes instead of blocking."""
        evaluator = HoldEvaluator(timeout=0.01)

        async def slow(user_id):
            await asyncio.sleep(1)
            return HoldVerdict.allow()

        evaluator.register("slow", slow)

        verdict = await evaluator.evaluate(42)

        assert verdict.vetoed is True
        assert verdict.source == "slow"
        assert verdict.reason == EVALUATION_FAILED_REASON

    @pytest.mark.asyncio
    async def test_veto_is_counted(self):
        """Test that vetoes are counted per hold."""
        evaluator = HoldEvaluator()
        evaluator.register("counted-hold", veto_hold([], "counted-hold", "no"))
        labels = {"hold": "counted-hold"}
        before = REGISTRY.get_sample_value("datacompliance_hold_vetoes_total", labels) or 0.0

        await evaluator.evaluate(42)

        assert REGISTRY.get_sample_value("datacompliance_hold_vetoes_total", labels) == before + 1

    @pytest.mark.asyncio
    async def test_same_user_same_message(self):
        """Test that repeated evaluation yields the same verdict."""
        evaluator = HoldEvaluator()
        evaluator.register("a", veto_hold([], "a", "reason a"))
        evaluator.register("b", veto_hold([], "b", "reason b"))

        first = await evaluator.evaluate(42)
        second = await evaluator.evaluate(42)

        assert first == second
