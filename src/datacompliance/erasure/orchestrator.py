"""Erasure orchestrator.

Consults the holds, then walks every registered domain adapter in
registration order, erasing each record's dependents depth-first before the
record itself, and finally appends one audit entry describing what was
done.
"""

from collections.abc import AsyncIterator
from dataclasses import replace
from datetime import UTC, datetime

from datacompliance.adapters.protocol import DomainAdapter
from datacompliance.adapters.registry import AdapterRegistry
from datacompliance.audit.recorder import AuditRecorder
from datacompliance.audit.types import AuditEntry
from datacompliance.core.context import SYSTEM_ACTOR, Actor, get_current_context_or_none
from datacompliance.core.exceptions import (
    AuditWriteFailed,
    ErasureVetoed,
    RecordConstraintViolated,
    StoreUnavailable,
)
from datacompliance.core.locks import UserOperationLocks
from datacompliance.core.logging import LogContext, get_logger
from datacompliance.core.timeouts import bounded
from datacompliance.erasure.types import (
    DomainFailure,
    DomainOutcome,
    DomainStatus,
    ErasureOutcome,
    ErasureStatus,
    FailureKind,
    is_valid_identifier,
)
from datacompliance.holds.evaluator import HoldEvaluator
from datacompliance.observability.metrics import observe_erasure, record_audit_write_failure
from datacompliance.types import DomainRecord, RequestType, UserID

logger = get_logger(__name__)


async def _collect(records: AsyncIterator[DomainRecord]) -> list[DomainRecord]:
    return [record async for record in records]


def _failure_from(error: Exception, record_ref: str | None) -> DomainFailure:
    """Translate an adapter error into the outcome's failure description."""
    if isinstance(error, StoreUnavailable):
        return DomainFailure(
            kind=FailureKind.STORE_UNAVAILABLE,
            message=f"The {error.domain} store is unavailable ({error.operation}): {error.args[0]}",
            record_ref=record_ref,
        )
    if isinstance(error, RecordConstraintViolated):
        return DomainFailure(
            kind=FailureKind.RECORD_CONSTRAINT_VIOLATED,
            message=f"The store rejected the change: {error.args[0]}",
            record_ref=error.record_ref,
        )
    # Unknown exceptions may carry record values in their message
    return DomainFailure(
        kind=FailureKind.INTERNAL_ERROR,
        message=f"Unexpected {type(error).__name__} during erasure",
        record_ref=record_ref,
    )


class ErasureOrchestrator:
    """Erase a user's personal data across every registered domain.

    Usage:
        orchestrator = ErasureOrchestrator(registry, holds, recorder, locks, timeout=30)
        try:
            outcome = await orchestrator.erase(42, RequestType.USER, actor=actor)
        except ErasureVetoed as veto:
            print(veto.user_message)

        if not outcome.is_complete:
            print(outcome.user_message)
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        holds: HoldEvaluator,
        recorder: AuditRecorder,
        locks: UserOperationLocks | None = None,
        timeout: float | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            registry: Adapters, in erasure order
            holds: Hold evaluator consulted before anything is erased
            recorder: Audit recorder receiving one entry per erasure
            locks: Per-user operation locks (shared with the export orchestrator)
            timeout: Default bound on each store call, in seconds
        """
        self._registry = registry
        self._holds = holds
        self._recorder = recorder
        self._locks = locks or UserOperationLocks()
        self._timeout = timeout

    async def erase(
        self,
        user_id: UserID,
        request_type: RequestType | str,
        actor: Actor | None = None,
        timeout: float | None = None,
    ) -> ErasureOutcome:
        """Erase a user's data.

        Adapter failures do not raise: they end up in the returned outcome
        with status PARTIAL_FAILURE or FAILED.

        Args:
            user_id: The data subject
            request_type: Who or what initiated the erasure
            actor: Initiating actor (defaults to the current operation context's actor)
            timeout: Bound on each store call (defaults to the orchestrator's)

        Returns:
            The ErasureOutcome that was recorded in the audit trail

        Raises:
            ConcurrentOperationConflict: If an erasure or export of the user is in flight
            ErasureVetoed: If a hold forbids deletion; nothing is erased or audited
            AuditWriteFailed: If erasure ran but its audit entry could not be written
        """
        request_type = RequestType(request_type)
        actor = actor or self._current_actor()
        effective_timeout = timeout if timeout is not None else self._timeout

        async with self._locks.exclusive(user_id, "erasure"):
            with (
                LogContext(operation="erasure", user_id=user_id, request_type=request_type.value),
                observe_erasure(request_type.value) as observation,
            ):
                logger.info("erasure_started", domains=self._registry.domains)

                verdict = await self._holds.evaluate(user_id, timeout=effective_timeout)
                if verdict.vetoed:
                    observation["status"] = "vetoed"
                    logger.info("erasure_vetoed", hold=verdict.source)
                    raise ErasureVetoed(verdict, user_id, request_type.value)

                outcome = await self._erase_domains(user_id, request_type, effective_timeout)
                observation["status"] = outcome.status.value

                await self._record(outcome, actor, effective_timeout)

                logger.info(
                    "erasure_completed",
                    status=outcome.status.value,
                    actions=outcome.actions_count,
                    failed_domains=list(outcome.failures),
                )
                return outcome

    @staticmethod
    def _current_actor() -> Actor:
        ctx = get_current_context_or_none()
        return ctx.actor if ctx is not None else SYSTEM_ACTOR

    async def _erase_domains(
        self,
        user_id: UserID,
        request_type: RequestType,
        timeout: float | None,
    ) -> ErasureOutcome:
        outcome = ErasureOutcome(user_id=user_id, request_type=request_type)
        failed = False

        for adapter in self._registry:
            domain_outcome = DomainOutcome(domain=adapter.domain)
            outcome.domains[adapter.domain] = domain_outcome

            if failed:
                domain_outcome.status = DomainStatus.SKIPPED
                continue

            failure = await self._erase_domain(adapter, user_id, domain_outcome, timeout)
            if failure is not None:
                domain_outcome.status = DomainStatus.FAILED
                domain_outcome.failure = failure
                failed = True

        if failed:
            any_completed = any(
                d.status == DomainStatus.COMPLETED for d in outcome.domains.values()
            )
            outcome.status = ErasureStatus.PARTIAL_FAILURE if any_completed else ErasureStatus.FAILED

        outcome.completed_at = datetime.now(UTC)
        return outcome

    async def _erase_domain(
        self,
        adapter: DomainAdapter,
        user_id: UserID,
        domain_outcome: DomainOutcome,
        timeout: float | None,
    ) -> DomainFailure | None:
        """Erase one domain; returns the failure that stopped it, if any."""
        domain = adapter.domain
        current: list[str] = []

        try:
            records = await bounded(
                _collect(adapter.list_user_records(user_id)),
                timeout=timeout,
                domain=domain,
                operation="list_user_records",
            )
            logger.debug("domain_records_listed", domain=domain, count=len(records))

            seen: set[str] = set()
            for record in records:
                await self._erase_tree(adapter, record, domain_outcome, seen, current, timeout)
        except Exception as e:
            failure = _failure_from(e, current[-1] if current else None)
            logger.warning(
                "domain_erasure_failed",
                domain=domain,
                failure_kind=failure.kind.value,
                record_ref=failure.record_ref,
                error_type=type(e).__name__,
                actions_committed=domain_outcome.actions_count,
            )
            return failure

        logger.info("domain_erased", domain=domain, actions=domain_outcome.actions_count)
        return None

    async def _erase_tree(
        self,
        adapter: DomainAdapter,
        record: DomainRecord,
        domain_outcome: DomainOutcome,
        seen: set[str],
        current: list[str],
        timeout: float | None,
    ) -> None:
        """Erase a record's dependents depth-first, then the record itself."""
        if record.ref in seen:
            return
        seen.add(record.ref)

        current.append(record.ref)
        dependents = await bounded(
            adapter.dependents_of(record),
            timeout=timeout,
            domain=adapter.domain,
            operation="dependents_of",
        )
        current.pop()

        for dependent in dependents:
            await self._erase_tree(adapter, dependent, domain_outcome, seen, current, timeout)

        current.append(record.ref)
        # Checked before the change is made: a committed change must be auditable
        if not is_valid_identifier(record.display_id):
            raise RecordConstraintViolated(
                adapter.domain, record.ref, "the record has no identifier that can be audited"
            )

        try:
            action = await bounded(
                adapter.erase_record(record),
                timeout=timeout,
                domain=adapter.domain,
                operation="erase_record",
            )
        except StoreUnavailable:
            # A timeout or lost connection may have hit after the commit
            domain_outcome.mark_unconfirmed(record.display_id)
            raise

        if not is_valid_identifier(action.identifier):
            logger.warning(
                "erasure_identifier_replaced", domain=adapter.domain, record_ref=record.ref
            )
            action = replace(action, identifier=record.display_id)
        try:
            domain_outcome.add(action)
        except ValueError:
            domain_outcome.mark_unconfirmed(record.display_id)
            raise
        current.pop()

        logger.debug(
            "record_erased",
            domain=adapter.domain,
            record_ref=record.ref,
            action=action.kind.value,
            category=action.category,
        )

    async def _record(self, outcome: ErasureOutcome, actor: Actor, timeout: float | None) -> None:
        entry = AuditEntry.from_outcome(outcome, actor.actor_id)
        try:
            await bounded(
                self._recorder.record(entry),
                timeout=timeout,
                domain="audit",
                operation="record",
            )
        except Exception as e:
            record_audit_write_failure()
            logger.error(
                "erasure_not_audited",
                status=outcome.status.value,
                actions=outcome.actions_count,
                error_type=type(e).__name__,
            )
            raise AuditWriteFailed(outcome, str(e)) from e
