"""Inbound interface: request erasure, request export, query holds.

DataComplianceService wires the orchestrators together. Every collaborator
is passed in at construction; build_service() assembles the default
wiring from Settings and a session factory.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from datacompliance.adapters.registry import AdapterRegistry
from datacompliance.adapters.subscriptions import SubscriptionsAdapter
from datacompliance.audit.gate import AuthorizationGate, CapabilityGate
from datacompliance.audit.recorder import AuditRecorder, SqlAuditRecorder
from datacompliance.audit.trail import AuditTrail
from datacompliance.config.settings import Settings
from datacompliance.core.context import Actor
from datacompliance.core.locks import UserOperationLocks
from datacompliance.core.logging import get_logger
from datacompliance.erasure.orchestrator import ErasureOrchestrator
from datacompliance.erasure.types import ErasureOutcome
from datacompliance.export.orchestrator import ExportOrchestrator
from datacompliance.holds.evaluator import HoldEvaluator
from datacompliance.holds.predicates import RecentSettlementHold
from datacompliance.holds.types import HoldVerdict
from datacompliance.observability.metrics import set_metrics_enabled
from datacompliance.types import ExportTree, RequestType, UserID

logger = get_logger(__name__)


class DataComplianceService:
    """Facade over erasure, export, holds and the audit trail.

    Usage:
        service = build_service(settings, session_factory)

        verdict = await service.query_holds(42)
        if not verdict.vetoed:
            outcome = await service.request_erasure(42, RequestType.USER, actor=actor)
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        holds: HoldEvaluator,
        recorder: AuditRecorder,
        audit_trail: AuditTrail,
        locks: UserOperationLocks | None = None,
        store_timeout: float | None = None,
        export_concurrency: int = 4,
    ):
        self.registry = registry
        self.holds = holds
        self.audit_trail = audit_trail
        self.store_timeout = store_timeout

        self.locks = locks or UserOperationLocks()
        self.erasure = ErasureOrchestrator(
            registry, holds, recorder, self.locks, timeout=store_timeout
        )
        self.export = ExportOrchestrator(
            registry, self.locks, timeout=store_timeout, concurrency=export_concurrency
        )

    async def request_erasure(
        self,
        user_id: UserID,
        request_type: RequestType | str,
        actor: Actor | None = None,
    ) -> ErasureOutcome:
        """Erase a user's data (RequestErasure).

        Raises:
            ErasureVetoed: If a hold forbids deletion right now
            ConcurrentOperationConflict: If the user is already being processed
            AuditWriteFailed: If erasure ran but was not audited
        """
        return await self.erasure.erase(user_id, request_type, actor=actor)

    async def request_export(self, user_id: UserID) -> ExportTree:
        """Export a user's data (RequestExport).

        Raises:
            ConcurrentOperationConflict: If the user is being erased
        """
        return await self.export.export(user_id)

    async def query_holds(self, user_id: UserID) -> HoldVerdict:
        """Check whether erasure would be vetoed right now (QueryHolds).

        Read-only; nothing is locked or recorded.
        """
        return await self.holds.evaluate(user_id, timeout=self.store_timeout)


def build_service(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    gate: AuthorizationGate | None = None,
) -> DataComplianceService:
    """Assemble the default service: the subscriptions domain plus its settlement hold."""
    set_metrics_enabled(settings.metrics_enabled)

    subscriptions = SubscriptionsAdapter(session_factory)
    registry = AdapterRegistry([subscriptions])

    holds = HoldEvaluator(timeout=settings.store_timeout_seconds)
    settlement_hold = RecentSettlementHold(
        subscriptions,
        window_days=settings.settlement_hold_days,
        noun="subscription(s)",
    )
    holds.register(settlement_hold.name, settlement_hold)

    service = DataComplianceService(
        registry=registry,
        holds=holds,
        recorder=SqlAuditRecorder(session_factory),
        audit_trail=AuditTrail(session_factory, gate or CapabilityGate()),
        store_timeout=settings.store_timeout_seconds,
        export_concurrency=settings.export_concurrency,
    )
    logger.info(
        "service_built",
        domains=registry.domains,
        holds=holds.hold_names,
        settlement_hold_days=settings.settlement_hold_days,
    )
    return service
