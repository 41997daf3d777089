"""Export orchestrator: fan-out to every adapter, fan-in into one tree."""

import asyncio

from datacompliance.adapters.protocol import DomainAdapter
from datacompliance.adapters.registry import AdapterRegistry
from datacompliance.core.locks import UserOperationLocks
from datacompliance.core.logging import LogContext, get_logger
from datacompliance.core.timeouts import bounded
from datacompliance.observability.metrics import record_export_failure
from datacompliance.types import ExportSection, ExportTree, UserID

logger = get_logger(__name__)

DEFAULT_CONCURRENCY = 4


class ExportOrchestrator:
    """Build a snapshot of everything stored about a user.

    Adapters run concurrently. An adapter that fails contributes one empty
    section carrying a warning instead of aborting the export.

    Usage:
        orchestrator = ExportOrchestrator(registry, locks, timeout=30)
        tree = await orchestrator.export(42)
        if tree.is_partial:
            print(tree.warnings)
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        locks: UserOperationLocks | None = None,
        timeout: float | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._registry = registry
        self._locks = locks or UserOperationLocks()
        self._timeout = timeout
        self._concurrency = concurrency

    async def export(self, user_id: UserID, timeout: float | None = None) -> ExportTree:
        """Export a user's data from every registered domain.

        Sections appear in adapter registration order regardless of which
        adapter finishes first.

        Raises:
            ConcurrentOperationConflict: If an erasure of the user is in flight
        """
        effective_timeout = timeout if timeout is not None else self._timeout
        adapters = list(self._registry)
        semaphore = asyncio.Semaphore(self._concurrency)

        async with self._locks.shared(user_id, "export"):
            with LogContext(operation="export", user_id=user_id):
                logger.info("export_started", domains=[a.domain for a in adapters])

                results = await asyncio.gather(
                    *(
                        self._export_domain(adapter, user_id, semaphore, effective_timeout)
                        for adapter in adapters
                    )
                )

                tree = ExportTree(user_id=user_id)
                for sections in results:
                    tree.sections.extend(sections)
                    tree.warnings.extend(s.warning for s in sections if s.warning)

                logger.info(
                    "export_completed",
                    sections=len(tree.sections),
                    items=sum(len(s.items) for s in tree.sections),
                    warnings=len(tree.warnings),
                )
                return tree

    async def _export_domain(
        self,
        adapter: DomainAdapter,
        user_id: UserID,
        semaphore: asyncio.Semaphore,
        timeout: float | None,
    ) -> list[ExportSection]:
        async with semaphore:
            try:
                sections = await bounded(
                    adapter.export_user_records(user_id),
                    timeout=timeout,
                    domain=adapter.domain,
                    operation="export_user_records",
                )
            except Exception as e:
                logger.warning(
                    "export_section_failed",
                    domain=adapter.domain,
                    error_type=type(e).__name__,
                )
                record_export_failure(adapter.domain)
                return [
                    ExportSection(
                        name=adapter.domain,
                        description=adapter.description,
                        warning=(
                            f"The {adapter.domain} data could not be exported "
                            f"({type(e).__name__}); this section is incomplete"
                        ),
                    )
                ]

        return list(sections)
