"""Ordered registry of domain adapters.

Registration order is the erasure order: adapters whose records depend on
another domain's records are registered before that domain.
"""

from collections.abc import Iterator

from datacompliance.adapters.protocol import DomainAdapter
from datacompliance.core.logging import get_logger

logger = get_logger(__name__)


class AdapterNotFoundError(Exception):
    """Raised when an adapter is not found in the registry."""

    def __init__(self, domain: str):
        super().__init__(f"Domain adapter not found: {domain}")
        self.domain = domain


class AdapterRegistry:
    """Registry for domain adapters, configured at startup.

    Usage:
        registry = AdapterRegistry()
        registry.register(forum_adapter)          # references subscriptions
        registry.register(subscriptions_adapter)

        for adapter in registry:
            ...
    """

    def __init__(self, adapters: list[DomainAdapter] | None = None):
        self._adapters: dict[str, DomainAdapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: DomainAdapter) -> None:
        """Append an adapter to the processing order.

        Raises:
            TypeError: If the object does not implement DomainAdapter.
            ValueError: If an adapter for the same domain is already registered.
        """
        if not isinstance(adapter, DomainAdapter):
            raise TypeError(f"{type(adapter).__name__} does not implement DomainAdapter")

        domain = adapter.domain
        if domain in self._adapters:
            raise ValueError(f"Domain adapter already registered: {domain}")

        self._adapters[domain] = adapter
        logger.info("adapter_registered", domain=domain, position=len(self._adapters))

    def unregister(self, domain: str) -> bool:
        """Remove an adapter; returns False if it was not registered."""
        if domain not in self._adapters:
            return False

        del self._adapters[domain]
        logger.info("adapter_unregistered", domain=domain)
        return True

    def get(self, domain: str) -> DomainAdapter:
        """Get an adapter by domain name.

        Raises:
            AdapterNotFoundError: If no adapter is registered for the domain.
        """
        if domain not in self._adapters:
            raise AdapterNotFoundError(domain)
        return self._adapters[domain]

    @property
    def domains(self) -> list[str]:
        """Domain names in registration order."""
        return list(self._adapters)

    def __iter__(self) -> Iterator[DomainAdapter]:
        return iter(list(self._adapters.values()))

    def __len__(self) -> int:
        return len(self._adapters)

    def __contains__(self, domain: object) -> bool:
        return domain in self._adapters
