"""Domain adapters and their registry."""

from datacompliance.adapters.protocol import DomainAdapter
from datacompliance.adapters.registry import AdapterNotFoundError, AdapterRegistry

__all__ = [
    "AdapterNotFoundError",
    "AdapterRegistry",
    "DomainAdapter",
]
