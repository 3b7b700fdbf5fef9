"""Identity registry: durable ids, bindings, orphans and garbage collection."""

from bindery.registry.identity import IdentityRegistry
from bindery.registry.models import OrphanRecord, ReferenceSource

__all__ = [
    "IdentityRegistry",
    "OrphanRecord",
    "ReferenceSource",
]
