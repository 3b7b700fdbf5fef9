"""Identity value types: durable ids and transient host handles."""

from bindery.core.identity.models import DurableId, LiveHandle

__all__ = [
    "DurableId",
    "LiveHandle",
]
