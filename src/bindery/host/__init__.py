"""Host engine collaborator: protocol and an in-memory reference host."""

from bindery.host.allocator import HandleAllocator
from bindery.host.local import LocalHost
from bindery.host.protocol import Host, HostListener

__all__ = [
    "Host",
    "HostListener",
    "LocalHost",
    "HandleAllocator",
]
