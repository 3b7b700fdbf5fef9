"""Host engine protocol.

The host owns live objects and their transient handles. bindery never keeps
host objects: it copies them out with ``fetch`` and writes them back with
``store``.

Usage:
    host = LocalHost(catalog)
    session = EditorSession(host)
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable

from bindery.core.identity import LiveHandle
from bindery.core.types import Copy


@runtime_checkable
class HostListener(Protocol):
    """Receives object lifecycle notifications from a host."""

    def on_created(self, handle: LiveHandle) -> None:
        """Object was created and is now alive."""
        ...

    def on_destroyed(self, handle: LiveHandle) -> None:
        """Object is about to be removed; the handle is still readable."""
        ...


class Host(Protocol):
    """Abstract host interface. Implementations own the actual objects."""

    def create(self, type_tag: str) -> LiveHandle:
        """Construct a default object of a catalog type."""
        ...

    def spawn(self, obj: Any) -> LiveHandle:
        """Adopt an existing object instance."""
        ...

    def destroy(self, handle: LiveHandle) -> None:
        """Remove object. Listeners are notified before removal."""
        ...

    def is_alive(self, handle: LiveHandle) -> bool:
        """Check if handle refers to a live object."""
        ...

    def type_tag_of(self, handle: LiveHandle) -> str:
        """Catalog type tag of the object behind handle."""
        ...

    def fetch(self, handle: LiveHandle) -> Copy[Any]:
        """Deep copy of the object behind handle."""
        ...

    def store(self, handle: LiveHandle, obj: Any) -> None:
        """Replace the object behind handle."""
        ...

    def handles(self) -> Iterator[LiveHandle]:
        """Iterate all live handles."""
        ...

    def subscribe(self, listener: HostListener) -> None:
        """Register a lifecycle listener."""
        ...

    def unsubscribe(self, listener: HostListener) -> None:
        """Remove a lifecycle listener."""
        ...
