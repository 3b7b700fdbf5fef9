"""Local in-memory host implementation.

Simple dict-based host suitable for single-process use, tests and demos.
It recycles handle slots the way a real engine does, so stale handles are
a real possibility for callers that skip the identity registry.

Usage:
    host = LocalHost()
    handle = host.create("Light")
"""

from __future__ import annotations

import copy as cp
import logging
from collections.abc import Iterator
from typing import Any

from bindery.core.catalog import TypeCatalog, get_catalog
from bindery.core.identity import LiveHandle
from bindery.core.types import Copy
from bindery.host.allocator import HandleAllocator
from bindery.host.protocol import HostListener

logger = logging.getLogger(__name__)


class LocalHost:
    """Simple in-memory host using one dict of handle -> object.

    Args:
        catalog: Type catalog used to construct objects by tag
            (defaults to the process-wide catalog).
    """

    def __init__(self, catalog: TypeCatalog | None = None):
        """Initialize local host.

        Args:
            catalog: Type catalog used by ``create`` (default: global catalog).
        """
        self._catalog = catalog if catalog is not None else get_catalog()
        self._allocator = HandleAllocator()
        self._objects: dict[LiveHandle, Any] = {}
        self._listeners: list[HostListener] = []

    def create(self, type_tag: str) -> LiveHandle:
        """Construct a default object of a catalog type and spawn it.

        Args:
            type_tag: Catalog tag of the type to construct.

        Returns:
            Handle of the new object.

        Raises:
            UnknownTypeError: If the tag is not in the catalog.
        """
        descriptor = self._catalog.descriptor_of(type_tag)
        return self.spawn(descriptor.factory())

    def spawn(self, obj: Any) -> LiveHandle:
        """Adopt an object instance and notify listeners.

        Args:
            obj: Instance of a catalog type.

        Returns:
            Newly allocated handle.
        """
        handle = self._allocator.allocate()
        self._objects[handle] = obj
        logger.debug("spawned %s as %s", type(obj).__name__, handle)
        for listener in list(self._listeners):
            listener.on_created(handle)
        return handle

    def destroy(self, handle: LiveHandle) -> None:
        """Destroy an object. Listeners see it one last time before removal.

        Unknown or stale handles are ignored.

        Args:
            handle: Handle to destroy.
        """
        if not self.is_alive(handle):
            return
        for listener in list(self._listeners):
            listener.on_destroyed(handle)
        del self._objects[handle]
        self._allocator.deallocate(handle)
        logger.debug("destroyed %s", handle)

    def reload(self) -> None:
        """Destroy every object, as a scene swap or code reload would."""
        for handle in list(self._objects):
            self.destroy(handle)

    def is_alive(self, handle: LiveHandle) -> bool:
        """Check if a handle refers to a live object.

        Args:
            handle: Handle to check.

        Returns:
            True if the object exists and the handle is not stale.
        """
        return handle in self._objects and self._allocator.is_alive(handle)

    def type_tag_of(self, handle: LiveHandle) -> str:
        """Get the catalog tag of the object behind a handle.

        Raises:
            KeyError: If the handle is not alive.
        """
        return self._catalog.tag_of(self._get_raw(handle))

    def fetch(self, handle: LiveHandle) -> Copy[Any]:
        """Get a deep copy of the object behind a handle.

        Raises:
            KeyError: If the handle is not alive.
        """
        return cp.deepcopy(self._get_raw(handle))

    def peek(self, handle: LiveHandle) -> Any:
        """Get the live object without copying (host-side use only)."""
        return self._get_raw(handle)

    def store(self, handle: LiveHandle, obj: Any) -> None:
        """Replace the object behind a handle.

        Raises:
            KeyError: If the handle is not alive.
        """
        self._get_raw(handle)
        self._objects[handle] = obj

    def handles(self) -> Iterator[LiveHandle]:
        """Iterate over all live handles."""
        yield from list(self._objects)

    def subscribe(self, listener: HostListener) -> None:
        """Register a lifecycle listener (idempotent)."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: HostListener) -> None:
        """Remove a lifecycle listener if registered."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def __len__(self) -> int:
        return len(self._objects)

    def _get_raw(self, handle: LiveHandle) -> Any:
        if not self.is_alive(handle):
            raise KeyError(f"Handle {handle} is not alive")
        return self._objects[handle]
