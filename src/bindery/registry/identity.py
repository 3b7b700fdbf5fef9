"""Identity registry: the durable id <-> live handle bijection.

Usage:
    registry = IdentityRegistry(grace_seconds=30.0)
    durable = registry.register(handle)
    assert registry.resolve(durable) == handle

    registry.unbind(handle)          # host destroyed the object
    registry.rebind(durable, fresh)  # reload re-created it
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from bindery.core.errors import ConflictError, RegistryBusyError
from bindery.core.identity import DurableId, LiveHandle
from bindery.registry.models import OrphanRecord, ReferenceSource

logger = logging.getLogger(__name__)


class IdentityRegistry:
    """Single source of truth for durable id validity and bindings.

    Mutation is single-writer: every public method leaves both directions of
    the mapping consistent before returning. Orphaned ids are kept for a grace
    window so a transient reload can rebind them; after that they may be
    collected, at which point they are retired for the rest of the session.

    Args:
        grace_seconds: Minimum orphan age before garbage collection.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        grace_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize an empty registry.

        Args:
            grace_seconds: Minimum orphan age before garbage collection.
            clock: Monotonic time source.
        """
        self._grace_seconds = grace_seconds
        self._clock = clock
        self._by_id: dict[DurableId, LiveHandle] = {}
        self._by_handle: dict[LiveHandle, DurableId] = {}
        self._orphans: dict[DurableId, OrphanRecord] = {}
        self._retired: set[DurableId] = set()
        self._reference_sources: list[ReferenceSource] = []
        self._collect_listeners: list[Callable[[list[DurableId]], None]] = []
        self._holds = 0
        self._deferred: list[Callable[[], object]] = []

    @property
    def grace_seconds(self) -> float:
        return self._grace_seconds

    # Mutation

    def register(self, handle: LiveHandle) -> DurableId:
        """Return the handle's durable id, minting and binding one if needed.

        Idempotent: a handle that is already bound returns its existing id.

        Args:
            handle: Live handle reported by the host.

        Returns:
            Durable id bound to handle.
        """
        existing = self._by_handle.get(handle)
        if existing is not None:
            return existing

        durable_id = DurableId.new()
        self._by_id[durable_id] = handle
        self._by_handle[handle] = durable_id
        logger.debug("registered %s -> %s", durable_id, handle)
        return durable_id

    def unbind(self, handle: LiveHandle) -> DurableId | None:
        """Drop the handle's binding, keeping its id as an orphan.

        While a save holds the registry the drop is deferred until the hold
        is released; the returned id is still the one being orphaned.

        Args:
            handle: Handle of a destroyed object.

        Returns:
            The orphaned durable id, or None if handle was not bound.
        """
        durable_id = self._by_handle.get(handle)
        if durable_id is None:
            return None
        if self._holds:
            logger.debug("deferring unbind of %s while registry is held", handle)
            self._deferred.append(lambda: self._unbind_now(handle))
            return durable_id
        self._unbind_now(handle)
        return durable_id

    def _unbind_now(self, handle: LiveHandle) -> None:
        durable_id = self._by_handle.pop(handle, None)
        if durable_id is None:
            return
        del self._by_id[durable_id]
        self._orphans[durable_id] = OrphanRecord(durable_id, self._clock())
        logger.debug("unbound %s (was %s)", durable_id, handle)

    def rebind(self, durable_id: DurableId, new_handle: LiveHandle) -> None:
        """Attach an orphaned or previously unseen id to a fresh live handle.

        Args:
            durable_id: Id to attach (typically from a loaded file).
            new_handle: Handle of a freshly created object.

        Raises:
            ConflictError: If the handle is bound to another id, the id is
                already bound, or the id was retired by garbage collection.
            RegistryBusyError: If a save currently holds the registry.
        """
        if self._holds:
            raise RegistryBusyError(f"Cannot rebind {durable_id} while a save is in progress")
        if durable_id in self._retired:
            raise ConflictError(f"{durable_id} was garbage collected and cannot be rebound")

        current = self._by_handle.get(new_handle)
        if current is not None:
            if current == durable_id:
                return
            raise ConflictError(f"Handle {new_handle} is already bound to {current}")
        bound = self._by_id.get(durable_id)
        if bound is not None:
            raise ConflictError(f"{durable_id} is already bound to {bound}")

        self._orphans.pop(durable_id, None)
        self._by_id[durable_id] = new_handle
        self._by_handle[new_handle] = durable_id
        logger.debug("rebound %s -> %s", durable_id, new_handle)

    def garbage_collect(
        self,
        predicate: Callable[[OrphanRecord], bool] | None = None,
        *,
        older_than: float | None = None,
    ) -> list[DurableId]:
        """Retire orphans past the grace window that nothing references.

        Ids pinned by any reference source (the change journal, for one) are
        never collected, however old. Collection is skipped entirely while a
        save holds the registry and happens when the hold is released.

        Args:
            predicate: Extra filter; only orphans it accepts are collected.
            older_than: Age threshold in seconds (default: grace window).

        Returns:
            Ids retired by this call (empty if deferred).
        """
        if self._holds:
            self._deferred.append(lambda: self._collect_now(predicate, older_than))
            return []
        return self._collect_now(predicate, older_than)

    def _collect_now(
        self,
        predicate: Callable[[OrphanRecord], bool] | None,
        older_than: float | None,
    ) -> list[DurableId]:
        threshold = self._grace_seconds if older_than is None else older_than
        now = self._clock()
        collected = [
            record.durable_id
            for record in self._orphans.values()
            if record.age(now) >= threshold
            and not self.is_referenced(record.durable_id)
            and (predicate is None or predicate(record))
        ]
        for durable_id in collected:
            del self._orphans[durable_id]
            self._retired.add(durable_id)
        if collected:
            logger.info("garbage collected %d orphaned id(s)", len(collected))
            for listener in list(self._collect_listeners):
                listener(collected)
        return collected

    # References and holds

    def add_collect_listener(self, listener: Callable[[list[DurableId]], None]) -> None:
        """Call listener with the retired ids after every collection, deferred or not."""
        self._collect_listeners.append(listener)

    def add_reference_source(self, source: ReferenceSource) -> None:
        """Register a callable that pins ids against garbage collection."""
        self._reference_sources.append(source)

    def remove_reference_source(self, source: ReferenceSource) -> None:
        if source in self._reference_sources:
            self._reference_sources.remove(source)

    def is_referenced(self, durable_id: DurableId) -> bool:
        """Check whether any reference source pins durable_id."""
        return any(source(durable_id) for source in self._reference_sources)

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Freeze existing bindings for the duration of an out-of-band snapshot write.

        Deferred unbinds and collections run, in order, when the outermost
        hold is released. Rebinding raises RegistryBusyError meanwhile.

        Note:
            register() still binds new handles while held. A fresh id cannot
            appear in a snapshot taken before it existed, and refusing would
            leave objects the host creates mid-save without an identity.
        """
        self._holds += 1
        try:
            yield
        finally:
            self._holds -= 1
            if not self._holds:
                self._flush_deferred()

    @property
    def held(self) -> bool:
        return self._holds > 0

    def _flush_deferred(self) -> None:
        pending, self._deferred = self._deferred, []
        for operation in pending:
            operation()

    # Queries

    def resolve(self, durable_id: DurableId) -> LiveHandle | None:
        """Get the live handle bound to durable_id, or None if orphaned."""
        return self._by_id.get(durable_id)

    def id_of(self, handle: LiveHandle) -> DurableId | None:
        """Get the durable id bound to handle, or None."""
        return self._by_handle.get(handle)

    def is_orphaned(self, durable_id: DurableId) -> bool:
        return durable_id in self._orphans

    def is_retired(self, durable_id: DurableId) -> bool:
        return durable_id in self._retired

    def orphan_record(self, durable_id: DurableId) -> OrphanRecord | None:
        return self._orphans.get(durable_id)

    def orphans(self, *, within_grace: bool = False) -> list[OrphanRecord]:
        """List orphan records, optionally only those still inside the grace window."""
        if not within_grace:
            return list(self._orphans.values())
        now = self._clock()
        return [r for r in self._orphans.values() if r.age(now) < self._grace_seconds]

    def bound_ids(self) -> list[DurableId]:
        """Ids that currently have a live binding."""
        return list(self._by_id)

    def bindings(self) -> Iterator[tuple[DurableId, LiveHandle]]:
        """Iterate (durable id, handle) pairs."""
        yield from list(self._by_id.items())

    def __contains__(self, durable_id: object) -> bool:
        return durable_id in self._by_id or durable_id in self._orphans

    def __len__(self) -> int:
        """Number of known (bound or orphaned) ids."""
        return len(self._by_id) + len(self._orphans)
