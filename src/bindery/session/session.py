"""Editor session: the explicit context object tying every service together.

Usage:
    host = LocalHost()
    with EditorSession(host) as session:
        light = session.register(host.create("Light"))
        session.apply(light, "intensity", 2.0)
        session.undo()
        report = session.save_file("scene.json")
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from bindery.binding import PropertyView, ReflectionBinding
from bindery.config import EditorSettings
from bindery.core.catalog import TypeCatalog, get_catalog
from bindery.core.errors import DecodeError
from bindery.core.identity import DurableId, LiveHandle
from bindery.host.protocol import Host
from bindery.journal import ChangeJournal, JournalEntry
from bindery.persistence import (
    LoadReport,
    PersistedGraph,
    PersistenceCodec,
    SaveReport,
    read_graph,
    write_graph,
)
from bindery.registry import IdentityRegistry, OrphanRecord
from bindery.session.selection import SelectionState

logger = logging.getLogger(__name__)


class HostBridge:
    """Turns host lifecycle notifications into registry calls.

    Also acts as the codec's spawner: objects created for a load must not be
    auto-registered, since the codec rebinds them to their persisted ids.
    """

    def __init__(self, host: Host, registry: IdentityRegistry, binding: ReflectionBinding):
        self._host = host
        self._registry = registry
        self._binding = binding
        self._paused = 0

    @contextmanager
    def paused(self) -> Iterator[None]:
        """Ignore host notifications inside the block."""
        self._paused += 1
        try:
            yield
        finally:
            self._paused -= 1

    def on_created(self, handle: LiveHandle) -> None:
        if not self._paused:
            self._registry.register(handle)

    def on_destroyed(self, handle: LiveHandle) -> None:
        if not self._paused:
            self._binding.detach(handle)

    def create(self, type_tag: str) -> LiveHandle:
        with self.paused():
            return self._host.create(type_tag)

    def discard(self, handle: LiveHandle) -> None:
        with self.paused():
            self._host.destroy(handle)


class EditorSession:
    """Editor-lifetime state: registry, binding, journal, codec and selection.

    A session is created at editor start and discarded at exit; nothing in
    it outlives the process except what ``save`` writes. Pass it explicitly
    to UI panels rather than reaching for globals.

    Args:
        host: Host engine owning live objects.
        catalog: Type catalog (default: the process-wide @editable catalog).
        settings: Editor settings (default: loaded from the environment).
        clock: Monotonic clock used for the orphan grace window.
    """

    def __init__(
        self,
        host: Host,
        catalog: TypeCatalog | None = None,
        settings: EditorSettings | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._settings = settings if settings is not None else EditorSettings()
        self._catalog = catalog if catalog is not None else get_catalog()
        self._host = host
        self._registry = IdentityRegistry(
            grace_seconds=self._settings.orphan_grace_seconds, clock=clock
        )
        self._journal = ChangeJournal(limit=self._settings.journal_limit)
        self._binding = ReflectionBinding(
            self._catalog, self._registry, host, journal=self._journal
        )
        self._codec = PersistenceCodec(self._catalog, self._registry, self._binding)
        self._selection = SelectionState()
        self._bridge = HostBridge(host, self._registry, self._binding)
        self._registry.add_reference_source(self._journal.references)
        self._registry.add_collect_listener(self._on_collected)
        self._active = False

    # Lifecycle

    def start(self) -> EditorSession:
        """Subscribe to the host and register every object already alive."""
        if self._active:
            return self
        self._host.subscribe(self._bridge)
        for handle in self._host.handles():
            self._registry.register(handle)
        self._active = True
        logger.debug("session started with %d live object(s)", len(self._registry))
        return self

    def close(self) -> None:
        """Unsubscribe from the host and drop history and selection."""
        if not self._active:
            return
        self._host.unsubscribe(self._bridge)
        self._journal.clear()
        self._selection.clear()
        self._active = False
        logger.debug("session closed")

    def __enter__(self) -> EditorSession:
        return self.start()

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def active(self) -> bool:
        return self._active

    # Services

    @property
    def settings(self) -> EditorSettings:
        return self._settings

    @property
    def catalog(self) -> TypeCatalog:
        return self._catalog

    @property
    def host(self) -> Host:
        return self._host

    @property
    def registry(self) -> IdentityRegistry:
        return self._registry

    @property
    def binding(self) -> ReflectionBinding:
        return self._binding

    @property
    def journal(self) -> ChangeJournal:
        return self._journal

    @property
    def codec(self) -> PersistenceCodec:
        return self._codec

    @property
    def selection(self) -> SelectionState:
        return self._selection

    # Identity

    def register(self, handle: LiveHandle) -> DurableId:
        return self._registry.register(handle)

    def resolve(self, durable_id: DurableId) -> LiveHandle | None:
        return self._registry.resolve(durable_id)

    @contextmanager
    def paused(self) -> Iterator[None]:
        """Ignore host notifications, e.g. while a reload recreates objects to rebind."""
        with self._bridge.paused():
            yield

    def rebind(self, durable_id: DurableId, handle: LiveHandle) -> None:
        """Re-attach an orphaned id after a hot reload recreated its object."""
        self._registry.rebind(durable_id, handle)
        self._binding.forget([durable_id])

    def collect_garbage(
        self, predicate: Callable[[OrphanRecord], bool] | None = None
    ) -> list[DurableId]:
        """Retire expired, unreferenced orphans and forget everything about them.

        While a save holds the registry this returns an empty list; the
        collection and its cleanup run when the hold is released.
        """
        return self._registry.garbage_collect(predicate)

    def _on_collected(self, collected: list[DurableId]) -> None:
        self._binding.forget(collected)
        retired = set(collected)
        self._selection.prune(lambda d: d not in retired)

    # Editing

    def view(self, durable_id: DurableId) -> PropertyView:
        return self._binding.view(durable_id)

    def apply(self, durable_id: DurableId, path: str, value: Any) -> None:
        self._binding.apply(durable_id, path, value)

    def apply_text(self, durable_id: DurableId, path: str, text: str) -> None:
        self._binding.apply_text(durable_id, path, text)

    def insert(self, durable_id: DurableId, path: str, index: int, value: Any) -> None:
        self._binding.insert(durable_id, path, index, value)

    def remove(self, durable_id: DurableId, path: str, index: int) -> None:
        self._binding.remove(durable_id, path, index)

    def undo(self) -> JournalEntry:
        return self._journal.undo()

    def redo(self) -> JournalEntry:
        return self._journal.redo()

    # Persistence

    def save(self) -> PersistedGraph:
        return self._codec.save()

    def load(self, graph: PersistedGraph) -> LoadReport:
        return self._codec.load(graph, self._bridge)

    async def save_to_path(self, path: str | os.PathLike[str]) -> SaveReport:
        """Snapshot now, then write the file off the update turn.

        Bindings are held for the duration of the write; host destroy
        notifications arriving meanwhile are applied once it completes.
        """
        graph = self.save()
        tip = self._journal.tip
        try:
            with self._registry.hold():
                await write_graph(path, graph, indent=self._settings.graph_indent)
        except OSError as e:
            logger.error("failed to save graph to '%s': %s", path, e)
            return SaveReport(path=str(path), entries=len(graph), error=str(e))

        self._journal.mark_saved(tip)
        logger.info("saved %d entries to '%s'", len(graph), path)
        return SaveReport(path=str(path), entries=len(graph))

    async def load_from_path(self, path: str | os.PathLike[str]) -> LoadReport:
        """Read and decode a graph file, then load it.

        Cancelling is only possible while the file is being read; once
        rebinding starts the load runs synchronously to completion.
        """
        try:
            graph = await read_graph(path)
        except (OSError, DecodeError) as e:
            logger.error("failed to load graph from '%s': %s", path, e)
            return LoadReport(error=str(e))
        return self.load(graph)

    def save_file(self, path: str | os.PathLike[str]) -> SaveReport:
        """Save synchronously (wrapper for save_to_path).

        Prefer save_to_path() in async contexts.
        """
        return asyncio.run(self.save_to_path(path))

    def load_file(self, path: str | os.PathLike[str]) -> LoadReport:
        """Load synchronously (wrapper for load_from_path).

        Prefer load_from_path() in async contexts.
        """
        return asyncio.run(self.load_from_path(path))
