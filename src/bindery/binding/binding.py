"""Reflection binding layer: generic property views and typed edits.

Usage:
    binding = ReflectionBinding(catalog, registry, host, journal=journal)
    view = binding.view(durable_id)
    binding.apply(durable_id, "intensity", 2.0)
"""

from __future__ import annotations

import copy as cp
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from bindery.binding.models import ObjectState, PropertyNode, PropertyView
from bindery.core.catalog import FieldKind, TypeCatalog, TypeDescriptor, ValueSpec
from bindery.core.catalog.paths import format_path, join_path, parse_path
from bindery.core.catalog.values import parse_text
from bindery.core.errors import NotBoundError
from bindery.core.identity import DurableId, LiveHandle
from bindery.host.protocol import Host
from bindery.registry import IdentityRegistry

if TYPE_CHECKING:
    from bindery.journal import ChangeJournal

logger = logging.getLogger(__name__)


class ReflectionBinding:
    """Combines the type catalog with the identity registry.

    Every access goes durable id -> registry -> handle -> host copy, so a
    stale handle is never trusted. Edits read the previous value before
    writing and, unless replaying, journal the change.

    Args:
        catalog: Type catalog describing host objects.
        registry: Identity registry owning the bindings.
        host: Host that owns live objects.
        journal: Optional change journal; attached to this binding for replay.
    """

    def __init__(
        self,
        catalog: TypeCatalog,
        registry: IdentityRegistry,
        host: Host,
        journal: ChangeJournal | None = None,
    ):
        self._catalog = catalog
        self._registry = registry
        self._host = host
        self._journal = journal
        self._last_known: dict[DurableId, ObjectState] = {}
        if journal is not None:
            journal.attach(self)

    @property
    def catalog(self) -> TypeCatalog:
        return self._catalog

    @property
    def registry(self) -> IdentityRegistry:
        return self._registry

    @property
    def journal(self) -> ChangeJournal | None:
        return self._journal

    def _resolve_live(self, durable_id: DurableId) -> LiveHandle:
        handle = self._registry.resolve(durable_id)
        if handle is None or not self._host.is_alive(handle):
            raise NotBoundError(durable_id)
        return handle

    def is_bound(self, durable_id: DurableId) -> bool:
        """Check if durable_id resolves to a live object."""
        handle = self._registry.resolve(durable_id)
        return handle is not None and self._host.is_alive(handle)

    # Reading

    def view(self, durable_id: DurableId) -> PropertyView:
        """Build the property tree of a bound object.

        Raises:
            NotBoundError: If the id has no live handle.
        """
        handle = self._resolve_live(durable_id)
        obj = self._host.fetch(handle)
        descriptor = self._catalog.descriptor_for(type(obj))
        return PropertyView(
            durable_id=durable_id,
            handle=handle,
            descriptor=descriptor,
            nodes=self._struct_nodes(descriptor, obj, ""),
        )

    def _struct_nodes(
        self, descriptor: TypeDescriptor, obj: Any, prefix: str
    ) -> tuple[PropertyNode, ...]:
        return tuple(
            self._node(
                join_path(prefix, f.name),
                f.name,
                f.spec,
                f.read(obj),
                transient=f.transient,
                doc=f.doc,
            )
            for f in descriptor.fields
        )

    def _node(
        self,
        path: str,
        name: str,
        spec: ValueSpec,
        value: Any,
        transient: bool = False,
        doc: str | None = None,
    ) -> PropertyNode:
        children: tuple[PropertyNode, ...] = ()
        if value is not None and spec.kind is FieldKind.STRUCT and spec.struct is not None:
            children = self._struct_nodes(spec.struct, value, path)
        elif value is not None and spec.kind is FieldKind.COLLECTION and spec.item is not None:
            children = tuple(
                self._node(join_path(path, i), str(i), spec.item, item, transient=transient)
                for i, item in enumerate(value)
            )
        return PropertyNode(
            path=path,
            name=name,
            spec=spec,
            value=value,
            children=children,
            transient=transient,
            doc=doc,
        )

    def read(self, durable_id: DurableId, path: str) -> Any:
        """Read one value (detached copy) from a bound object."""
        handle = self._resolve_live(durable_id)
        return self._catalog.get(self._host, handle, path)

    def type_tag_of(self, durable_id: DurableId) -> str:
        return self._host.type_tag_of(self._resolve_live(durable_id))

    # Writing

    def apply(self, durable_id: DurableId, path: str, value: Any, *, replay: bool = False) -> None:
        """Write a typed value into a bound object.

        The prior value is read before the write so the journal entry
        always describes what was actually replaced.

        Args:
            durable_id: Target object.
            path: Field path.
            value: New value.
            replay: Mutate without journaling (undo, redo, load).

        Raises:
            NotBoundError: If the id has no live handle.
            InvalidPathError: If the path does not resolve.
            TypeMismatchError: If the value's kind disagrees with the field.
        """
        handle = self._resolve_live(durable_id)
        canonical = format_path(parse_path(path))
        obj = self._host.fetch(handle)
        previous = cp.deepcopy(self._catalog.read(obj, canonical))
        stored = self._catalog.write(obj, canonical, value)
        self._host.store(handle, obj)
        self._record(durable_id, canonical, previous, stored, replay)

    def apply_text(
        self, durable_id: DurableId, path: str, text: str, *, replay: bool = False
    ) -> None:
        """Parse text for a primitive or enum field, then apply it."""
        handle = self._resolve_live(durable_id)
        spec = self._catalog.spec_at(self._host.fetch(handle), path)
        self.apply(durable_id, path, parse_text(spec, text, path), replay=replay)

    def insert(self, durable_id: DurableId, path: str, index: int, value: Any) -> None:
        """Insert an element into a collection field (journaled as a replacement)."""
        self._edit_collection(
            durable_id, path, lambda obj: self._catalog.insert(obj, path, index, value)
        )

    def remove(self, durable_id: DurableId, path: str, index: int) -> None:
        """Remove an element from a collection field (journaled as a replacement)."""
        self._edit_collection(durable_id, path, lambda obj: self._catalog.remove(obj, path, index))

    def _edit_collection(
        self, durable_id: DurableId, path: str, edit: Callable[[Any], Any]
    ) -> None:
        handle = self._resolve_live(durable_id)
        canonical = format_path(parse_path(path))
        obj = self._host.fetch(handle)
        previous = cp.deepcopy(self._catalog.read(obj, canonical))
        edit(obj)
        current = self._catalog.read(obj, canonical)
        self._host.store(handle, obj)
        self._record(durable_id, canonical, previous, current, replay=False)

    def _record(
        self, durable_id: DurableId, path: str, previous: Any, new: Any, replay: bool
    ) -> None:
        if replay or self._journal is None:
            return
        self._journal.record_change(durable_id, path, previous, cp.deepcopy(new))

    # Orphan state

    def capture(self, durable_id: DurableId) -> ObjectState:
        """Copy the top-level field values of a bound object.

        Raises:
            NotBoundError: If the id has no live handle.
        """
        obj = self._host.fetch(self._resolve_live(durable_id))
        descriptor = self._catalog.descriptor_for(type(obj))
        return ObjectState(
            type_tag=descriptor.tag,
            values={f.name: f.read(obj) for f in descriptor.fields},
        )

    def detach(self, handle: LiveHandle) -> DurableId | None:
        """Remember the object's last state, then unbind its handle.

        Called when the host reports the object destroyed.

        Returns:
            The orphaned id, or None if the handle was not registered.
        """
        durable_id = self._registry.id_of(handle)
        if durable_id is None:
            return None
        if self._host.is_alive(handle):
            self._last_known[durable_id] = self.capture(durable_id)
        return self._registry.unbind(handle)

    def last_known(self, durable_id: DurableId) -> ObjectState | None:
        """State captured when durable_id was last detached."""
        return self._last_known.get(durable_id)

    def forget(self, durable_ids: Iterable[DurableId]) -> None:
        """Drop remembered state (after rebinding or garbage collection)."""
        for durable_id in durable_ids:
            self._last_known.pop(durable_id, None)
