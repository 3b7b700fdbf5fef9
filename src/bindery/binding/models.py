"""Property view models.

A PropertyView is regenerated on every read and detached from the host: its
values come from a copy of the object, so holding one never pins live state.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from bindery.core.catalog import FieldKind, TypeDescriptor, ValueSpec
from bindery.core.identity import DurableId, LiveHandle


@dataclass(frozen=True, slots=True)
class PropertyNode:
    """One addressable value in a property tree.

    Attributes:
        path: Canonical field path from the object root.
        name: Field name, or the index for collection elements.
        spec: Value shape (kind, optionality, nested descriptor).
        value: Current value (a detached copy).
        children: Nested fields for structs, elements for collections.
        transient: Whether the value is excluded from persistence.
        doc: Field description, if any.
    """

    path: str
    name: str
    spec: ValueSpec
    value: Any
    children: tuple[PropertyNode, ...] = ()
    transient: bool = False
    doc: str | None = None

    @property
    def kind(self) -> FieldKind:
        return self.spec.kind

    @property
    def is_leaf(self) -> bool:
        return self.spec.kind not in (FieldKind.STRUCT, FieldKind.COLLECTION)

    def walk(self) -> Iterator[PropertyNode]:
        """Depth-first iteration over this node and its descendants."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(slots=True)
class PropertyView:
    """Generic property tree of one bound object."""

    durable_id: DurableId
    handle: LiveHandle
    descriptor: TypeDescriptor
    nodes: tuple[PropertyNode, ...]
    _index: dict[str, PropertyNode] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._index = {node.path: node for node in self.walk()}

    @property
    def type_tag(self) -> str:
        return self.descriptor.tag

    def walk(self) -> Iterator[PropertyNode]:
        """Depth-first iteration over every node."""
        for node in self.nodes:
            yield from node.walk()

    def __getitem__(self, path: str) -> PropertyNode:
        return self._index[path]

    def __contains__(self, path: object) -> bool:
        return path in self._index

    def value(self, path: str) -> Any:
        """Current value at a canonical path."""
        return self._index[path].value

    def values(self) -> dict[str, Any]:
        """Top-level field name -> value."""
        return {node.name: node.value for node in self.nodes}

    def flatten(self) -> dict[str, Any]:
        """Leaf path -> value for every leaf in the tree."""
        return {node.path: node.value for node in self.walk() if node.is_leaf}


@dataclass(frozen=True, slots=True)
class ObjectState:
    """Detached copy of an object's top-level field values."""

    type_tag: str
    values: dict[str, Any]
