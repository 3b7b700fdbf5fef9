"""Type catalog models: semantic field kinds and immutable descriptors.

Descriptors are plain frozen records. Accessors are stored as callables on
each field rather than dispatched through a shared base class, so any
dataclass or Pydantic model can be described without inheriting from us.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

TRANSIENT = "transient"
"""Field metadata key: field is editable but never persisted."""

SKIP = "skip"
"""Field metadata key: field is not reflected at all."""

DOC = "doc"
"""Field metadata key: human readable description for UI tooltips."""


class FieldKind(Enum):
    """Semantic kind of a field value."""

    PRIMITIVE = auto()  # bool, int, float, str
    ENUM = auto()
    STRUCT = auto()  # nested dataclass / Pydantic model
    COLLECTION = auto()  # list[T]
    REFERENCE = auto()  # DurableId of another object


@dataclass(frozen=True, slots=True)
class ValueSpec:
    """Shape of a value: its kind plus whatever is needed to check it.

    Attributes:
        kind: Semantic kind.
        annotation: Original annotation, kept for display.
        optional: Whether None is an accepted value.
        scalar: Python type for PRIMITIVE, Enum class for ENUM.
        struct: Nested descriptor for STRUCT.
        item: Element spec for COLLECTION.
    """

    kind: FieldKind
    annotation: Any
    optional: bool = False
    scalar: type | None = None
    struct: TypeDescriptor | None = None
    item: ValueSpec | None = None

    def describe(self) -> str:
        """Short human readable form, e.g. ``list[float]`` or ``Color | None``."""
        match self.kind:
            case FieldKind.PRIMITIVE | FieldKind.ENUM:
                name = self.scalar.__name__ if self.scalar else "?"
            case FieldKind.STRUCT:
                name = self.struct.tag if self.struct else "?"
            case FieldKind.COLLECTION:
                name = f"list[{self.item.describe() if self.item else '?'}]"
            case FieldKind.REFERENCE:
                name = "DurableId"
        return f"{name} | None" if self.optional else name


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One reflected field with its read/write accessor pair."""

    name: str
    spec: ValueSpec
    read: Callable[[Any], Any]
    write: Callable[[Any, Any], None]
    transient: bool = False
    doc: str | None = None

    @property
    def kind(self) -> FieldKind:
        return self.spec.kind


@dataclass(frozen=True, slots=True, eq=False)
class TypeDescriptor:
    """Immutable description of an editable type, shared by all its instances.

    Attributes:
        tag: Short type tag used in views and persisted files.
        type_path: Fully qualified ``module.QualName``.
        type_id: Stable UUID, explicit or derived from ``type_path``.
        cls: The described class.
        fields: Ordered reflected fields.
        factory: Default constructor used by hosts to create fresh objects.
        persistent: Whether instances are written by the persistence codec.
    """

    tag: str
    type_path: str
    type_id: uuid.UUID
    cls: type
    fields: tuple[FieldDescriptor, ...]
    factory: Callable[[], Any]
    persistent: bool = True

    def field(self, name: str) -> FieldDescriptor | None:
        """Look up a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def persisted_fields(self) -> Iterator[FieldDescriptor]:
        """Fields written by the persistence codec (non-transient)."""
        return (f for f in self.fields if not f.transient)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def __repr__(self) -> str:
        return f"TypeDescriptor({self.tag!r}, fields={list(self.field_names)})"
