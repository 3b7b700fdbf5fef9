"""Type catalog, @editable decorator and path-addressed accessors.

Usage:
    @editable
    @dataclass
    class Light:
        intensity: float = 1.0
        color: Color = field(default_factory=Color)
        phase: float = field(default=0.0, metadata={TRANSIENT: True})

    catalog = get_catalog()
    descriptor = catalog.descriptor_of("Light")
    catalog.write(light, "color.r", 0.5)
"""

from __future__ import annotations

import dataclasses
import hashlib
import operator
import types
import typing
import uuid
from collections.abc import Callable, Iterator
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar, get_args, get_origin, get_type_hints, overload

from bindery.core.catalog.models import (
    DOC,
    SKIP,
    TRANSIENT,
    FieldDescriptor,
    FieldKind,
    TypeDescriptor,
    ValueSpec,
)
from bindery.core.catalog.paths import Segment, format_path, parse_path
from bindery.core.catalog.values import coerce
from bindery.core.errors import InvalidPathError, UnknownTypeError
from bindery.core.identity import DurableId

if TYPE_CHECKING:
    from bindery.core.identity import LiveHandle
    from bindery.host.protocol import Host

T = TypeVar("T")

_PRIMITIVES = (bool, int, float, str)


def _type_path(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _stable_type_id(cls: type) -> uuid.UUID:
    """Derive a deterministic UUID from the fully qualified class name.

    Same code yields the same id in every process, so persisted files can
    record it next to the tag.
    """
    digest = hashlib.sha256(_type_path(cls).encode()).digest()
    return uuid.UUID(bytes=digest[:16])


def _is_pydantic(cls: type) -> bool:
    """Check if class is a Pydantic model without importing pydantic."""
    for base in cls.__mro__:
        if base.__module__.startswith("pydantic") and base.__name__ == "BaseModel":
            return True
    return False


def _is_struct(cls: Any) -> bool:
    return isinstance(cls, type) and (dataclasses.is_dataclass(cls) or _is_pydantic(cls))


def _is_frozen(cls: type) -> bool:
    if dataclasses.is_dataclass(cls):
        return bool(cls.__dataclass_params__.frozen)  # type: ignore[attr-defined]
    return bool(cls.model_config.get("frozen", False))  # type: ignore[attr-defined]


def _is_default_constructible(cls: type) -> bool:
    if dataclasses.is_dataclass(cls):
        return all(
            f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING
            for f in dataclasses.fields(cls)
            if f.init
        )
    model_fields = cls.model_fields  # type: ignore[attr-defined]
    return not any(info.is_required() for info in model_fields.values())


def _setter(name: str) -> Callable[[Any, Any], None]:
    def write(obj: Any, value: Any) -> None:
        setattr(obj, name, value)

    return write


class _Slot:
    """Resolved location of a path: a container plus a field or an index."""

    __slots__ = ("container", "key", "spec", "field")

    def __init__(
        self, container: Any, key: Segment, spec: ValueSpec, field: FieldDescriptor | None
    ):
        self.container = container
        self.key = key
        self.spec = spec
        self.field = field

    def read(self) -> Any:
        if self.field is not None:
            return self.field.read(self.container)
        return self.container[self.key]

    def write(self, value: Any) -> None:
        if self.field is not None:
            self.field.write(self.container, value)
        else:
            self.container[self.key] = value


class TypeCatalog:
    """Registry mapping type tags to immutable TypeDescriptors.

    Root types are registered explicitly (usually by @editable); nested struct
    types are described on demand while building their parents. Once frozen,
    the catalog is read-only.
    """

    def __init__(self) -> None:
        """Initialize empty catalog."""
        self._by_cls: dict[type, TypeDescriptor] = {}
        self._by_tag: dict[str, TypeDescriptor] = {}
        self._by_path: dict[str, TypeDescriptor] = {}
        self._by_type_id: dict[uuid.UUID, TypeDescriptor] = {}
        self._building: set[type] = set()
        self._frozen = False

    # Registration

    def register(
        self,
        cls: type,
        tag: str | None = None,
        *,
        type_id: str | uuid.UUID | None = None,
        persistent: bool = True,
    ) -> TypeDescriptor:
        """Register a root editable type and return its descriptor.

        Args:
            cls: Mutable dataclass or Pydantic model with defaults for every field.
            tag: Type tag; defaults to the class name (type_path stays fully qualified).
            type_id: Explicit stable id; derived from the class path otherwise.
            persistent: If False, instances are editable but never saved.

        Returns:
            The type's descriptor. Registering the same class twice returns
            the existing descriptor.

        Raises:
            TypeError: If the class is not describable or not default-constructible.
            RuntimeError: If the catalog is frozen, or the tag or type id collides.
        """
        existing = self._by_tag.get(tag or cls.__name__)
        if existing is not None and existing.cls is cls:
            return existing
        if self._frozen:
            raise RuntimeError(f"Cannot register {cls.__qualname__}: catalog is frozen")
        if _is_struct(cls) and not _is_default_constructible(cls):
            raise TypeError(
                f"Editable type {cls.__qualname__} must provide defaults for every field "
                f"so hosts can construct fresh instances"
            )

        tag = tag or cls.__name__
        if tag in self._by_tag:
            raise RuntimeError(
                f"Type tag collision: {cls} and {self._by_tag[tag].cls} both use '{tag}'"
            )
        resolved_id = uuid.UUID(str(type_id)) if type_id is not None else _stable_type_id(cls)
        if resolved_id in self._by_type_id:
            raise RuntimeError(
                f"Type id collision: {cls} and {self._by_type_id[resolved_id].cls} "
                f"share {resolved_id}"
            )

        descriptor = self._describe(cls, tag=tag, type_id=resolved_id, persistent=persistent)
        self._by_tag[tag] = descriptor
        self._by_path[descriptor.type_path] = descriptor
        self._by_type_id[resolved_id] = descriptor
        return descriptor

    def freeze(self) -> None:
        """Make the catalog read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # Lookup

    def descriptor_of(self, type_tag: str) -> TypeDescriptor:
        """Get the descriptor of a registered root type.

        Accepts the short tag or the fully qualified type path.

        Raises:
            UnknownTypeError: If no root type uses this tag.
        """
        descriptor = self._by_tag.get(type_tag) or self._by_path.get(type_tag)
        if descriptor is None:
            raise UnknownTypeError(type_tag)
        return descriptor

    def descriptor_for(self, cls: type) -> TypeDescriptor:
        """Get (building if necessary) the descriptor for any struct class."""
        descriptor = self._by_cls.get(cls)
        if descriptor is not None:
            return descriptor
        if self._frozen:
            raise RuntimeError(f"Cannot describe {cls.__qualname__}: catalog is frozen")
        return self._describe(cls, tag=cls.__name__, type_id=_stable_type_id(cls))

    def by_type_id(self, type_id: uuid.UUID) -> TypeDescriptor | None:
        return self._by_type_id.get(type_id)

    def tag_of(self, obj: Any) -> str:
        """Type tag of a live object."""
        return self.descriptor_for(type(obj)).tag

    def __contains__(self, type_tag: object) -> bool:
        return type_tag in self._by_tag

    def __iter__(self) -> Iterator[TypeDescriptor]:
        return iter(self._by_tag.values())

    def __len__(self) -> int:
        return len(self._by_tag)

    # Descriptor construction

    def _describe(
        self, cls: type, *, tag: str, type_id: uuid.UUID, persistent: bool = True
    ) -> TypeDescriptor:
        if not _is_struct(cls):
            raise TypeError(
                f"Editable type {cls.__name__} must be a dataclass or Pydantic model. "
                f"Did you forget @dataclass decorator?"
            )
        if _is_frozen(cls):
            raise TypeError(f"Editable type {cls.__name__} must be mutable (not frozen)")
        if cls in self._building:
            raise TypeError(
                f"Editable type {cls.__name__} contains itself; use a DurableId reference instead"
            )

        self._building.add(cls)
        try:
            fields = tuple(self._describe_fields(cls))
        finally:
            self._building.discard(cls)

        descriptor = TypeDescriptor(
            tag=tag,
            type_path=_type_path(cls),
            type_id=type_id,
            cls=cls,
            fields=fields,
            factory=cls,
            persistent=persistent,
        )
        self._by_cls[cls] = descriptor
        return descriptor

    def _describe_fields(self, cls: type) -> Iterator[FieldDescriptor]:
        if dataclasses.is_dataclass(cls):
            hints = get_type_hints(cls)
            for f in dataclasses.fields(cls):
                if not f.init or f.metadata.get(SKIP):
                    continue
                yield FieldDescriptor(
                    name=f.name,
                    spec=self._spec_for(hints[f.name], f"{cls.__qualname__}.{f.name}"),
                    read=operator.attrgetter(f.name),
                    write=_setter(f.name),
                    transient=bool(f.metadata.get(TRANSIENT, False)),
                    doc=f.metadata.get(DOC),
                )
            return

        for name, info in cls.model_fields.items():  # type: ignore[attr-defined]
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            if extra.get(SKIP):
                continue
            yield FieldDescriptor(
                name=name,
                spec=self._spec_for(info.annotation, f"{cls.__qualname__}.{name}"),
                read=operator.attrgetter(name),
                write=_setter(name),
                transient=bool(extra.get(TRANSIENT, False)),
                doc=info.description,
            )

    def _spec_for(self, annotation: Any, where: str) -> ValueSpec:
        origin = get_origin(annotation)
        args = get_args(annotation)

        if origin is typing.Union or origin is types.UnionType:
            members = [a for a in args if a is not type(None)]
            if len(members) != 1 or len(args) != 2:
                raise TypeError(f"Unsupported union type {annotation!r} for {where}")
            inner = self._spec_for(members[0], where)
            return dataclasses.replace(inner, optional=True, annotation=annotation)

        if annotation is DurableId:
            return ValueSpec(FieldKind.REFERENCE, annotation)
        if annotation in _PRIMITIVES:
            return ValueSpec(FieldKind.PRIMITIVE, annotation, scalar=annotation)
        if origin is None and isinstance(annotation, type) and issubclass(annotation, Enum):
            return ValueSpec(FieldKind.ENUM, annotation, scalar=annotation)
        if origin is list and len(args) == 1:
            return ValueSpec(FieldKind.COLLECTION, annotation, item=self._spec_for(args[0], where))
        if _is_struct(annotation):
            return ValueSpec(FieldKind.STRUCT, annotation, struct=self.descriptor_for(annotation))

        raise TypeError(f"Unsupported field type {annotation!r} for {where}")

    # Accessors

    def _locate(self, obj: Any, path: str) -> _Slot:
        """Walk a path from a root object down to the addressed slot."""
        segments = parse_path(path)
        context: TypeDescriptor | ValueSpec = self.descriptor_for(type(obj))
        container: Any = obj

        for depth, segment in enumerate(segments):
            walked = format_path(segments[: depth + 1])
            last = depth == len(segments) - 1

            if isinstance(context, TypeDescriptor):
                if not isinstance(segment, str):
                    raise InvalidPathError(path, f"{walked} indexes a struct")
                field = context.field(segment)
                if field is None:
                    raise InvalidPathError(path, f"{context.tag} has no field '{segment}'")
                slot = _Slot(container, segment, field.spec, field)
            else:
                if not isinstance(segment, int):
                    raise InvalidPathError(path, f"{walked} must be a list index")
                if not 0 <= segment < len(container):
                    raise InvalidPathError(path, f"index {segment} out of range")
                assert context.item is not None
                slot = _Slot(container, segment, context.item, None)

            if last:
                return slot

            value = slot.read()
            if value is None:
                raise InvalidPathError(path, f"{walked} is None")
            if slot.spec.kind is FieldKind.STRUCT:
                assert slot.spec.struct is not None
                context = slot.spec.struct
            elif slot.spec.kind is FieldKind.COLLECTION:
                context = slot.spec
            else:
                raise InvalidPathError(
                    path, f"cannot descend into {slot.spec.describe()} at {walked}"
                )
            container = value

        raise InvalidPathError(path, "empty path")

    def spec_at(self, obj: Any, path: str) -> ValueSpec:
        """ValueSpec of the slot a path addresses."""
        return self._locate(obj, path).spec

    def read(self, obj: Any, path: str) -> Any:
        """Read the value at path (not copied)."""
        return self._locate(obj, path).read()

    def write(self, obj: Any, path: str, value: Any) -> Any:
        """Type-check and write a value in place.

        Returns:
            The value actually stored (after coercion).

        Raises:
            InvalidPathError: If the path does not resolve.
            TypeMismatchError: If the value's kind disagrees with the field.
        """
        slot = self._locate(obj, path)
        stored = coerce(slot.spec, value, path)
        slot.write(stored)
        return stored

    def insert(self, obj: Any, path: str, index: int, value: Any) -> Any:
        """Insert an element into the collection at path.

        Raises:
            InvalidPathError: If path is not a collection or index is out of range.
            TypeMismatchError: If the element does not match the item kind.
        """
        items, item_spec = self._collection(obj, path)
        if not 0 <= index <= len(items):
            raise InvalidPathError(path, f"insert index {index} out of range")
        stored = coerce(item_spec, value, f"{path}.{index}")
        items.insert(index, stored)
        return stored

    def remove(self, obj: Any, path: str, index: int) -> Any:
        """Remove and return the element at index from the collection at path."""
        items, _ = self._collection(obj, path)
        if not 0 <= index < len(items):
            raise InvalidPathError(path, f"remove index {index} out of range")
        return items.pop(index)

    def _collection(self, obj: Any, path: str) -> tuple[list[Any], ValueSpec]:
        slot = self._locate(obj, path)
        if slot.spec.kind is not FieldKind.COLLECTION or slot.spec.item is None:
            raise InvalidPathError(path, f"{slot.spec.describe()} is not a collection")
        items = slot.read()
        if items is None:
            items = []
            slot.write(items)
        return items, slot.spec.item

    # Handle-level accessors

    def get(self, host: Host, handle: LiveHandle, path: str) -> Any:
        """Read a field of the object behind a live handle."""
        return self.read(host.fetch(handle), path)

    def set(self, host: Host, handle: LiveHandle, path: str, value: Any) -> None:
        """Write a field of the object behind a live handle (copy out, write back)."""
        obj = host.fetch(handle)
        self.write(obj, path, value)
        host.store(handle, obj)


# Module-level catalog instance
_catalog = TypeCatalog()


def get_catalog() -> TypeCatalog:
    """Access the process-wide type catalog populated by @editable."""
    return _catalog


@overload
def editable(cls: type[T]) -> type[T]: ...


@overload
def editable(
    cls: None = None,
    *,
    tag: str | None = None,
    type_id: str | uuid.UUID | None = None,
    persistent: bool = True,
) -> Callable[[type[T]], type[T]]: ...


def editable(
    cls: type[T] | None = None,
    *,
    tag: str | None = None,
    type_id: str | uuid.UUID | None = None,
    persistent: bool = True,
) -> type[T] | Callable[[type[T]], type[T]]:
    """Register a dataclass or Pydantic model as an editable type.

    Supports three forms:
        @editable                          # bare decorator
        @editable()                        # parenthesized, no args
        @editable(tag="Light", type_id=…)  # factory with args

    Note:
        Apply @editable AFTER @dataclass:

        >>> @editable
        ... @dataclass
        ... class Marker:
        ...     label: str = ""
    """

    def decorator(c: type[T]) -> type[T]:
        _catalog.register(c, tag, type_id=type_id, persistent=persistent)
        return c

    if cls is None:
        return decorator
    return decorator(cls)
