"""Value checking, text parsing and JSON encoding driven by ValueSpec.

All functions here are pure: they never touch a host or a registry.
"""

from __future__ import annotations

import math
from typing import Any

from bindery.core.catalog.models import FieldKind, ValueSpec
from bindery.core.catalog.paths import join_path
from bindery.core.errors import DecodeError, TypeMismatchError
from bindery.core.identity import DurableId

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


def _primitive_matches(scalar: type | None, value: Any) -> bool:
    if scalar is bool:
        return isinstance(value, bool)
    if scalar is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if scalar is float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return False
        # Finite only: JSON has no inf or nan.
        try:
            return math.isfinite(value)
        except OverflowError:
            return False
    return scalar is not None and isinstance(value, scalar)


def coerce(spec: ValueSpec, value: Any, path: str) -> Any:
    """Check value against spec and return the value to store.

    Ints are widened to float for float fields; lists are rebuilt so that
    their elements are coerced too. Nested structs are checked by type only.

    Raises:
        TypeMismatchError: If the value's kind disagrees with the ValueSpec.
    """
    if value is None:
        if spec.optional:
            return None
        raise TypeMismatchError(path, spec.describe(), value)

    match spec.kind:
        case FieldKind.PRIMITIVE:
            if not _primitive_matches(spec.scalar, value):
                raise TypeMismatchError(path, spec.describe(), value)
            return float(value) if spec.scalar is float else value
        case FieldKind.ENUM:
            if spec.scalar is None or not isinstance(value, spec.scalar):
                raise TypeMismatchError(path, spec.describe(), value)
            return value
        case FieldKind.STRUCT:
            if spec.struct is None or not isinstance(value, spec.struct.cls):
                raise TypeMismatchError(path, spec.describe(), value)
            return value
        case FieldKind.COLLECTION:
            if not isinstance(value, list) or spec.item is None:
                raise TypeMismatchError(path, spec.describe(), value)
            return [coerce(spec.item, v, join_path(path, i)) for i, v in enumerate(value)]
        case FieldKind.REFERENCE:
            if not isinstance(value, DurableId):
                raise TypeMismatchError(path, spec.describe(), value)
            return value
    raise TypeMismatchError(path, spec.describe(), value)


def parse_text(spec: ValueSpec, text: str, path: str) -> Any:
    """Parse UI text input into a typed value for primitive and enum fields.

    An empty string clears optional non-string fields.

    Raises:
        TypeMismatchError: If the text does not parse or the field is not textual.
    """
    stripped = text.strip()
    if spec.optional and not stripped and spec.scalar is not str:
        return None

    if spec.kind is FieldKind.PRIMITIVE:
        if spec.scalar is str:
            return text
        if spec.scalar is bool:
            word = stripped.lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
            raise TypeMismatchError(path, spec.describe(), text)
        try:
            value = spec.scalar(stripped)  # type: ignore[misc]
        except (TypeError, ValueError) as e:
            raise TypeMismatchError(path, spec.describe(), text) from e
        if not _primitive_matches(spec.scalar, value):
            raise TypeMismatchError(path, spec.describe(), text)
        return value

    if spec.kind is FieldKind.ENUM and spec.scalar is not None:
        members = spec.scalar.__members__
        if stripped in members:
            return members[stripped]
        for member in members.values():
            if str(member.value) == stripped:
                return member
        raise TypeMismatchError(path, spec.describe(), text)

    raise TypeMismatchError(path, spec.describe(), text)


def encode_value(spec: ValueSpec, value: Any) -> Any:
    """Convert a live value into JSON-compatible data.

    Enums become member names, references become UUID strings and structs
    become dicts without their transient fields.
    """
    if value is None:
        return None
    match spec.kind:
        case FieldKind.PRIMITIVE:
            return value
        case FieldKind.ENUM:
            return value.name
        case FieldKind.STRUCT:
            assert spec.struct is not None
            return {
                f.name: encode_value(f.spec, f.read(value)) for f in spec.struct.persisted_fields()
            }
        case FieldKind.COLLECTION:
            assert spec.item is not None
            return [encode_value(spec.item, v) for v in value]
        case FieldKind.REFERENCE:
            return str(value)
    raise TypeError(f"Cannot encode value of kind {spec.kind}")


def decode_value(spec: ValueSpec, raw: Any, path: str) -> Any:
    """Inverse of encode_value.

    Raises:
        DecodeError: If raw does not match the ValueSpec.
    """
    if raw is None:
        if spec.optional:
            return None
        raise DecodeError(f"Field '{path}' is not optional")

    match spec.kind:
        case FieldKind.PRIMITIVE:
            if not _primitive_matches(spec.scalar, raw):
                raise DecodeError(f"Field '{path}' expects {spec.describe()}, got {raw!r}")
            return float(raw) if spec.scalar is float else raw
        case FieldKind.ENUM:
            assert spec.scalar is not None
            members = spec.scalar.__members__
            if not isinstance(raw, str) or raw not in members:
                raise DecodeError(f"Field '{path}' has unknown {spec.describe()} member {raw!r}")
            return members[raw]
        case FieldKind.STRUCT:
            assert spec.struct is not None
            return _decode_struct(spec, raw, path)
        case FieldKind.COLLECTION:
            assert spec.item is not None
            if not isinstance(raw, list):
                raise DecodeError(f"Field '{path}' expects a list, got {raw!r}")
            return [decode_value(spec.item, v, join_path(path, i)) for i, v in enumerate(raw)]
        case FieldKind.REFERENCE:
            if not isinstance(raw, str):
                raise DecodeError(f"Field '{path}' expects a UUID string, got {raw!r}")
            try:
                return DurableId.parse(raw)
            except ValueError as e:
                raise DecodeError(f"Field '{path}' has malformed UUID {raw!r}") from e
    raise DecodeError(f"Field '{path}' has unsupported kind {spec.kind}")


def _decode_struct(spec: ValueSpec, raw: Any, path: str) -> Any:
    descriptor = spec.struct
    assert descriptor is not None
    if not isinstance(raw, dict):
        raise DecodeError(f"Field '{path}' expects an object, got {raw!r}")

    unknown = set(raw) - set(descriptor.field_names)
    if unknown:
        raise DecodeError(f"Field '{path}' has unknown keys {sorted(unknown)}")

    kwargs = {}
    for name, value in raw.items():
        field = descriptor.field(name)
        assert field is not None
        kwargs[name] = decode_value(field.spec, value, join_path(path, name))
    try:
        return descriptor.cls(**kwargs)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Field '{path}' could not construct {descriptor.tag}: {e}") from e
