"""Tests for field path parsing and ValueSpec-driven value handling."""

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from bindery import (
    DecodeError,
    DurableId,
    FieldKind,
    InvalidPathError,
    TypeMismatchError,
    ValueSpec,
)
from bindery.core.catalog import (
    coerce,
    decode_value,
    encode_value,
    format_path,
    join_path,
    parse_path,
    parse_text,
)
from scene_types import Color, Light, Mode, Point

INT = ValueSpec(FieldKind.PRIMITIVE, int, scalar=int)
FLOAT = ValueSpec(FieldKind.PRIMITIVE, float, scalar=float)
BOOL = ValueSpec(FieldKind.PRIMITIVE, bool, scalar=bool)
STR = ValueSpec(FieldKind.PRIMITIVE, str, scalar=str)
MODE = ValueSpec(FieldKind.ENUM, Mode, scalar=Mode)
REF = ValueSpec(FieldKind.REFERENCE, DurableId)
OPTIONAL_INT = ValueSpec(FieldKind.PRIMITIVE, int | None, optional=True, scalar=int)
FLOATS = ValueSpec(FieldKind.COLLECTION, list[float], item=FLOAT)


# Paths


def test_parse_path_accepts_both_index_forms():
    assert parse_path("points[2].x") == ("points", 2, "x")
    assert parse_path("points.2.x") == ("points", 2, "x")
    assert format_path(parse_path("points[2].x")) == "points.2.x"


@pytest.mark.parametrize("path", ["", "a..b", "a[-1]", "a.b-c", ".a"])
def test_parse_path_rejects_malformed(path):
    with pytest.raises(InvalidPathError):
        parse_path(path)


def test_join_path():
    assert join_path("", "color") == "color"
    assert join_path("points", 3) == "points.3"


@given(
    st.lists(
        st.one_of(
            st.integers(min_value=0, max_value=10_000),
            st.from_regex(r"[a-z_][a-z0-9_]{0,8}", fullmatch=True),
        ),
        min_size=1,
        max_size=6,
    )
)
def test_format_then_parse_is_identity(segments):
    """Canonical dotted form always parses back to the same segments."""
    assert parse_path(format_path(segments)) == tuple(segments)


# Coercion


def test_bool_is_not_an_int():
    """CRITICAL: True must not sneak into an int field.

    Why: bool subclasses int in Python, but the field kinds differ.
    """
    with pytest.raises(TypeMismatchError):
        coerce(INT, True, "count")
    with pytest.raises(TypeMismatchError):
        coerce(FLOAT, False, "scale")
    assert coerce(BOOL, True, "flag") is True


def test_non_finite_floats_are_rejected():
    for value in (math.inf, -math.inf, math.nan, 10**400):
        with pytest.raises(TypeMismatchError):
            coerce(FLOAT, value, "scale")
    assert coerce(FLOAT, 10**6, "scale") == 1e6


def test_none_only_for_optional():
    assert coerce(OPTIONAL_INT, None, "zoom") is None
    with pytest.raises(TypeMismatchError):
        coerce(INT, None, "count")


def test_collection_items_are_coerced():
    assert coerce(FLOATS, [1, 2.5], "weights") == [1.0, 2.5]
    with pytest.raises(TypeMismatchError) as info:
        coerce(FLOATS, [1.0, "x"], "weights")
    assert info.value.path == "weights.1"


def test_reference_requires_durable_id():
    durable = DurableId.new()
    assert coerce(REF, durable, "target") is durable
    with pytest.raises(TypeMismatchError):
        coerce(REF, str(durable), "target")


# Text parsing


@pytest.mark.parametrize(
    "spec, text, expected",
    [
        (BOOL, "Yes", True),
        (BOOL, "off", False),
        (INT, " 42 ", 42),
        (FLOAT, "2.5", 2.5),
        (STR, " padded ", " padded "),
        (MODE, "SPOT", Mode.SPOT),
        (MODE, "spot", Mode.SPOT),
        (OPTIONAL_INT, "", None),
    ],
)
def test_parse_text(spec, text, expected):
    assert parse_text(spec, text, "field") == expected


@pytest.mark.parametrize(
    "spec, text",
    [
        (BOOL, "maybe"),
        (INT, "4.5"),
        (FLOAT, "abc"),
        (FLOAT, "inf"),
        (FLOAT, "nan"),
        (FLOAT, "1e400"),
        (MODE, "flood"),
        (REF, "x"),
        (INT, ""),
    ],
)
def test_parse_text_rejects_bad_input(spec, text):
    with pytest.raises(TypeMismatchError):
        parse_text(spec, text, "field")


# Encoding


def test_encode_struct_skips_transient_fields(catalog):
    spec = ValueSpec(FieldKind.STRUCT, Light, struct=catalog.descriptor_for(Light))
    light = Light(intensity=2.0, mode=Mode.SPOT, phase=0.7)

    encoded = encode_value(spec, light)

    assert encoded == {
        "intensity": 2.0,
        "color": {"r": 1.0, "g": 1.0, "b": 1.0},
        "enabled": True,
        "mode": "SPOT",
        "label": "",
    }


def test_decode_struct_restores_nested_values(catalog):
    spec = ValueSpec(FieldKind.STRUCT, Light, struct=catalog.descriptor_for(Light))

    light = decode_value(spec, {"intensity": 2, "color": {"r": 0.5}, "mode": "SPOT"}, "")

    assert light == Light(intensity=2.0, color=Color(r=0.5), mode=Mode.SPOT)
    assert isinstance(light.intensity, float)


def test_decode_collection_of_structs(catalog):
    item = ValueSpec(FieldKind.STRUCT, Point, struct=catalog.descriptor_for(Point))
    spec = ValueSpec(FieldKind.COLLECTION, list[Point], item=item)

    decoded = decode_value(spec, [{"x": 1.0}, {"y": 2.0}], "points")

    assert decoded == [Point(1.0, 0.0), Point(0.0, 2.0)]


def test_decode_reference():
    durable = DurableId.new()
    assert decode_value(REF, str(durable), "target") == durable


@pytest.mark.parametrize(
    "spec, raw",
    [
        (INT, "1"),
        (INT, None),
        (MODE, "FLOOD"),
        (REF, "not-a-uuid"),
        (REF, 5),
        (FLOATS, 1.0),
        (FLOAT, math.inf),
        (FLOAT, math.nan),
        (FLOAT, 10**400),
    ],
)
def test_decode_rejects_mismatched_data(spec, raw):
    with pytest.raises(DecodeError):
        decode_value(spec, raw, "field")


def test_decode_struct_rejects_unknown_keys(catalog):
    spec = ValueSpec(FieldKind.STRUCT, Color, struct=catalog.descriptor_for(Color))

    with pytest.raises(DecodeError, match="unknown keys"):
        decode_value(spec, {"r": 1.0, "alpha": 0.5}, "color")
