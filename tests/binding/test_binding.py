"""Tests for ReflectionBinding: property views and typed edits by durable id."""

import math

import pytest

from bindery import (
    ChangeJournal,
    DurableId,
    FieldKind,
    IdentityRegistry,
    InvalidPathError,
    NotBoundError,
    ReflectionBinding,
    TypeMismatchError,
)
from scene_types import Color, Mode, Point, Spline


@pytest.fixture
def registry(clock):
    return IdentityRegistry(clock=clock)


@pytest.fixture
def journal():
    return ChangeJournal()


@pytest.fixture
def binding(catalog, registry, host, journal):
    return ReflectionBinding(catalog, registry, host, journal=journal)


@pytest.fixture
def light(host, registry):
    return registry.register(host.create("Light"))


# Views


def test_view_builds_property_tree(binding, light):
    view = binding.view(light)

    assert view.durable_id == light
    assert view.type_tag == "Light"
    assert [node.name for node in view.nodes] == [
        "intensity",
        "color",
        "enabled",
        "mode",
        "label",
        "phase",
    ]
    assert view["color"].kind is FieldKind.STRUCT
    assert [child.path for child in view["color"].children] == ["color.r", "color.g", "color.b"]
    assert view.value("color.g") == 1.0
    assert view["phase"].transient
    assert view["intensity"].doc == "Brightness multiplier"


def test_view_lists_collection_elements(binding, host, registry):
    spline = registry.register(host.spawn(Spline(points=[Point(), Point(2.0, 3.0)])))

    view = binding.view(spline)

    assert [child.path for child in view["points"].children] == ["points.0", "points.1"]
    assert view.value("points.1.y") == 3.0
    assert view.flatten()["points.1.x"] == 2.0
    assert "points.1.x" in view


def test_view_is_detached_from_host(binding, host, registry, light):
    view = binding.view(light)
    view.value("color").r = 0.0

    assert host.peek(registry.resolve(light)).color.r == 1.0


def test_view_of_unbound_id_raises(binding):
    with pytest.raises(NotBoundError):
        binding.view(DurableId.new())


# Edits


def test_apply_writes_and_journals(binding, host, registry, journal, light):
    binding.apply(light, "color.r", 0.5)

    assert host.peek(registry.resolve(light)).color.r == 0.5
    entry = journal.entries[-1]
    assert (entry.durable_id, entry.path, entry.previous, entry.new) == (
        light,
        "color.r",
        1.0,
        0.5,
    )


def test_apply_canonicalizes_index_paths(binding, host, registry, journal):
    spline = registry.register(host.spawn(Spline(points=[Point()])))

    binding.apply(spline, "points[0].x", 4.0)

    assert journal.entries[-1].path == "points.0.x"


def test_replay_apply_is_not_journaled(binding, journal, light):
    binding.apply(light, "intensity", 3.0, replay=True)

    assert binding.read(light, "intensity") == 3.0
    assert len(journal) == 0


def test_rejected_apply_changes_nothing(binding, journal, light):
    """CRITICAL: A mismatched value is neither stored nor journaled.

    Why: The journal must only describe writes that happened.
    """
    with pytest.raises(TypeMismatchError):
        binding.apply(light, "enabled", "yes")
    with pytest.raises(InvalidPathError):
        binding.apply(light, "brightness", 1.0)

    assert binding.read(light, "enabled") is True
    assert len(journal) == 0


def test_non_finite_float_is_rejected(binding, journal, light):
    """CRITICAL: inf and nan never reach a float field.

    Why: JSON cannot carry them, so a save would not load back.
    """
    with pytest.raises(TypeMismatchError):
        binding.apply(light, "intensity", math.inf)
    with pytest.raises(TypeMismatchError):
        binding.apply(light, "intensity", math.nan)
    with pytest.raises(TypeMismatchError):
        binding.apply_text(light, "intensity", "inf")

    assert binding.read(light, "intensity") == 1.0
    assert len(journal) == 0


def test_apply_to_destroyed_object_is_not_bound(binding, host, registry, light):
    """CRITICAL: A stale handle is never trusted.

    Why: The host may have recycled the slot for another object.
    """
    host.destroy(registry.resolve(light))

    with pytest.raises(NotBoundError):
        binding.apply(light, "intensity", 2.0)
    assert not binding.is_bound(light)


def test_apply_text_parses_by_field_kind(binding, light):
    binding.apply_text(light, "mode", "SPOT")
    binding.apply_text(light, "intensity", "2.5")
    binding.apply_text(light, "enabled", "off")

    view = binding.view(light)
    assert view.value("mode") is Mode.SPOT
    assert view.value("intensity") == 2.5
    assert view.value("enabled") is False


def test_apply_whole_struct_is_one_entry(binding, journal, light):
    binding.apply(light, "color", Color(0.1, 0.2, 0.3))

    assert binding.read(light, "color.b") == 0.3
    assert journal.entries[-1].previous == Color()


def test_insert_and_remove_are_journaled_as_replacements(binding, host, registry, journal):
    spline = registry.register(host.create("Spline"))

    binding.insert(spline, "points", 0, Point(1.0, 1.0))
    binding.insert(spline, "tags", 0, "road")
    binding.remove(spline, "points", 0)

    assert binding.read(spline, "points") == []
    assert binding.read(spline, "tags") == ["road"]
    assert [(e.path, e.previous, e.new) for e in journal.entries] == [
        ("points", [], [Point(1.0, 1.0)]),
        ("tags", [], ["road"]),
        ("points", [Point(1.0, 1.0)], []),
    ]


def test_reference_field_accepts_durable_id(binding, host, registry, light):
    spline = registry.register(host.create("Spline"))

    binding.apply(spline, "target", light)

    assert binding.read(spline, "target") == light
    with pytest.raises(TypeMismatchError):
        binding.apply(spline, "target", str(light))


def test_pydantic_object_is_editable(binding, host, registry):
    camera = registry.register(host.create("Camera"))

    binding.apply(camera, "fov", 90)
    binding.apply_text(camera, "zoom", "3")

    assert binding.read(camera, "fov") == 90.0
    assert binding.read(camera, "zoom") == 3


# Detach and last-known state


def test_detach_captures_state_and_orphans(binding, host, registry, light):
    binding.apply(light, "intensity", 4.0)
    handle = registry.resolve(light)

    assert binding.detach(handle) == light

    assert registry.is_orphaned(light)
    state = binding.last_known(light)
    assert state.type_tag == "Light"
    assert state.values["intensity"] == 4.0

    binding.forget([light])
    assert binding.last_known(light) is None


def test_capture_unbound_raises(binding):
    with pytest.raises(NotBoundError):
        binding.capture(DurableId.new())
