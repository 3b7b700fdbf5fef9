"""Tests for the in-memory LocalHost."""

import pytest

from bindery import HostListener, LiveHandle, LocalHost, UnknownTypeError
from scene_types import Light


class RecordingListener:
    """Captures lifecycle notifications, checking liveness at destroy time."""

    def __init__(self, host: LocalHost):
        self.host = host
        self.created: list[LiveHandle] = []
        self.destroyed: list[tuple[LiveHandle, bool]] = []

    def on_created(self, handle: LiveHandle) -> None:
        self.created.append(handle)

    def on_destroyed(self, handle: LiveHandle) -> None:
        self.destroyed.append((handle, self.host.is_alive(handle)))


def test_create_constructs_default_instance(host):
    handle = host.create("Light")

    assert host.is_alive(handle)
    assert host.fetch(handle) == Light()
    assert host.type_tag_of(handle) == "Light"


def test_create_unknown_type_raises(host):
    with pytest.raises(UnknownTypeError):
        host.create("Teapot")


def test_fetch_returns_detached_copy(host):
    """CRITICAL: Mutating a fetched object must not touch the live one.

    Why: Every write has to go through store() so it can be journaled.
    """
    handle = host.spawn(Light(intensity=2.0))

    copy = host.fetch(handle)
    copy.intensity = 9.0

    assert host.peek(handle).intensity == 2.0
    host.store(handle, copy)
    assert host.peek(handle).intensity == 9.0


def test_listener_sees_object_alive_at_destroy(host):
    listener = RecordingListener(host)
    assert isinstance(listener, HostListener)
    host.subscribe(listener)

    handle = host.create("Light")
    host.destroy(handle)

    assert listener.created == [handle]
    assert listener.destroyed == [(handle, True)]
    assert not host.is_alive(handle)


def test_recycled_slot_invalidates_stale_handle(host):
    """CRITICAL: A reused slot never answers to the old handle.

    Why: Editors that keep raw handles across despawn would edit the wrong object.
    """
    old = host.create("Light")
    host.destroy(old)
    new = host.create("Light")

    assert new.index == old.index
    assert new != old
    assert not host.is_alive(old)
    with pytest.raises(KeyError):
        host.fetch(old)
    with pytest.raises(KeyError):
        host.store(old, Light())


def test_destroy_dead_handle_is_ignored(host):
    listener = RecordingListener(host)
    host.subscribe(listener)
    handle = host.create("Light")
    host.destroy(handle)

    host.destroy(handle)

    assert len(listener.destroyed) == 1


def test_reload_destroys_everything(host):
    listener = RecordingListener(host)
    host.subscribe(listener)
    handles = [host.create("Light") for _ in range(3)]

    host.reload()

    assert len(host) == 0
    assert [h for h, _ in listener.destroyed] == handles


def test_unsubscribe_stops_notifications(host):
    listener = RecordingListener(host)
    host.subscribe(listener)
    host.subscribe(listener)
    host.unsubscribe(listener)

    host.create("Light")

    assert listener.created == []
