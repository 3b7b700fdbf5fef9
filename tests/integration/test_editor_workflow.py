"""End-to-end editor journeys across registry, binding, journal and persistence."""

from bindery import EditorSession, LocalHost
from scene_types import Color, Light, Mode


def test_edit_undo_redo_journey(session, host):
    """Edit a light, undo it, redo it, reading back through fresh views."""
    light = session.register(host.create("Light"))

    session.apply(light, "intensity", 2.0)

    assert len(session.journal) == 1
    entry = session.journal.entries[0]
    assert (entry.previous, entry.new) == (1.0, 2.0)

    session.undo()
    assert session.view(light).value("intensity") == 1.0

    session.redo()
    assert session.view(light).value("intensity") == 2.0


def test_save_destroy_load_journey(session, host):
    """Objects destroyed after a save come back under their original ids."""
    first = session.register(host.spawn(Light(intensity=4.0, mode=Mode.SPOT)))
    second = session.register(host.spawn(Light(color=Color(0.1, 0.2, 0.3))))
    before = {d: session.binding.capture(d).values for d in (first, second)}
    old_handles = {session.resolve(first), session.resolve(second)}
    graph = session.save()

    host.destroy(session.resolve(first))
    host.destroy(session.resolve(second))
    assert session.resolve(first) is None
    assert session.resolve(second) is None

    report = session.load(graph)

    assert report.ok
    assert set(report.loaded) == {first, second}
    new_handles = {session.resolve(first), session.resolve(second)}
    assert None not in new_handles
    assert new_handles.isdisjoint(old_handles)
    assert all(host.is_alive(h) for h in new_handles)
    for durable, values in before.items():
        assert session.binding.capture(durable).values == values


def test_restart_journey(tmp_path, catalog, settings, clock):
    """Save in one session, reopen the file in a brand new one."""
    path = tmp_path / "scene.json"
    host = LocalHost(catalog)
    with EditorSession(host, catalog, settings, clock=clock) as session:
        key = session.register(host.create("Light"))
        spline = session.register(host.create("Spline"))
        session.apply(spline, "target", key)
        session.apply_text(key, "mode", "spot")
        session.insert(spline, "tags", 0, "hero")
        session.selection.select_replace(key)
        assert session.save_file(path).ok

    reopened_host = LocalHost(catalog)
    with EditorSession(reopened_host, catalog, settings, clock=clock) as reopened:
        report = reopened.load_file(path)

        assert report.ok
        target = reopened.view(spline).value("target")
        assert target == key
        assert reopened.view(target).value("mode") is Mode.SPOT
        assert reopened.view(spline).value("tags") == ["hero"]
        assert len(reopened.selection) == 0
        assert not reopened.journal.can_undo
