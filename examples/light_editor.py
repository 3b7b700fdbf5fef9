"""Walkthrough: edit, undo, reload and save a small scene.

Run with ``python -m examples.light_editor`` from the repository root.
"""

import logging
import tempfile
from pathlib import Path

from bindery import EditorSession, LocalHost

from .components import Light, LightKind


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    host = LocalHost()

    with EditorSession(host) as session:
        key = session.register(host.spawn(Light(intensity=2.0, kind=LightKind.SPOT)))
        follow = session.register(host.create("Follow"))
        session.apply(follow, "target", key)
        session.selection.select_replace(key)

        session.apply_text(key, "color.r", "0.25")
        print("edited:", session.view(key).flatten())
        session.undo()
        print("undone:", session.view(key).value("color.r"))
        session.redo()

        # A hot reload destroys every object; ids become orphans.
        host.reload()
        print("bound after reload:", session.binding.is_bound(key))

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "scene.json"
            report = session.save_file(path)
            print(f"saved {report.entries} entries (orphans within grace included)")
            print(path.read_text(encoding="utf-8"))

            loaded = session.load_file(path)
            print("reloaded ids:", [str(d) for d in loaded.loaded])

        target = session.view(follow).value("target")
        print("follow target still resolves:", session.resolve(target) is not None)
        print("selection handles:", session.selection.resolve_handles(session.registry))


if __name__ == "__main__":
    main()
