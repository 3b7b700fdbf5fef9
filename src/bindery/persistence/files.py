"""Graph file I/O, run off the update turn in worker threads."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from bindery.persistence.models import PersistedGraph


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


async def write_graph(path: str | os.PathLike[str], graph: PersistedGraph, indent: int = 2) -> None:
    """Write a graph file atomically (temp file, then rename).

    Raises:
        OSError: On any filesystem failure.
    """
    text = graph.to_json(indent)
    await asyncio.to_thread(_write_text, Path(path), text)


async def read_graph(path: str | os.PathLike[str]) -> PersistedGraph:
    """Read and decode a graph file.

    Raises:
        OSError: On any filesystem failure.
        DecodeError: If the file is not a supported graph document.
    """
    text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
    return PersistedGraph.from_json(text)
