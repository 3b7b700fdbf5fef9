"""Tests for async graph file I/O."""

import pytest

from bindery import DecodeError, PersistedGraph
from bindery.persistence import PersistedEntry, read_graph, write_graph


@pytest.fixture
def graph():
    return PersistedGraph(
        entries=(
            PersistedEntry(
                id="5d0d6f0e-8f43-4cf4-9d0e-4b5a7c1a0001",
                type="Light",
                fields={"intensity": 2.0},
            ),
        )
    )


@pytest.mark.asyncio
async def test_write_then_read_graph(tmp_path, graph):
    path = tmp_path / "scenes" / "level.json"

    await write_graph(path, graph)
    loaded = await read_graph(path)

    assert loaded.model_dump() == graph.model_dump()
    assert path.read_text(encoding="utf-8").endswith("}\n")


@pytest.mark.asyncio
async def test_write_leaves_no_temp_file(tmp_path, graph):
    path = tmp_path / "level.json"

    await write_graph(path, graph, indent=4)

    assert [p.name for p in tmp_path.iterdir()] == ["level.json"]
    assert '\n    "entries"' in path.read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_read_missing_file_raises_os_error(tmp_path):
    with pytest.raises(OSError):
        await read_graph(tmp_path / "missing.json")


@pytest.mark.asyncio
async def test_read_garbage_raises_decode_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("definitely not a graph", encoding="utf-8")

    with pytest.raises(DecodeError):
        await read_graph(path)
