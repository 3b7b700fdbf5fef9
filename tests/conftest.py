"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from bindery import EditorSession, EditorSettings, LocalHost, TypeCatalog
from scene_types import Camera, Counter, Gizmo, Light, Spline


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def catalog() -> TypeCatalog:
    """Fresh catalog with the scene types registered."""
    catalog = TypeCatalog()
    catalog.register(Light)
    catalog.register(Spline)
    catalog.register(Camera)
    catalog.register(Counter)
    catalog.register(Gizmo, persistent=False)
    return catalog


@pytest.fixture
def host(catalog: TypeCatalog) -> LocalHost:
    """Fresh in-memory host bound to the test catalog."""
    return LocalHost(catalog)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> EditorSettings:
    return EditorSettings(orphan_grace_seconds=30.0, journal_limit=None, graph_indent=2)


@pytest.fixture
def session(host, catalog, settings, clock):
    """Started editor session; closed after the test."""
    session = EditorSession(host, catalog, settings, clock=clock).start()
    yield session
    session.close()
