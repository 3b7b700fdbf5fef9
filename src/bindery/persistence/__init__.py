"""Persistence codec: versioned graph snapshots and rebinding on load."""

from bindery.persistence.codec import PersistenceCodec, Spawner
from bindery.persistence.files import read_graph, write_graph
from bindery.persistence.models import (
    GRAPH_FORMAT,
    GRAPH_VERSION,
    LoadFailure,
    LoadReport,
    PersistedEntry,
    PersistedGraph,
    SaveReport,
)

__all__ = [
    "PersistenceCodec",
    "Spawner",
    "PersistedGraph",
    "PersistedEntry",
    "LoadReport",
    "LoadFailure",
    "SaveReport",
    "GRAPH_FORMAT",
    "GRAPH_VERSION",
    "read_graph",
    "write_graph",
]
