"""bindery: durable identity, reflection and undo for live-editing tools.

Usage:
    from dataclasses import dataclass
    from bindery import EditorSession, LocalHost, editable

    @editable
    @dataclass
    class Light:
        intensity: float = 1.0

    host = LocalHost()
    with EditorSession(host) as session:
        light = session.register(host.create("Light"))
        session.apply(light, "intensity", 2.0)
        session.undo()
        session.save_file("scene.json")
"""

__version__ = "0.1.0"

# Binding
from bindery.binding import ObjectState, PropertyNode, PropertyView, ReflectionBinding

# Config
from bindery.config import EditorSettings

# Core primitives
from bindery.core import (
    DOC,
    SKIP,
    TRANSIENT,
    ApplyError,
    BinderyError,
    ConflictError,
    DecodeError,
    DurableId,
    EmptyHistoryError,
    FieldKind,
    InvalidPathError,
    LiveHandle,
    NoRedoAvailableError,
    NotBoundError,
    RegistryBusyError,
    TypeCatalog,
    TypeDescriptor,
    TypeMismatchError,
    UnknownTypeError,
    ValueSpec,
    editable,
    get_catalog,
)

# Host
from bindery.host import Host, HostListener, LocalHost

# Journal
from bindery.journal import ChangeJournal, JournalEntry

# Persistence
from bindery.persistence import LoadReport, PersistedGraph, PersistenceCodec, SaveReport

# Registry
from bindery.registry import IdentityRegistry, OrphanRecord

# Session
from bindery.session import EditorSession, SelectionState

__all__ = [
    # Version
    "__version__",
    # Core
    "DurableId",
    "LiveHandle",
    "editable",
    "get_catalog",
    "TypeCatalog",
    "TypeDescriptor",
    "FieldKind",
    "ValueSpec",
    "TRANSIENT",
    "SKIP",
    "DOC",
    # Errors
    "BinderyError",
    "ApplyError",
    "NotBoundError",
    "TypeMismatchError",
    "InvalidPathError",
    "ConflictError",
    "RegistryBusyError",
    "EmptyHistoryError",
    "NoRedoAvailableError",
    "DecodeError",
    "UnknownTypeError",
    # Host
    "Host",
    "HostListener",
    "LocalHost",
    # Registry
    "IdentityRegistry",
    "OrphanRecord",
    # Binding
    "ReflectionBinding",
    "PropertyView",
    "PropertyNode",
    "ObjectState",
    # Journal
    "ChangeJournal",
    "JournalEntry",
    # Persistence
    "PersistenceCodec",
    "PersistedGraph",
    "LoadReport",
    "SaveReport",
    # Session
    "EditorSession",
    "SelectionState",
    # Config
    "EditorSettings",
]
