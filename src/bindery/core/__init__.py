"""Core functionalities: stateless primitives shared by every service.

Architecture Note:
    core/ contains pure value types, the read-only type catalog and the error
    taxonomy. Nothing here holds per-session state.
    For stateful services, see registry/, binding/, journal/, persistence/,
    session/ and host/.
"""

from bindery.core.identity import DurableId, LiveHandle
from bindery.core.errors import (
    ApplyError,
    BinderyError,
    ConflictError,
    DecodeError,
    EmptyHistoryError,
    InvalidPathError,
    NoRedoAvailableError,
    NotBoundError,
    RegistryBusyError,
    TypeMismatchError,
    UnknownTypeError,
)
from bindery.core.catalog import (
    DOC,
    SKIP,
    TRANSIENT,
    FieldDescriptor,
    FieldKind,
    TypeCatalog,
    TypeDescriptor,
    ValueSpec,
    editable,
    get_catalog,
)
from bindery.core.types import Copy

__all__ = [
    # Types
    "Copy",
    # Identity
    "DurableId",
    "LiveHandle",
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
    # Catalog
    "editable",
    "get_catalog",
    "TypeCatalog",
    "TypeDescriptor",
    "FieldDescriptor",
    "FieldKind",
    "ValueSpec",
    "TRANSIENT",
    "SKIP",
    "DOC",
]
