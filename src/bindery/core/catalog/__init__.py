"""Type catalog: descriptors, @editable decorator, paths and value codecs."""

from bindery.core.catalog.core import TypeCatalog, editable, get_catalog
from bindery.core.catalog.models import (
    DOC,
    SKIP,
    TRANSIENT,
    FieldDescriptor,
    FieldKind,
    TypeDescriptor,
    ValueSpec,
)
from bindery.core.catalog.paths import format_path, join_path, parse_path
from bindery.core.catalog.values import coerce, decode_value, encode_value, parse_text

__all__ = [
    # Models
    "FieldKind",
    "ValueSpec",
    "FieldDescriptor",
    "TypeDescriptor",
    "TRANSIENT",
    "SKIP",
    "DOC",
    # Core
    "editable",
    "get_catalog",
    "TypeCatalog",
    # Paths
    "parse_path",
    "format_path",
    "join_path",
    # Values
    "coerce",
    "parse_text",
    "encode_value",
    "decode_value",
]
