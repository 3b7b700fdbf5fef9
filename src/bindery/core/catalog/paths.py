"""Field path parsing.

Paths address nested values with dots and indices. ``points[2].x`` and
``points.2.x`` are equivalent; the dotted form is canonical.
"""

from __future__ import annotations

from typing_extensions import TypeAliasType

from bindery.core.errors import InvalidPathError

Segment = TypeAliasType("Segment", str | int)


def parse_path(path: str) -> tuple[Segment, ...]:
    """Split a field path into attribute names and list indices.

    Args:
        path: Path such as ``"color.r"`` or ``"points[1].x"``.

    Returns:
        Tuple of segments; ints are list indices.

    Raises:
        InvalidPathError: If the path is empty or has a malformed segment.
    """
    if not path:
        raise InvalidPathError(path, "empty path")

    normalized = path.replace("[", ".").replace("]", "")
    segments: list[Segment] = []
    for part in normalized.split("."):
        if part.isdigit():
            segments.append(int(part))
        elif part.isidentifier():
            segments.append(part)
        else:
            raise InvalidPathError(path, f"malformed segment {part!r}")
    return tuple(segments)


def format_path(segments: tuple[Segment, ...] | list[Segment]) -> str:
    """Join segments back into the canonical dotted form."""
    return ".".join(str(s) for s in segments)


def join_path(parent: str, segment: Segment) -> str:
    """Append one segment to a path (empty parent means root)."""
    return f"{parent}.{segment}" if parent else str(segment)
