"""Persisted graph models and load/save reports.

The on-disk form is indented JSON with sorted keys so saved graphs diff
cleanly under version control:

    {
      "entries": [
        {
          "fields": {"intensity": 2.0},
          "id": "1b4e28ba-2fa1-11d2-883f-0016d3cca427",
          "type": "Light",
          "type_id": "..."
        }
      ],
      "format": "bindery.graph",
      "version": 1
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bindery.core.errors import DecodeError
from bindery.core.identity import DurableId

GRAPH_FORMAT = "bindery.graph"
GRAPH_VERSION = 1


class PersistedEntry(BaseModel):
    """One persisted object: durable id, type and encoded field values."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., description="Durable id in canonical UUID form.")
    type: str = Field(..., description="Catalog type tag.")
    type_id: str | None = Field(default=None, description="Stable type UUID.")
    fields: dict[str, Any] = Field(default_factory=dict)


class PersistedGraph(BaseModel):
    """Serializable snapshot of every persisted durable id."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    format: Literal["bindery.graph"] = GRAPH_FORMAT
    version: int = GRAPH_VERSION
    entries: tuple[PersistedEntry, ...] = ()

    def to_json(self, indent: int = 2) -> str:
        """Encode as stable, human-diffable JSON."""
        return json.dumps(self.model_dump(mode="json"), indent=indent, sort_keys=True) + "\n"

    @classmethod
    def from_json(cls, text: str) -> PersistedGraph:
        """Decode a graph file.

        Raises:
            DecodeError: If the text is not a supported graph document.
        """
        try:
            graph = cls.model_validate_json(text)
        except ValidationError as e:
            raise DecodeError(f"Malformed graph document: {e}") from e
        if graph.version > GRAPH_VERSION:
            raise DecodeError(
                f"Graph version {graph.version} is newer than supported version {GRAPH_VERSION}"
            )
        return graph

    def ids(self) -> list[str]:
        return [entry.id for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class LoadFailure:
    """A persisted entry that was skipped during load."""

    entry_id: str
    type_tag: str
    reason: str


@dataclass(slots=True)
class LoadReport:
    """Outcome of a load: which ids were rebound and which entries failed.

    Attributes:
        loaded: Ids rebound to fresh live objects, in file order.
        failures: Entries skipped, with the reason.
        error: Set when the whole load failed (I/O or malformed document).
    """

    loaded: list[DurableId] = field(default_factory=list)
    failures: list[LoadFailure] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failures


@dataclass(frozen=True, slots=True)
class SaveReport:
    """Outcome of writing a graph file."""

    path: str
    entries: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
