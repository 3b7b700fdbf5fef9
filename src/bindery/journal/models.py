"""Change journal models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bindery.core.identity import DurableId


@dataclass(frozen=True, slots=True)
class JournalEntry:
    """One reversible edit.

    Values are detached copies, so an entry stays valid after the edited
    object is despawned.

    Attributes:
        durable_id: Edited object.
        path: Canonical field path.
        previous: Value before the edit.
        new: Value after the edit.
        timestamp: Logical, strictly increasing sequence number.
    """

    durable_id: DurableId
    path: str
    previous: Any
    new: Any
    timestamp: int
