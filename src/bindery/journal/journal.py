"""Change journal: undo/redo over durable ids and field paths.

Usage:
    journal = ChangeJournal()
    binding = ReflectionBinding(catalog, registry, host, journal=journal)

    binding.apply(light_id, "intensity", 2.0)   # recorded
    journal.undo()                              # intensity back to 1.0
    journal.redo()                              # intensity 2.0 again
"""

from __future__ import annotations

import copy as cp
import logging
from typing import Any, Protocol

from bindery.core.errors import EmptyHistoryError, NoRedoAvailableError
from bindery.core.identity import DurableId
from bindery.journal.models import JournalEntry

logger = logging.getLogger(__name__)


class Applier(Protocol):
    """Anything that can write a value by durable id and path."""

    def apply(self, durable_id: DurableId, path: str, value: Any, *, replay: bool = False) -> None:
        ...


class ChangeJournal:
    """Ordered edit history with a movable tip.

    Entries before the tip are undoable, entries at or after it redoable.
    Recording while the tip is not at the end discards the redo tail.
    Undo and redo replay through the attached applier with ``replay=True``,
    so they never record new entries.

    Args:
        limit: Maximum number of entries kept; the oldest are dropped first.
    """

    def __init__(self, limit: int | None = None):
        """Initialize empty journal.

        Args:
            limit: Maximum number of entries kept (None for unbounded).
        """
        if limit is not None and limit < 1:
            raise ValueError(f"Journal limit must be positive, got {limit}")
        self._limit = limit
        self._entries: list[JournalEntry] = []
        self._tip = 0
        self._clock = 0
        self._saved_at: int | None = 0
        self._applier: Applier | None = None

    def attach(self, applier: Applier) -> None:
        """Set the applier used by undo and redo."""
        self._applier = applier

    # Recording

    def record(self, entry: JournalEntry) -> None:
        """Append an entry at the tip, discarding any redo tail.

        Args:
            entry: Entry to append.
        """
        if self._tip < len(self._entries):
            discarded = len(self._entries) - self._tip
            del self._entries[self._tip :]
            if self._saved_at is not None and self._saved_at > self._tip:
                self._saved_at = None
            logger.debug("discarded %d redo entries", discarded)

        self._entries.append(entry)
        self._tip = len(self._entries)
        self._clock = max(self._clock, entry.timestamp)

        if self._limit is not None and len(self._entries) > self._limit:
            overflow = len(self._entries) - self._limit
            del self._entries[:overflow]
            self._tip -= overflow
            if self._saved_at is not None:
                self._saved_at = self._saved_at - overflow if self._saved_at >= overflow else None

    def record_change(
        self, durable_id: DurableId, path: str, previous: Any, new: Any
    ) -> JournalEntry:
        """Stamp and record an edit.

        Returns:
            The recorded entry.
        """
        self._clock += 1
        entry = JournalEntry(
            durable_id=durable_id,
            path=path,
            previous=previous,
            new=new,
            timestamp=self._clock,
        )
        self.record(entry)
        return entry

    # Navigation

    def undo(self) -> JournalEntry:
        """Restore the previous value of the entry just before the tip.

        Returns:
            The undone entry.

        Raises:
            EmptyHistoryError: If there is nothing to undo.
            ApplyError: If the target cannot be written; the tip does not move.
        """
        if self._tip == 0:
            raise EmptyHistoryError("Nothing to undo")
        entry = self._entries[self._tip - 1]
        self._replay(entry, entry.previous)
        self._tip -= 1
        return entry

    def redo(self) -> JournalEntry:
        """Re-apply the new value of the entry at the tip.

        Returns:
            The redone entry.

        Raises:
            NoRedoAvailableError: If the tip is at the end.
            ApplyError: If the target cannot be written; the tip does not move.
        """
        if self._tip == len(self._entries):
            raise NoRedoAvailableError("Nothing to redo")
        entry = self._entries[self._tip]
        self._replay(entry, entry.new)
        self._tip += 1
        return entry

    def _replay(self, entry: JournalEntry, value: Any) -> None:
        if self._applier is None:
            raise RuntimeError("ChangeJournal has no applier attached")
        self._applier.apply(entry.durable_id, entry.path, cp.deepcopy(value), replay=True)

    # Checkpoints

    def mark_saved(self, tip: int | None = None) -> None:
        """Remember a tip (default: the current one) as the last saved state."""
        self._saved_at = self._tip if tip is None else tip

    @property
    def dirty(self) -> bool:
        """Whether the tip moved away from the last saved checkpoint."""
        return self._saved_at != self._tip

    # Queries

    @property
    def tip(self) -> int:
        return self._tip

    @property
    def can_undo(self) -> bool:
        return self._tip > 0

    @property
    def can_redo(self) -> bool:
        return self._tip < len(self._entries)

    @property
    def entries(self) -> tuple[JournalEntry, ...]:
        return tuple(self._entries)

    def references(self, durable_id: DurableId) -> bool:
        """Check whether any entry (undo or redo side) mentions durable_id."""
        return any(entry.durable_id == durable_id for entry in self._entries)

    def clear(self) -> None:
        """Drop all history, releasing every pinned id."""
        was_dirty = self.dirty
        self._entries.clear()
        self._tip = 0
        self._saved_at = None if was_dirty else 0

    def __len__(self) -> int:
        return len(self._entries)
