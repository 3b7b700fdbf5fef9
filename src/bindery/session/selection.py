"""Selection state: which durable ids the operator has selected.

Selection holds durable ids, never live handles, so it survives despawn and
reload. The most recently selected id is the focused (primary) one.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from bindery.core.identity import DurableId, LiveHandle
from bindery.registry import IdentityRegistry


class SelectionState:
    """Ordered set of selected durable ids."""

    def __init__(self) -> None:
        self._selected: dict[DurableId, None] = {}

    def select_replace(self, durable_id: DurableId) -> None:
        """Select only durable_id."""
        self._selected = {durable_id: None}

    def select_maybe_add(self, durable_id: DurableId, add: bool) -> None:
        """Click semantics: toggle membership when ``add`` (ctrl held), else replace."""
        if not add:
            self.select_replace(durable_id)
        elif durable_id in self._selected:
            del self._selected[durable_id]
        else:
            self._selected[durable_id] = None

    def deselect(self, durable_id: DurableId) -> None:
        self._selected.pop(durable_id, None)

    def clear(self) -> None:
        self._selected.clear()

    def is_selected(self, durable_id: DurableId) -> bool:
        return durable_id in self._selected

    @property
    def primary(self) -> DurableId | None:
        """Focused id: the most recently selected one."""
        return next(reversed(self._selected), None)

    def prune(self, keep: Callable[[DurableId], bool]) -> list[DurableId]:
        """Drop ids for which ``keep`` is false.

        Returns:
            The dropped ids.
        """
        dropped = [d for d in self._selected if not keep(d)]
        for durable_id in dropped:
            del self._selected[durable_id]
        return dropped

    def resolve_handles(self, registry: IdentityRegistry) -> list[LiveHandle]:
        """Live handles of selected ids, skipping orphans."""
        handles = (registry.resolve(d) for d in self._selected)
        return [h for h in handles if h is not None]

    def __iter__(self) -> Iterator[DurableId]:
        return iter(list(self._selected))

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, durable_id: object) -> bool:
        return durable_id in self._selected
