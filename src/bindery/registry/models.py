"""Identity registry models."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from typing_extensions import TypeAliasType

from bindery.core.identity import DurableId

ReferenceSource = TypeAliasType("ReferenceSource", Callable[[DurableId], bool])
"""Callable reporting whether something still references a durable id."""


@dataclass(frozen=True, slots=True)
class OrphanRecord:
    """A durable id that currently has no live binding.

    Attributes:
        durable_id: The orphaned id.
        orphaned_at: Registry clock reading when the binding was dropped.
    """

    durable_id: DurableId
    orphaned_at: float

    def age(self, now: float) -> float:
        """Seconds spent orphaned as of ``now``."""
        return now - self.orphaned_at
