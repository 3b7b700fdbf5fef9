"""Identity models.

Usage:
    durable = DurableId.new()
    handle = LiveHandle(index=42, generation=1)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DurableId:
    """Permanent 128-bit identity of an editable object.

    Minted once per logical object and never reassigned, even after the
    registry forgets it.
    """

    value: uuid.UUID

    @classmethod
    def new(cls) -> DurableId:
        """Mint a fresh random identifier."""
        return cls(uuid.uuid4())

    @classmethod
    def parse(cls, text: str) -> DurableId:
        """Parse the canonical string form.

        Raises:
            ValueError: If text is not a valid UUID.
        """
        return cls(uuid.UUID(text))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class LiveHandle:
    """Host-issued transient handle. Generation distinguishes reuses of one slot."""

    index: int = 0
    generation: int = 0

    def __str__(self) -> str:
        return f"{self.index}v{self.generation}"
