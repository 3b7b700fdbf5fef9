"""Slot-based handle allocation for the local host."""

from __future__ import annotations

from collections import deque

from bindery.core.identity import LiveHandle


class HandleAllocator:
    """Hands out LiveHandles, recycling freed slots under a new generation.

    Releasing a handle bumps its slot's generation, so the released handle and
    any handle later issued for the same slot never compare equal. Freed slots
    are reused oldest first.
    """

    def __init__(self) -> None:
        self._generations: list[int] = []
        self._live: list[bool] = []
        self._free: deque[int] = deque()

    def allocate(self) -> LiveHandle:
        if self._free:
            index = self._free.popleft()
        else:
            index = len(self._generations)
            self._generations.append(0)
            self._live.append(False)
        self._live[index] = True
        return LiveHandle(index=index, generation=self._generations[index])

    def deallocate(self, handle: LiveHandle) -> None:
        """Free handle's slot.

        Raises:
            ValueError: If handle is not currently live in this allocator.
        """
        if not self.is_alive(handle):
            raise ValueError(f"Cannot deallocate stale or foreign handle {handle}")
        self._live[handle.index] = False
        self._generations[handle.index] += 1
        self._free.append(handle.index)

    def is_alive(self, handle: LiveHandle) -> bool:
        index = handle.index
        return (
            0 <= index < len(self._generations)
            and self._live[index]
            and self._generations[index] == handle.generation
        )
