"""
History Ledger
Capacity-bounded FIFO of grid snapshots indexed by generation
"""

import logging
import operator
import numpy as np
from typing import List, Optional

from .errors import OutOfRange
from .grid import Grid

logger = logging.getLogger(__name__)


DEFAULT_CAPACITY = 1000


def generation_index(generation) -> Optional[int]:
    """
    Normalize a generation number to a plain int.

    Python and numpy integers are accepted; anything else (bools included)
    gives None.
    """
    if isinstance(generation, (bool, np.bool_)) or not isinstance(generation, (int, np.integer)):
        return None
    return operator.index(generation)


class HistoryLedger:
    """
    Ring buffer of grid snapshots.

    Snapshots keep their absolute generation numbers. When the buffer is
    full, appending evicts the oldest snapshot in O(1), so the retained
    generations always form one contiguous range
    ``[oldest_retained_generation, newest_generation]``.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize an empty ledger.

        Args:
            capacity: Maximum number of retained snapshots
        """
        if capacity < 1:
            raise ValueError(f"Ledger capacity must be at least 1, got {capacity}")

        self.capacity = capacity
        self._slots: List[Optional[Grid]] = [None] * capacity
        self._head = 0  # slot of the oldest snapshot
        self._length = 0
        self._base = 0  # generation of the oldest snapshot

    def __len__(self) -> int:
        return self._length

    @property
    def length(self) -> int:
        return self._length

    @property
    def oldest_retained_generation(self) -> int:
        """Generation of the oldest snapshot (next append's generation when empty)."""
        return self._base

    @property
    def newest_generation(self) -> int:
        """Generation of the newest snapshot (``oldest - 1`` when empty)."""
        return self._base + self._length - 1

    @property
    def next_generation(self) -> int:
        """Generation number the next append will receive."""
        return self._base + self._length

    def _slot(self, generation: int) -> int:
        return (self._head + generation - self._base) % self.capacity

    def __contains__(self, generation) -> bool:
        index = generation_index(generation)
        return index is not None and self._base <= index <= self.newest_generation

    def append(self, grid: Grid) -> int:
        """
        Store an independent snapshot of ``grid``.

        Args:
            grid: Grid to record (copied)

        Returns:
            Generation number assigned to the snapshot
        """
        snapshot = grid.copy()

        if self._length == self.capacity:
            logger.debug(f"Ledger full, evicting generation {self._base}")
            self._slots[self._head] = None
            self._head = (self._head + 1) % self.capacity
            self._base += 1
            self._length -= 1

        generation = self.next_generation
        self._slots[self._slot(generation)] = snapshot
        self._length += 1

        return generation

    def get(self, generation: int) -> Grid:
        """
        Retrieve the snapshot recorded for ``generation``.

        Args:
            generation: Absolute generation number

        Returns:
            Independent copy of the stored grid
        """
        if generation not in self:
            raise OutOfRange(generation, self._base, self.newest_generation)

        return self._slots[self._slot(operator.index(generation))].copy()

    def tail(self, count: int) -> List[Grid]:
        """
        Most recent snapshots, oldest first.

        Args:
            count: Maximum number of snapshots to return

        Returns:
            List of independent grid copies
        """
        count = max(0, min(count, self._length))
        start = self.next_generation - count
        return [self.get(generation) for generation in range(start, self.next_generation)]

    def truncate_from(self, generation: int) -> int:
        """
        Discard every snapshot with generation >= ``generation``.

        Args:
            generation: First generation to drop; must lie in
                ``[oldest_retained_generation, next_generation]``

        Returns:
            Number of snapshots discarded
        """
        index = generation_index(generation)
        if index is None or not self._base <= index <= self.next_generation:
            raise OutOfRange(generation, self._base, self.newest_generation)
        generation = index

        dropped = self.next_generation - generation
        for gen in range(generation, self.next_generation):
            self._slots[self._slot(gen)] = None
        self._length -= dropped

        if dropped:
            logger.debug(f"Ledger truncated {dropped} snapshot(s) from generation {generation}")

        return dropped

    def generations(self) -> range:
        """Range of retained generation numbers."""
        return range(self._base, self.next_generation)

    def __repr__(self) -> str:
        return (f"HistoryLedger(capacity={self.capacity}, "
                f"retained={self._base}..{self.newest_generation})")
