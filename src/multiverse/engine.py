"""
Transition Engine
Synchronous generation update for life-like rules on a toroidal grid
"""

import numpy as np
from scipy import ndimage
from typing import Dict, Iterator, Tuple

from .grid import Grid, MOORE_KERNEL
from .rules import RuleSet


def step(grid: Grid, rules: RuleSet) -> Grid:
    """
    Compute the next generation.

    Every cell is evaluated against the pre-transition grid: a live cell
    stays alive iff its neighbour count is in ``rules.survival``, a dead
    cell becomes alive iff its count is in ``rules.birth``.

    Args:
        grid: Current generation (not modified)
        rules: Birth/survival rule

    Returns:
        New Grid of the same dimensions
    """
    counts = grid.neighbor_counts()
    alive = grid.cells
    next_cells = np.where(alive, rules.survival_table[counts], rules.birth_table[counts])
    return Grid.from_array(next_cells)


class TransitionEngine:
    """
    Double-buffered stepper.

    Keeps one pair of scratch arrays per grid shape so repeated steps do
    not reallocate the intermediate count buffers. Output grids are always
    fresh objects, so results are identical to :func:`step`.
    """

    def __init__(self):
        self._buffers: Dict[Tuple[int, int], Tuple[np.ndarray, np.ndarray]] = {}

    def _scratch(self, shape: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
        if shape not in self._buffers:
            self._buffers[shape] = (np.empty(shape, dtype=np.uint8),
                                    np.empty(shape, dtype=np.uint8))
        return self._buffers[shape]

    def step(self, grid: Grid, rules: RuleSet) -> Grid:
        """
        Compute the next generation using the scratch buffers.

        Args:
            grid: Current generation (not modified)
            rules: Birth/survival rule

        Returns:
            New Grid of the same dimensions
        """
        front, back = self._scratch(grid.shape)
        alive = grid.cells

        np.copyto(front, alive)
        ndimage.convolve(front, MOORE_KERNEL, output=back, mode='wrap')

        next_cells = np.where(alive, rules.survival_table[back], rules.birth_table[back])
        return Grid.from_array(next_cells)

    def run(self, grid: Grid, rules: RuleSet, steps: int) -> Iterator[Grid]:
        """
        Yield successive generations after ``grid``.

        Args:
            grid: Starting generation
            rules: Birth/survival rule
            steps: Number of generations to produce

        Yields:
            Each new generation in order
        """
        current = grid
        for _ in range(steps):
            current = self.step(current, rules)
            yield current

    def clear(self):
        """Drop all scratch buffers."""
        self._buffers.clear()
