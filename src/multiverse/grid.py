"""
Toroidal Grid
Fixed-size boolean cell matrix with wraparound neighbor access
"""

import numpy as np
from scipy import ndimage
from typing import Optional, Tuple


# Moore neighborhood kernel (centre excluded)
MOORE_KERNEL = np.array([[1, 1, 1],
                         [1, 0, 1],
                         [1, 1, 1]], dtype=np.uint8)

MOORE_OFFSETS = [(-1, -1), (0, -1), (1, -1),
                 (-1, 0),           (1, 0),
                 (-1, 1),  (0, 1),  (1, 1)]


class Grid:
    """
    Boolean cell matrix of fixed width and height.

    Cells are stored as a numpy array of shape (height, width) indexed
    ``[y, x]``. Edges wrap: the last row/column neighbours the first.
    Every constructor copies its input, so two Grid objects never share
    a mutable buffer.
    """

    def __init__(self, width: int, height: int):
        """
        Create an all-dead grid.

        Args:
            width: Number of columns (W)
            height: Number of rows (H)
        """
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")

        self._cells = np.zeros((height, width), dtype=bool)

    @classmethod
    def from_array(cls, array) -> "Grid":
        """
        Build a grid from any 2D array-like (truthy = alive).

        Args:
            array: 2D array-like of shape (height, width)

        Returns:
            New Grid holding a private copy of the data
        """
        cells = np.array(array, dtype=bool, copy=True)
        if cells.ndim != 2:
            raise ValueError(f"Grid data must be 2D, got shape {cells.shape}")

        grid = cls(cells.shape[1], cells.shape[0])
        grid._cells = cells
        return grid

    @classmethod
    def random(
        cls,
        width: int,
        height: int,
        density: float = 0.5,
        rng: Optional[np.random.Generator] = None
    ) -> "Grid":
        """
        Build a grid with each cell alive with probability ``density``.

        Args:
            width: Number of columns
            height: Number of rows
            density: Probability that a cell starts alive
            rng: Random generator for reproducibility

        Returns:
            Randomly seeded Grid
        """
        if not 0.0 <= density <= 1.0:
            raise ValueError(f"Density must be in [0, 1], got {density}")

        rng = rng or np.random.default_rng()
        grid = cls(width, height)
        grid._cells = rng.random((height, width)) < density
        return grid

    @property
    def width(self) -> int:
        return self._cells.shape[1]

    @property
    def height(self) -> int:
        return self._cells.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width) of the grid."""
        return self._cells.shape

    @property
    def cells(self) -> np.ndarray:
        """Read-only view of the cell matrix."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    @property
    def population(self) -> int:
        """Number of living cells."""
        return int(np.count_nonzero(self._cells))

    @property
    def density(self) -> float:
        """Fraction of living cells."""
        return self.population / self._cells.size

    def is_alive(self, x: int, y: int) -> bool:
        return bool(self._cells[y % self.height, x % self.width])

    def set_cell(self, x: int, y: int, alive: bool = True):
        """Set a cell state; coordinates wrap toroidally."""
        self._cells[y % self.height, x % self.width] = bool(alive)

    def toggle(self, x: int, y: int) -> bool:
        """Flip a cell and return its new state."""
        y, x = y % self.height, x % self.width
        self._cells[y, x] = not self._cells[y, x]
        return bool(self._cells[y, x])

    def clear(self):
        """Kill every cell."""
        self._cells[:] = False

    def copy(self) -> "Grid":
        """Independent copy of this grid."""
        return Grid.from_array(self._cells)

    def neighbor_count(self, x: int, y: int) -> int:
        """
        Count living cells in the Moore neighborhood of (x, y).

        Args:
            x: Column index, must be in [0, width)
            y: Row index, must be in [0, height)

        Returns:
            Number of living neighbours in [0, 8]
        """
        assert 0 <= x < self.width and 0 <= y < self.height, \
            f"({x}, {y}) outside {self.width}x{self.height} grid"

        count = 0
        for dx, dy in MOORE_OFFSETS:
            # Periodic boundary conditions
            nx = (x + dx + self.width) % self.width
            ny = (y + dy + self.height) % self.height
            count += int(self._cells[ny, nx])

        return count

    def neighbor_counts(self) -> np.ndarray:
        """
        Neighbour counts for every cell at once.

        Returns:
            uint8 array of shape (height, width); entry [y, x] equals
            ``neighbor_count(x, y)``
        """
        return ndimage.convolve(self._cells.astype(np.uint8), MOORE_KERNEL, mode='wrap')

    def tobytes(self) -> bytes:
        """Raw cell bytes, usable as a content key."""
        return self._cells.tobytes()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self._cells, other._cells)

    # Grids are mutable
    __hash__ = None

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, population={self.population})"


def neighbor_count(grid: Grid, x: int, y: int) -> int:
    """Module-level form of :meth:`Grid.neighbor_count`."""
    return grid.neighbor_count(x, y)
