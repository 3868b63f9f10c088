"""
Renderer and Sonifier Boundaries
Interfaces for the pixel and audio collaborators, plus a numpy renderer
"""

import numpy as np
from typing import Any, Protocol

from .analyzer import sonification_metrics
from .grid import Grid
from .universe import Universe


ALIVE_VALUE = 255
DEAD_VALUE = 0


class Renderer(Protocol):
    """Turns a grid snapshot into a pixel buffer."""

    def __call__(self, grid: Grid, cell_size_px: int) -> Any:
        ...


class Sonifier(Protocol):
    """Turns density and population change into an audio event."""

    def __call__(self, density: float, population_delta: int) -> Any:
        ...


def render_grid(grid: Grid, cell_size_px: int = 1) -> np.ndarray:
    """
    Reference renderer: one square block of pixels per cell.

    Args:
        grid: Grid to draw
        cell_size_px: Side length of a cell in pixels

    Returns:
        uint8 array of shape (height * cell_size_px, width * cell_size_px)
    """
    if cell_size_px < 1:
        raise ValueError(f"cell_size_px must be at least 1, got {cell_size_px}")

    pixels = np.where(grid.cells, ALIVE_VALUE, DEAD_VALUE).astype(np.uint8)
    block = np.ones((cell_size_px, cell_size_px), dtype=np.uint8)
    return np.kron(pixels, block)


def render_universe(universe: Universe, renderer: Renderer = render_grid, cell_size_px: int = 1) -> Any:
    """Hand a snapshot of a universe's live grid to a renderer."""
    return renderer(universe.snapshot(), cell_size_px)


def sonify(universe: Universe, sonifier: Sonifier) -> Any:
    """Hand a universe's density and population change to a sonifier."""
    metrics = sonification_metrics(universe)
    return sonifier(metrics.density, metrics.population_delta)
