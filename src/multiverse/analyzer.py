"""
Pattern Analyzer
Symmetry, stability and entropy metrics and the Pattern DNA classifier
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .grid import Grid
from .universe import Universe


# Empirical tuning values, not derived constants
STABILITY_SAMPLE_SIZE = 5
STABILITY_VARIANCE_DIVISOR = 10.0


class PatternClass(Enum):
    """Behavioural classes of a pattern"""
    STILL_LIFE = "StillLife"
    OSCILLATOR = "Oscillator"
    CHAOTIC = "Chaotic"
    SPACESHIP = "Spaceship"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class PatternDNA:
    """Derived description of a universe's recent behaviour (percentages)."""
    symmetry: float
    stability: float
    entropy: float
    classification: PatternClass

    def to_dict(self) -> dict:
        return {
            'symmetry': self.symmetry,
            'stability': self.stability,
            'entropy': self.entropy,
            'classification': self.classification.value
        }


@dataclass(frozen=True)
class AnalysisSettings:
    """Tunable analyzer parameters."""
    window: int = STABILITY_SAMPLE_SIZE
    sample_size: int = STABILITY_SAMPLE_SIZE
    variance_divisor: float = STABILITY_VARIANCE_DIVISOR


@dataclass(frozen=True)
class SonificationMetrics:
    """Inputs handed to a Sonifier."""
    density: float
    population_delta: int


def symmetry(grid: Grid) -> float:
    """
    Top/bottom mirror symmetry.

    Row ``y`` of the top half is compared cell by cell with row
    ``H - 1 - y``; the middle row of an odd-height grid is not compared.

    Args:
        grid: Grid to measure

    Returns:
        Percentage of compared cells that match (100.0 if none compared)
    """
    cells = grid.cells
    half = grid.height // 2
    if half == 0:
        return 100.0

    top = cells[:half]
    mirrored_bottom = np.flipud(cells)[:half]
    return float(np.mean(top == mirrored_bottom) * 100.0)


def stability(
    history: Sequence[Grid],
    sample_size: int = STABILITY_SAMPLE_SIZE,
    variance_divisor: float = STABILITY_VARIANCE_DIVISOR
) -> float:
    """
    Population stability over the last ``sample_size`` generations.

    Args:
        history: Grids in generation order (oldest first)
        sample_size: Number of trailing generations sampled
        variance_divisor: Normalization applied to the population variance

    Returns:
        ``max(0, 100 - variance / variance_divisor)``, or 100.0 when fewer
        than ``sample_size`` grids are available
    """
    if len(history) < sample_size:
        return 100.0

    populations = np.array([grid.population for grid in history[-sample_size:]], dtype=float)
    variance = float(np.var(populations))

    return max(0.0, 100.0 - variance / variance_divisor)


def entropy(grid: Grid) -> float:
    """
    Edge density of the pattern.

    Every cell except those in the last row and column counts as an edge
    when it differs from its right or its bottom neighbour.

    Args:
        grid: Grid to measure

    Returns:
        Percentage of compared cells that are edges (0.0 if none compared)
    """
    cells = grid.cells
    if grid.height < 2 or grid.width < 2:
        return 0.0

    inner = cells[:-1, :-1]
    differs_right = inner != cells[:-1, 1:]
    differs_below = inner != cells[1:, :-1]
    edges = differs_right | differs_below

    return float(np.mean(edges) * 100.0)


def classify(symmetry: float, stability: float, entropy: float) -> PatternClass:
    """
    Map metrics to a pattern class; the first matching rule wins.

    Args:
        symmetry: Symmetry percentage
        stability: Stability percentage
        entropy: Entropy percentage

    Returns:
        PatternClass
    """
    if stability > 80:
        return PatternClass.STILL_LIFE
    if stability > 60 and symmetry > 60:
        return PatternClass.OSCILLATOR
    if stability < 40 and entropy > 60:
        return PatternClass.CHAOTIC
    if stability > 50 and entropy < 40:
        return PatternClass.SPACESHIP
    return PatternClass.UNKNOWN


def analyze_window(history: Sequence[Grid], settings: AnalysisSettings = AnalysisSettings()) -> PatternDNA:
    """
    Compute Pattern DNA from a window of grids (latest last).

    Args:
        history: Non-empty sequence of grids, oldest first
        settings: Analyzer parameters

    Returns:
        PatternDNA of the window
    """
    if len(history) == 0:
        raise ValueError("Cannot analyze an empty history window")

    latest = history[-1]
    sym = symmetry(latest)
    stab = stability(history, sample_size=settings.sample_size,
                     variance_divisor=settings.variance_divisor)
    ent = entropy(latest)

    return PatternDNA(
        symmetry=sym,
        stability=stab,
        entropy=ent,
        classification=classify(sym, stab, ent)
    )


def analyze(universe: Universe, settings: AnalysisSettings = AnalysisSettings()) -> PatternDNA:
    """
    Compute Pattern DNA for a universe's recent history.

    Args:
        universe: Universe to analyze
        settings: Analyzer parameters

    Returns:
        PatternDNA over the last ``settings.window`` generations
    """
    window = max(settings.window, 1)
    return analyze_window(universe.recent_window(window), settings)


def sonification_metrics(universe: Universe) -> SonificationMetrics:
    """
    Density and population change handed to a Sonifier.

    Args:
        universe: Universe to measure

    Returns:
        ``density = living / (W * H)`` and
        ``population_delta = |living_t - living_{t-1}|`` (0 at the first
        retained generation)
    """
    recent = universe.recent_window(2)
    current = recent[-1].population
    previous = recent[0].population if len(recent) == 2 else current

    return SonificationMetrics(
        density=current / (universe.width * universe.height),
        population_delta=abs(current - previous)
    )
