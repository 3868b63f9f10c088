"""
Tests for the Pattern Analyzer
"""

import pytest
import numpy as np
from src.multiverse.analyzer import (
    PatternClass,
    AnalysisSettings,
    symmetry,
    stability,
    entropy,
    classify,
    analyze,
    analyze_window,
    sonification_metrics
)
from src.multiverse.grid import Grid
from src.multiverse.patterns import place
from src.multiverse.universe import Universe


def _grid_with_population(count: int) -> Grid:
    """10x10 grid with ``count`` living cells."""
    cells = np.zeros(100, dtype=bool)
    cells[:count] = True
    return Grid.from_array(cells.reshape(10, 10))


def test_symmetry():
    """Top rows are compared with mirrored bottom rows."""
    assert symmetry(Grid(4, 4)) == 100.0

    grid = Grid(4, 4)
    for x in range(4):
        grid.set_cell(x, 0)

    # Row 0 vs row 3 differs, row 1 vs row 2 matches
    assert symmetry(grid) == pytest.approx(50.0)

    for x in range(4):
        grid.set_cell(x, 3)
    assert symmetry(grid) == pytest.approx(100.0)


def test_symmetry_ignores_middle_row():
    """The middle row of an odd-height grid is not compared."""
    grid = Grid(3, 3)
    grid.set_cell(1, 1)

    assert symmetry(grid) == 100.0
    assert symmetry(Grid(5, 1)) == 100.0


def test_stability_default_with_few_samples():
    """Fewer than five samples yields the 100% default."""
    history = [_grid_with_population(n) for n in (0, 50, 100, 20)]

    assert stability(history) == 100.0
    assert stability([]) == 100.0


def test_stability_from_population_variance():
    """Stability is 100 - variance / 10, floored at zero."""
    steady = [_grid_with_population(7) for _ in range(5)]
    assert stability(steady) == 100.0

    # Populations 0,10,0,10,0 have variance 24
    wobbling = [_grid_with_population(n) for n in (0, 10, 0, 10, 0)]
    assert stability(wobbling) == pytest.approx(97.6)

    # Variance 2400 would go negative
    wild = [_grid_with_population(n) for n in (0, 100, 0, 100, 0)]
    assert stability(wild) == 0.0


def test_stability_uses_last_five_samples():
    """Only the trailing five generations count."""
    history = [_grid_with_population(n) for n in (100, 0, 5, 5, 5, 5, 5)]

    assert stability(history) == 100.0


def test_stability_divisor_is_tunable():
    """The variance normalization is a parameter."""
    wobbling = [_grid_with_population(n) for n in (0, 10, 0, 10, 0)]

    assert stability(wobbling, variance_divisor=1.0) == pytest.approx(76.0)


def test_entropy():
    """Edges are cells differing from the right or bottom neighbour."""
    assert entropy(Grid(5, 5)) == 0.0
    assert entropy(Grid.from_array(np.ones((4, 4)))) == 0.0

    checkerboard = Grid.from_array(np.indices((4, 4)).sum(axis=0) % 2)
    assert entropy(checkerboard) == pytest.approx(100.0)

    single = Grid(3, 3)
    single.set_cell(0, 0)
    assert entropy(single) == pytest.approx(25.0)

    assert entropy(Grid(6, 1)) == 0.0


@pytest.mark.parametrize("sym, stab, ent, expected", [
    (0, 81, 0, PatternClass.STILL_LIFE),
    (100, 81, 100, PatternClass.STILL_LIFE),
    (100, 80, 0, PatternClass.OSCILLATOR),
    (0, 80, 0, PatternClass.SPACESHIP),
    (0, 80, 50, PatternClass.UNKNOWN),
    (61, 61, 50, PatternClass.OSCILLATOR),
    (60, 61, 50, PatternClass.UNKNOWN),
    (0, 39, 61, PatternClass.CHAOTIC),
    (0, 40, 61, PatternClass.UNKNOWN),
    (0, 51, 39, PatternClass.SPACESHIP),
    (0, 50, 39, PatternClass.UNKNOWN),
    (90, 30, 10, PatternClass.UNKNOWN),
])
def test_classify_decision_order(sym, stab, ent, expected):
    """Rules are strict and checked in order."""
    assert classify(sym, stab, ent) == expected


def test_analyze_still_life():
    """A block settles as a still life."""
    universe = Universe(place(Grid(10, 10), 'block', 4, 4))
    universe.advance_many(6)

    dna = analyze(universe)

    assert dna.stability == 100.0
    assert dna.classification == PatternClass.STILL_LIFE
    assert dna.to_dict()['classification'] == "StillLife"


def test_analyze_seeded_universe_uses_default_stability():
    """A fresh universe has too few samples and defaults to 100%."""
    universe = Universe(Grid.random(12, 12, rng=np.random.default_rng(0)))

    dna = analyze(universe)

    assert dna.stability == 100.0
    assert dna.symmetry == symmetry(universe.grid)
    assert dna.entropy == entropy(universe.grid)


def test_analyze_settings():
    """Analyzer parameters come from settings."""
    history = [_grid_with_population(n) for n in (0, 10, 0, 10, 0)]

    dna = analyze_window(history, AnalysisSettings(variance_divisor=1.0))
    assert dna.stability == pytest.approx(76.0)

    with pytest.raises(ValueError):
        analyze_window([])


def test_sonification_metrics():
    """Density and population change come from the last two generations."""
    lonely = Grid(5, 5)
    lonely.set_cell(2, 2)
    universe = Universe(lonely)

    metrics = sonification_metrics(universe)
    assert metrics.density == pytest.approx(1 / 25)
    assert metrics.population_delta == 0

    universe.advance()
    metrics = sonification_metrics(universe)
    assert metrics.density == 0.0
    assert metrics.population_delta == 1


if __name__ == "__main__":
    pytest.main([__file__])
