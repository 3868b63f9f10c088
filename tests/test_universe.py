"""
Tests for Universe evolution and time travel
"""

import pytest
import numpy as np
from datetime import timezone
from src.multiverse.errors import OutOfRange
from src.multiverse.grid import Grid
from src.multiverse.patterns import place
from src.multiverse.rules import RuleSet, CONWAY, PRESETS
from src.multiverse.universe import Universe, UniverseState


def _glider_universe(size: int = 12, capacity: int = 1000) -> Universe:
    return Universe(place(Grid(size, size), 'glider', 1, 1), rules=CONWAY,
                    name="glider", history_capacity=capacity)


def test_universe_initialization():
    """A new universe is seeded at generation 0 with empty history."""
    seed = place(Grid(8, 8), 'blinker', 2, 2)
    universe = Universe(seed)

    assert universe.state == UniverseState.SEEDED
    assert universe.generation == 0
    assert len(universe.history) == 0
    assert universe.grid == seed
    assert universe.grid is not seed
    assert universe.rules == CONWAY
    assert universe.parent_id is None
    assert universe.metadata.created_at.tzinfo == timezone.utc
    assert universe.name.startswith("Universe ")


def test_universe_ids_are_unique():
    """Every universe gets its own id."""
    ids = {Universe(Grid(3, 3)).id for _ in range(20)}

    assert len(ids) == 20


def test_advance_records_previous_generation():
    """advance stores the live grid at the current index then steps."""
    universe = _glider_universe()
    seed = universe.snapshot()

    universe.advance()

    assert universe.state == UniverseState.RUNNING
    assert universe.generation == 1
    assert len(universe.history) == 1
    assert universe.history.get(0) == seed
    assert universe.grid != seed


def test_generation_counter_tracks_ledger():
    """The ledger always ends right before the live generation."""
    universe = _glider_universe(capacity=4)

    for _ in range(10):
        universe.advance()
        assert universe.history.next_generation == universe.generation
        assert universe.grid_at(universe.generation - 1) == universe.history.get(universe.generation - 1)


def test_grid_at_current_generation_is_live_grid():
    """grid_at for the current generation returns a copy of the live grid."""
    universe = _glider_universe()
    universe.advance_many(3)

    current = universe.grid_at(3)
    current.clear()

    assert current != universe.grid
    assert universe.grid.population == 5


def test_jump_to_rewinds_and_truncates():
    """Rewinding discards the future so history stays linear."""
    universe = _glider_universe()
    universe.advance_many(6)
    recorded = universe.history.get(2)

    universe.jump_to(2)

    assert universe.generation == 2
    assert universe.grid == recorded
    assert len(universe.history) == 2
    assert universe.history.newest_generation == 1

    with pytest.raises(OutOfRange):
        universe.history.get(4)

    # Re-advancing reproduces the same deterministic future
    universe.advance_many(2)
    assert universe.generation == 4
    assert universe.history.get(2) == recorded


def test_jump_to_numpy_generation():
    """Generations coming from numpy arrays work like plain ints."""
    universe = _glider_universe()
    universe.advance_many(5)
    recorded = universe.history.get(2)

    universe.jump_to(np.int64(2))

    assert universe.generation == 2
    assert type(universe.generation) is int
    assert universe.grid == recorded
    assert universe.grid_at(np.int64(1)) == universe.history.get(1)


def test_jump_to_current_generation_is_noop():
    """Jumping to the live generation changes nothing."""
    universe = _glider_universe()
    universe.advance_many(3)
    before = universe.snapshot()

    universe.jump_to(3)

    assert universe.generation == 3
    assert universe.grid == before
    assert len(universe.history) == 3


def test_jump_to_future_fails_without_change():
    """Jumping forward is out of range and leaves state untouched."""
    universe = _glider_universe()
    universe.advance_many(3)
    before = universe.snapshot()

    with pytest.raises(OutOfRange):
        universe.jump_to(5)

    assert universe.generation == 3
    assert universe.grid == before
    assert len(universe.history) == 3


def test_jump_to_evicted_generation_fails():
    """Generations older than the retained window cannot be reached."""
    universe = _glider_universe(capacity=3)
    universe.advance_many(6)

    assert universe.oldest_retained_generation == 3

    with pytest.raises(OutOfRange):
        universe.jump_to(1)

    assert universe.generation == 6
    universe.jump_to(3)
    assert universe.generation == 3


def test_rewind_to_zero_returns_to_seeded():
    """Rewinding all the way to the seed is the seeded state again."""
    universe = _glider_universe()
    seed = universe.snapshot()
    universe.advance_many(4)

    universe.jump_to(0)

    assert universe.state == UniverseState.SEEDED
    assert universe.grid == seed


def test_set_rules_applies_to_next_advance_only():
    """Changing rules never rewrites history."""
    universe = Universe(place(Grid(6, 6), 'block', 2, 2))
    universe.advance()
    block = universe.snapshot()

    universe.set_rules(RuleSet(birth=[], survival=[]))

    assert universe.grid == block
    universe.advance()

    assert universe.grid.population == 0
    assert universe.history.get(0) == block
    assert universe.history.get(1) == block


def test_set_rules_type_checked():
    """Only RuleSet instances are accepted."""
    universe = Universe(Grid(3, 3))

    with pytest.raises(TypeError):
        universe.set_rules("B3/S23")


def test_evolve_rules():
    """Rule evolution swaps in a mutated rule set."""
    universe = Universe(Grid(4, 4))

    new_rules = universe.evolve_rules(rng=np.random.default_rng(5))

    assert new_rules != CONWAY
    assert universe.rules is new_rules


def test_live_edits_do_not_touch_history():
    """Drawing on the live grid leaves recorded snapshots alone."""
    universe = _glider_universe()
    universe.advance()
    recorded = universe.history.get(0)

    universe.toggle_cell(8, 8)
    universe.grid.set_cell(9, 9)
    universe.clear()

    assert universe.history.get(0) == recorded
    assert universe.grid.population == 0


def test_randomize_keeps_dimensions():
    """Randomizing reseeds the live grid only."""
    universe = Universe(Grid(7, 5))
    universe.randomize(density=1.0)

    assert universe.grid.shape == (5, 7)
    assert universe.grid.population == 35
    assert len(universe.history) == 0


def test_recent_window():
    """recent_window ends with the live grid."""
    universe = Universe(place(Grid(10, 10), 'blinker', 3, 3), rules=PRESETS['highlife'])

    assert len(universe.recent_window(5)) == 1

    universe.advance_many(7)
    window = universe.recent_window(5)

    assert len(window) == 5
    assert window[-1] == universe.grid
    assert window[0] == universe.history.get(3)
    assert universe.recent_window(0) == []


if __name__ == "__main__":
    pytest.main([__file__])
