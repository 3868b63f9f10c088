"""
Tests for the History Ledger
"""

import pytest
import numpy as np
from src.multiverse.errors import OutOfRange
from src.multiverse.grid import Grid
from src.multiverse.history import HistoryLedger


def _grid_with_population(count: int) -> Grid:
    grid = Grid(10, 1)
    for x in range(count):
        grid.set_cell(x, 0)
    return grid


def test_append_assigns_generations():
    """Generations count up from zero."""
    ledger = HistoryLedger(capacity=10)

    assert [ledger.append(_grid_with_population(i)) for i in range(3)] == [0, 1, 2]
    assert len(ledger) == 3
    assert ledger.oldest_retained_generation == 0
    assert ledger.newest_generation == 2


def test_empty_ledger_window():
    """An empty ledger has newest == oldest - 1."""
    ledger = HistoryLedger(capacity=4)

    assert ledger.length == 0
    assert ledger.oldest_retained_generation == 0
    assert ledger.newest_generation == ledger.oldest_retained_generation - 1

    with pytest.raises(OutOfRange):
        ledger.get(0)


def test_snapshots_have_value_semantics():
    """Neither the live grid nor a returned copy can alter a snapshot."""
    ledger = HistoryLedger(capacity=4)
    live = _grid_with_population(2)
    ledger.append(live)

    live.set_cell(9, 0)
    fetched = ledger.get(0)
    fetched.clear()

    assert ledger.get(0).population == 2


def test_capacity_eviction_is_fifo():
    """capacity + k appends keep exactly the newest capacity snapshots."""
    capacity, extra = 5, 3
    ledger = HistoryLedger(capacity=capacity)

    for i in range(capacity + extra):
        ledger.append(_grid_with_population(i))

    assert len(ledger) == capacity
    assert ledger.oldest_retained_generation == extra
    assert ledger.newest_generation == capacity + extra - 1
    assert [ledger.get(g).population for g in ledger.generations()] == list(range(extra, capacity + extra))

    for evicted in range(extra):
        with pytest.raises(OutOfRange):
            ledger.get(evicted)


def test_out_of_range_never_clamps():
    """Generations past either end fail instead of clamping."""
    ledger = HistoryLedger(capacity=3)
    for i in range(3):
        ledger.append(_grid_with_population(i))

    with pytest.raises(OutOfRange) as excinfo:
        ledger.get(3)

    assert excinfo.value.generation == 3
    assert isinstance(excinfo.value, IndexError)

    with pytest.raises(OutOfRange):
        ledger.get(-1)


def test_truncate_from():
    """Truncation drops the tail and later appends reuse its generations."""
    ledger = HistoryLedger(capacity=10)
    for i in range(5):
        ledger.append(_grid_with_population(i))

    assert ledger.truncate_from(2) == 3
    assert ledger.newest_generation == 1

    with pytest.raises(OutOfRange):
        ledger.get(2)

    assert ledger.append(_grid_with_population(7)) == 2
    assert ledger.get(2).population == 7


def test_truncate_after_wraparound():
    """Truncation works once the ring buffer has wrapped."""
    ledger = HistoryLedger(capacity=3)
    for i in range(7):
        ledger.append(_grid_with_population(i))

    ledger.truncate_from(5)
    ledger.append(_grid_with_population(9))

    assert list(ledger.generations()) == [4, 5]
    assert ledger.get(4).population == 4
    assert ledger.get(5).population == 9


def test_truncate_outside_window_fails():
    """Truncating before the retained window is an error."""
    ledger = HistoryLedger(capacity=2)
    for i in range(4):
        ledger.append(_grid_with_population(i))

    with pytest.raises(OutOfRange):
        ledger.truncate_from(1)

    assert len(ledger) == 2


def test_tail():
    """tail returns the newest snapshots oldest first."""
    ledger = HistoryLedger(capacity=4)
    for i in range(6):
        ledger.append(_grid_with_population(i))

    assert [g.population for g in ledger.tail(2)] == [4, 5]
    assert [g.population for g in ledger.tail(10)] == [2, 3, 4, 5]
    assert ledger.tail(0) == []


def test_numpy_integer_generations():
    """numpy integers address the same snapshots as plain ints."""
    ledger = HistoryLedger(capacity=4)
    for i in range(6):
        ledger.append(_grid_with_population(i))

    assert np.int64(3) in ledger
    assert ledger.get(np.int64(3)).population == 3
    assert ledger.get(np.int32(5)).population == 5
    assert True not in ledger
    with pytest.raises(OutOfRange):
        ledger.get(True)

    with pytest.raises(OutOfRange):
        ledger.get(np.int64(1))

    assert ledger.truncate_from(np.int64(4)) == 2
    assert ledger.newest_generation == 3


def test_invalid_capacity():
    """Capacity must be positive."""
    with pytest.raises(ValueError):
        HistoryLedger(capacity=0)


if __name__ == "__main__":
    pytest.main([__file__])
