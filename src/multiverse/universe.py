"""
Universe
Live grid, rule set and time-travel history of one simulated world
"""

import logging
import uuid
import numpy as np
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from .engine import TransitionEngine
from .grid import Grid
from .history import HistoryLedger, DEFAULT_CAPACITY, generation_index
from .rules import RuleSet, CONWAY

logger = logging.getLogger(__name__)


class UniverseState(Enum):
    """Lifecycle states of a universe"""
    SEEDED = "seeded"  # generation 0, nothing recorded yet
    RUNNING = "running"


@dataclass
class UniverseMetadata:
    """Descriptive data attached to a universe."""
    name: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    parent_id: Optional[str] = None
    forked_at: Optional[int] = None


class Universe:
    """
    One independent world in the multiverse.

    The live grid is generation ``generation``; the ledger holds every
    retained earlier generation, so it always covers
    ``[oldest_retained_generation, generation - 1]``.

    Time travel rewinds: :meth:`jump_to` discards the recorded future
    beyond the target generation, keeping history linear. Divergent
    exploration is done by forking a new universe from the registry.
    """

    def __init__(
        self,
        grid: Grid,
        rules: RuleSet = CONWAY,
        name: Optional[str] = None,
        universe_id: Optional[str] = None,
        history_capacity: int = DEFAULT_CAPACITY,
        parent_id: Optional[str] = None,
        forked_at: Optional[int] = None,
        engine: Optional[TransitionEngine] = None
    ):
        """
        Create a universe in the seeded state.

        Args:
            grid: Seed grid (copied)
            rules: Birth/survival rule
            name: Display name
            universe_id: Identity; a random one is generated if omitted
            history_capacity: Maximum number of retained snapshots
            parent_id: Id of the universe this one was forked from
            forked_at: Generation of the parent this one was forked at
            engine: Stepper to use (a private one is created if omitted)
        """
        if not isinstance(rules, RuleSet):
            raise TypeError(f"rules must be a RuleSet, got {type(rules).__name__}")

        self.id = universe_id or uuid.uuid4().hex
        self.metadata = UniverseMetadata(
            name=name or f"Universe {self.id[:8]}",
            parent_id=parent_id,
            forked_at=forked_at
        )
        self._grid = grid.copy()
        self._rules = rules
        self._ledger = HistoryLedger(capacity=history_capacity)
        self._generation = 0
        self._engine = engine or TransitionEngine()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.metadata.name

    @name.setter
    def name(self, value: str):
        self.metadata.name = value

    @property
    def parent_id(self) -> Optional[str]:
        return self.metadata.parent_id

    @property
    def grid(self) -> Grid:
        """The live grid (owned by this universe; never stored in history)."""
        return self._grid

    @property
    def rules(self) -> RuleSet:
        return self._rules

    @property
    def history(self) -> HistoryLedger:
        return self._ledger

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> UniverseState:
        if self._generation == 0 and len(self._ledger) == 0:
            return UniverseState.SEEDED
        return UniverseState.RUNNING

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    @property
    def oldest_retained_generation(self) -> int:
        """Earliest generation that :meth:`jump_to` can reach."""
        if len(self._ledger) == 0:
            return self._generation
        return self._ledger.oldest_retained_generation

    def snapshot(self) -> Grid:
        """Independent copy of the live grid."""
        return self._grid.copy()

    def grid_at(self, generation: int) -> Grid:
        """
        Copy of the grid at ``generation``.

        Args:
            generation: Current generation or any retained one

        Returns:
            Independent Grid copy
        """
        if generation_index(generation) == self._generation:
            return self._grid.copy()
        return self._ledger.get(generation)

    def recent_window(self, count: int) -> List[Grid]:
        """
        Up to ``count`` most recent grids ending with the live grid.

        Args:
            count: Window size

        Returns:
            Grid copies, oldest first
        """
        if count < 1:
            return []
        return self._ledger.tail(count - 1) + [self._grid.copy()]

    # ------------------------------------------------------------------
    # Evolution
    # ------------------------------------------------------------------

    def advance(self) -> Grid:
        """
        Move forward one generation.

        Records the live grid at the current generation, replaces it with
        the next generation under the current rules and increments the
        counter.

        Returns:
            The new live grid
        """
        next_grid = self._engine.step(self._grid, self._rules)

        # Ledger append and counter increment go together
        recorded = self._ledger.append(self._grid)
        self._grid = next_grid
        self._generation += 1
        assert recorded == self._generation - 1

        return self._grid

    def advance_many(self, steps: int) -> Grid:
        """Advance ``steps`` generations and return the live grid."""
        for _ in range(steps):
            self.advance()
        return self._grid

    def jump_to(self, generation: int) -> Grid:
        """
        Rewind to a retained generation.

        The recorded future after ``generation`` is discarded, so the next
        :meth:`advance` continues a single linear history.

        Args:
            generation: Target generation (retained and not in the future)

        Returns:
            The new live grid
        """
        if generation_index(generation) == self._generation:
            return self._grid

        # Raises OutOfRange before anything is touched
        restored = self._ledger.get(generation)
        generation = generation_index(generation)

        dropped = self._ledger.truncate_from(generation)
        self._grid = restored
        self._generation = generation

        logger.debug(f"Universe {self.id[:8]} rewound to generation {generation} "
                     f"({dropped} snapshot(s) discarded)")

        return self._grid

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def set_rules(self, rules: RuleSet):
        """Replace the rule set; takes effect on the next advance."""
        if not isinstance(rules, RuleSet):
            raise TypeError(f"rules must be a RuleSet, got {type(rules).__name__}")
        self._rules = rules

    def evolve_rules(
        self,
        rng: Optional[np.random.Generator] = None,
        mutation_rate: float = 0.1
    ) -> RuleSet:
        """
        Randomly perturb the current rule set.

        Args:
            rng: Random generator for reproducibility
            mutation_rate: Per-count toggle probability

        Returns:
            The new rule set
        """
        previous = self._rules
        self._rules = previous.mutate(rng=rng, mutation_rate=mutation_rate)
        logger.debug(f"Universe {self.id[:8]} rules evolved {previous} -> {self._rules}")
        return self._rules

    # ------------------------------------------------------------------
    # Live grid edits
    # ------------------------------------------------------------------

    def set_cell(self, x: int, y: int, alive: bool = True):
        self._grid.set_cell(x, y, alive)

    def toggle_cell(self, x: int, y: int) -> bool:
        return self._grid.toggle(x, y)

    def clear(self):
        """Kill every live cell (history is untouched)."""
        self._grid.clear()

    def randomize(self, density: float = 0.5, rng: Optional[np.random.Generator] = None):
        """Reseed the live grid randomly (history is untouched)."""
        self._grid = Grid.random(self.width, self.height, density=density, rng=rng)

    def __repr__(self) -> str:
        return (f"Universe(id={self.id[:8]!r}, name={self.name!r}, "
                f"generation={self._generation}, rules={self._rules})")
