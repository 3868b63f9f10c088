"""
Multiverse Registry
Owns every universe, tracks the active one and forks new branches
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterator, List, Optional

from tqdm import tqdm

from .errors import ActiveUniverseError, NotFound
from .grid import Grid
from .history import DEFAULT_CAPACITY, generation_index
from .rules import RuleSet, CONWAY
from .universe import Universe

logger = logging.getLogger(__name__)


class MultiverseRegistry:
    """
    Insertion-ordered collection of universes with an explicit active id.

    ``active_id`` is either the id of a registered universe or ``None``
    (no active universe). Nothing here is global: callers hold a registry
    and pass it where it is needed.
    """

    def __init__(self, history_capacity: int = DEFAULT_CAPACITY):
        """
        Initialize an empty registry.

        Args:
            history_capacity: Ledger capacity for universes created here
        """
        self.history_capacity = history_capacity
        self._universes: Dict[str, Universe] = {}
        self._active_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._universes)

    def __contains__(self, universe_id) -> bool:
        return universe_id in self._universes

    def __iter__(self) -> Iterator[Universe]:
        return iter(list(self._universes.values()))

    @property
    def ids(self) -> List[str]:
        """Universe ids in insertion order."""
        return list(self._universes)

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active(self) -> Optional[Universe]:
        """The active universe, or None when no universe is active."""
        if self._active_id is None:
            return None
        return self._universes[self._active_id]

    def get(self, universe_id: str) -> Universe:
        """
        Look up a universe.

        Args:
            universe_id: Id to look up

        Returns:
            The registered Universe
        """
        try:
            return self._universes[universe_id]
        except KeyError:
            raise NotFound(f"Universe not found: {universe_id}") from None

    def lineage(self, universe_id: str) -> List[str]:
        """
        Ancestor chain of a universe, nearest parent first.

        Stops at the first ancestor that is no longer registered.
        """
        chain = []
        parent = self.get(universe_id).parent_id
        while parent is not None:
            chain.append(parent)
            if parent not in self._universes:
                break
            parent = self._universes[parent].parent_id
        return chain

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, universe: Universe, activate: bool = False) -> str:
        """
        Register an existing universe.

        The first universe added becomes active automatically.

        Args:
            universe: Universe to register
            activate: Make it the active universe

        Returns:
            The universe id
        """
        if universe.id in self._universes:
            raise ValueError(f"Universe id already registered: {universe.id}")

        self._universes[universe.id] = universe
        if activate or self._active_id is None and len(self._universes) == 1:
            self._active_id = universe.id

        logger.info(f"Registered universe {universe.id[:8]} ({universe.name})")
        return universe.id

    def create(
        self,
        grid: Optional[Grid] = None,
        rules: RuleSet = CONWAY,
        name: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        activate: bool = False
    ) -> str:
        """
        Create a fresh seeded universe.

        Args:
            grid: Seed grid; an empty ``width`` x ``height`` grid if omitted
            rules: Birth/survival rule
            name: Display name
            width: Width of the empty seed grid
            height: Height of the empty seed grid
            activate: Make it the active universe

        Returns:
            Id of the new universe
        """
        if grid is None:
            if width is None or height is None:
                raise ValueError("Either grid or width and height must be given")
            grid = Grid(width, height)

        universe = Universe(grid, rules=rules, name=name,
                            history_capacity=self.history_capacity)
        return self.add(universe, activate=activate)

    def fork(
        self,
        source_id: str,
        at_generation: Optional[int] = None,
        name: Optional[str] = None,
        activate: bool = False
    ) -> str:
        """
        Branch a new universe off a source at a chosen generation.

        The new universe starts seeded: the source's grid at
        ``at_generation``, a copy of its rules, generation 0, empty history.
        The source is never modified.

        Args:
            source_id: Universe to fork from
            at_generation: Generation to fork at (defaults to the current one)
            name: Display name of the branch
            activate: Make the branch the active universe

        Returns:
            Id of the new universe
        """
        source = self.get(source_id)
        if at_generation is None:
            at_generation = source.generation

        # Raises OutOfRange before anything is registered
        seed = source.grid_at(at_generation)
        at_generation = generation_index(at_generation)

        branch = Universe(
            seed,
            rules=source.rules,
            name=name or f"{source.name} @ {at_generation}",
            history_capacity=source.history.capacity,
            parent_id=source.id,
            forked_at=at_generation
        )
        logger.info(f"Forked {source.id[:8]} at generation {at_generation} -> {branch.id[:8]}")

        return self.add(branch, activate=activate)

    def switch_active(self, universe_id: str) -> Universe:
        """Make ``universe_id`` the active universe."""
        universe = self.get(universe_id)
        self._active_id = universe_id
        return universe

    def clear_active(self):
        """Enter the explicit "no active universe" state."""
        self._active_id = None

    def remove(self, universe_id: str, fallback_id: Optional[str] = None) -> Universe:
        """
        Remove a universe from the registry.

        Removing the active universe requires ``fallback_id``, which is
        promoted to active. Either the whole call succeeds or nothing
        changes.

        Args:
            universe_id: Universe to remove
            fallback_id: Universe to activate when removing the active one

        Returns:
            The removed Universe
        """
        universe = self.get(universe_id)

        if universe_id == self._active_id:
            if fallback_id is None:
                raise ActiveUniverseError(
                    f"Universe {universe_id} is active; switch away or supply a fallback"
                )
            if fallback_id == universe_id:
                raise ActiveUniverseError("Fallback must differ from the universe being removed")
            self.get(fallback_id)
            self._active_id = fallback_id
        elif fallback_id is not None:
            self.get(fallback_id)

        del self._universes[universe_id]
        logger.info(f"Removed universe {universe_id[:8]}")

        return universe

    # ------------------------------------------------------------------
    # Batch evolution
    # ------------------------------------------------------------------

    def advance_all(
        self,
        steps: int = 1,
        universe_ids: Optional[List[str]] = None,
        max_workers: Optional[int] = None,
        verbose: bool = False
    ) -> Dict[str, int]:
        """
        Advance every universe (or the listed ones) ``steps`` generations.

        Universes share no mutable state, so each one is advanced by its
        own task on a thread pool; a universe is only ever touched by one
        task.

        Args:
            steps: Generations per universe
            universe_ids: Universes to advance (all when omitted)
            max_workers: Thread pool size
            verbose: Show a progress bar

        Returns:
            Mapping of universe id to its new generation
        """
        if universe_ids is None:
            universes = list(self._universes.values())
        else:
            universes = [self.get(universe_id) for universe_id in universe_ids]
        results = {}

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(universe.advance_many, steps): universe
                for universe in universes
            }

            for future in tqdm(as_completed(futures), total=len(futures),
                               desc=f"Advancing {len(futures)} universes",
                               disable=not verbose):
                future.result()
                universe = futures[future]
                results[universe.id] = universe.generation

        return results

    def __repr__(self) -> str:
        active = self._active_id[:8] if self._active_id else None
        return f"MultiverseRegistry(universes={len(self._universes)}, active={active!r})"
