"""
Life-like Rule Sets
Birth/survival predicates over Moore neighbour counts
"""

import re
import numpy as np
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from .errors import InvalidRule


MIN_COUNT = 0
MAX_COUNT = 8

# Evolution never toggles birth on 0
EVOLVABLE_BIRTH = range(1, MAX_COUNT + 1)
EVOLVABLE_SURVIVAL = range(MIN_COUNT, MAX_COUNT + 1)

_NOTATION_RE = re.compile(r'^\s*B(?P<b1>\d*)\s*/\s*S(?P<s1>\d*)\s*$|^\s*S(?P<s2>\d*)\s*/\s*B(?P<b2>\d*)\s*$',
                          re.IGNORECASE)


def validate_counts(values, label: str, error=InvalidRule) -> FrozenSet[int]:
    """
    Validate an iterable of neighbour counts.

    Args:
        values: Iterable of integers
        label: Field name used in error messages
        error: Exception class to raise

    Returns:
        Frozenset of validated counts
    """
    if isinstance(values, (str, bytes)):
        raise error(f"{label} must be a collection of integers, got {values!r}")

    try:
        items = list(values)
    except TypeError:
        raise error(f"{label} must be a collection of integers, got {values!r}") from None

    counts = set()
    for value in items:
        if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
            raise error(f"{label} contains non-integer value {value!r}")
        if not MIN_COUNT <= value <= MAX_COUNT:
            raise error(f"{label} value {value} outside [{MIN_COUNT}, {MAX_COUNT}]")
        counts.add(int(value))

    return frozenset(counts)


@dataclass(frozen=True)
class RuleSet:
    """
    Outer-totalistic rule: a dead cell is born when its neighbour count is
    in ``birth``; a live cell survives when its count is in ``survival``.
    """
    birth: FrozenSet[int]
    survival: FrozenSet[int]
    birth_table: np.ndarray = field(init=False, repr=False, compare=False)
    survival_table: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        birth = validate_counts(self.birth, "birth")
        survival = validate_counts(self.survival, "survival")
        object.__setattr__(self, 'birth', birth)
        object.__setattr__(self, 'survival', survival)

        # Lookup tables indexed by neighbour count
        birth_table = np.zeros(MAX_COUNT + 1, dtype=bool)
        birth_table[list(birth)] = True
        survival_table = np.zeros(MAX_COUNT + 1, dtype=bool)
        survival_table[list(survival)] = True
        birth_table.flags.writeable = False
        survival_table.flags.writeable = False
        object.__setattr__(self, 'birth_table', birth_table)
        object.__setattr__(self, 'survival_table', survival_table)

    @classmethod
    def from_notation(cls, notation: str) -> "RuleSet":
        """
        Parse ``B3/S23`` style notation (``S23/B3`` is accepted too).

        Args:
            notation: Rule string

        Returns:
            Parsed RuleSet
        """
        match = _NOTATION_RE.match(notation or "")
        if not match:
            raise InvalidRule(f"Unrecognised rule notation: {notation!r}")

        birth = match.group('b1') if match.group('b1') is not None else match.group('b2')
        survival = match.group('s1') if match.group('s1') is not None else match.group('s2')

        return cls(birth=[int(c) for c in birth], survival=[int(c) for c in survival])

    @property
    def notation(self) -> str:
        """Canonical ``B.../S...`` string."""
        birth = ''.join(str(c) for c in sorted(self.birth))
        survival = ''.join(str(c) for c in sorted(self.survival))
        return f"B{birth}/S{survival}"

    def is_born(self, count: int) -> bool:
        return count in self.birth

    def survives(self, count: int) -> bool:
        return count in self.survival

    def mutate(
        self,
        rng: Optional[np.random.Generator] = None,
        mutation_rate: float = 0.1
    ) -> "RuleSet":
        """
        Randomly perturb the birth and survival sets.

        Each evolvable count is toggled with probability ``mutation_rate``;
        if nothing toggled, one random count is flipped so the result always
        differs from the original.

        Args:
            rng: Random generator for reproducibility
            mutation_rate: Per-count toggle probability

        Returns:
            New, different RuleSet
        """
        rng = rng or np.random.default_rng()
        birth = set(self.birth)
        survival = set(self.survival)

        changed = False
        for counts, candidates in ((birth, EVOLVABLE_BIRTH), (survival, EVOLVABLE_SURVIVAL)):
            for count in candidates:
                if rng.random() < mutation_rate:
                    counts.symmetric_difference_update({count})
                    changed = True

        if not changed:
            if rng.random() < 0.5:
                birth.symmetric_difference_update({int(rng.choice(list(EVOLVABLE_BIRTH)))})
            else:
                survival.symmetric_difference_update({int(rng.choice(list(EVOLVABLE_SURVIVAL)))})

        return RuleSet(birth=birth, survival=survival)

    def __str__(self) -> str:
        return self.notation


CONWAY = RuleSet.from_notation("B3/S23")

PRESETS = {
    'conway': CONWAY,
    'highlife': RuleSet.from_notation("B36/S23"),
    'seeds': RuleSet.from_notation("B2/S"),
    'day_and_night': RuleSet.from_notation("B3678/S34678"),
    'life_without_death': RuleSet.from_notation("B3/S012345678"),
    'maze': RuleSet.from_notation("B3/S12345"),
    'mazectric': RuleSet.from_notation("B3/S1234"),
    'replicator': RuleSet.from_notation("B1357/S1357"),
    'two_by_two': RuleSet.from_notation("B36/S125"),
    'morley': RuleSet.from_notation("B368/S245"),
    'anneal': RuleSet.from_notation("B4678/S35678"),
    'diamoeba': RuleSet.from_notation("B35678/S5678"),
    'coral': RuleSet.from_notation("B3/S45678"),
}


def get_preset(name: str) -> RuleSet:
    """
    Look up a named rule preset.

    Args:
        name: Preset name (case-insensitive, spaces/dashes allowed)

    Returns:
        Preset RuleSet
    """
    key = name.strip().lower().replace('-', '_').replace(' ', '_')
    if key not in PRESETS:
        raise InvalidRule(f"Unknown rule preset: {name!r} (available: {', '.join(PRESETS)})")
    return PRESETS[key]


def parse_rule(value) -> RuleSet:
    """Accept a RuleSet, a preset name or ``B/S`` notation."""
    if isinstance(value, RuleSet):
        return value
    if isinstance(value, str):
        if '/' in value:
            return RuleSet.from_notation(value)
        return get_preset(value)
    raise InvalidRule(f"Cannot interpret {value!r} as a rule")
