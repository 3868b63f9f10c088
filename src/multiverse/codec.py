"""
Universe Codec
Compact, lossless text encoding of a universe's live state

Format::

    MV1;<W>x<H>;<rule notation>;<generation>;<runs>

``runs`` lists the lengths of alternating dead/alive runs over the cells in
row-major order, base 36, joined by ``.``. The first run is always dead and
may be zero.
"""

import re
import numpy as np
from dataclasses import dataclass
from typing import List

from .errors import CodecError, InvalidRule
from .grid import Grid
from .rules import RuleSet
from .universe import Universe


MAGIC = "MV1"
FIELD_SEPARATOR = ";"
RUN_SEPARATOR = "."

_DIMENSIONS_RE = re.compile(r"([0-9]+)x([0-9]+)")
_GENERATION_RE = re.compile(r"[0-9]+")
_RUN_RE = re.compile(r"[0-9a-z]+")
_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass
class DecodedUniverse:
    """Result of decoding a universe string."""
    grid: Grid
    rules: RuleSet
    generation: int

    def to_universe(self, name: str = None, history_capacity: int = None) -> Universe:
        """Seed a fresh universe from the decoded state."""
        kwargs = {'name': name}
        if history_capacity is not None:
            kwargs['history_capacity'] = history_capacity
        return Universe(self.grid, rules=self.rules, **kwargs)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_DIGITS[remainder])
    return ''.join(reversed(digits))


def encode_runs(cells: np.ndarray) -> List[int]:
    """
    Run lengths of a boolean matrix in row-major order.

    Args:
        cells: 2D boolean array

    Returns:
        Alternating dead/alive run lengths, starting with a dead run
    """
    flat = cells.ravel().astype(np.int8)
    # Indices where the state changes
    boundaries = np.flatnonzero(np.diff(flat)) + 1
    edges = np.concatenate(([0], boundaries, [flat.size]))
    runs = np.diff(edges).tolist()

    if flat.size and flat[0]:
        runs.insert(0, 0)

    return runs


def decode_runs(runs: List[int], width: int, height: int) -> np.ndarray:
    """
    Rebuild a boolean matrix from alternating run lengths.

    Args:
        runs: Run lengths, first one dead
        width: Grid width
        height: Grid height

    Returns:
        Boolean array of shape (height, width)
    """
    total = width * height
    if sum(runs) != total:
        raise CodecError(f"Runs cover {sum(runs)} cells, expected {total}")

    states = np.arange(len(runs)) % 2 == 1
    flat = np.repeat(states, runs)
    return flat.reshape(height, width)


def encode_grid(grid: Grid) -> str:
    """Encode only the cell runs of a grid."""
    return RUN_SEPARATOR.join(_to_base36(run) for run in encode_runs(grid.cells))


def encode(universe: Universe) -> str:
    """
    Encode a universe's live grid, rules and generation.

    Args:
        universe: Universe to encode

    Returns:
        Encoded string
    """
    grid = universe.grid
    return FIELD_SEPARATOR.join([
        MAGIC,
        f"{grid.width}x{grid.height}",
        universe.rules.notation,
        str(universe.generation),
        encode_grid(grid)
    ])


def decode(encoded: str) -> DecodedUniverse:
    """
    Decode a string produced by :func:`encode`.

    Args:
        encoded: Encoded universe

    Returns:
        DecodedUniverse with grid, rules and generation
    """
    if not isinstance(encoded, str):
        raise CodecError(f"Expected a string, got {type(encoded).__name__}")

    parts = encoded.strip().split(FIELD_SEPARATOR)
    if len(parts) != 5:
        raise CodecError(f"Expected 5 fields, got {len(parts)}")

    magic, dimensions, notation, generation, runs_field = parts
    if magic != MAGIC:
        raise CodecError(f"Unknown format marker: {magic!r}")

    match = _DIMENSIONS_RE.fullmatch(dimensions)
    if not match:
        raise CodecError(f"Malformed dimensions: {dimensions!r}")
    width, height = int(match.group(1)), int(match.group(2))
    if width < 1 or height < 1:
        raise CodecError(f"Dimensions must be positive: {dimensions!r}")

    try:
        rules = RuleSet.from_notation(notation)
    except InvalidRule as e:
        raise CodecError(f"Malformed rule: {e}") from e

    if not _GENERATION_RE.fullmatch(generation):
        raise CodecError(f"Malformed generation: {generation!r}")

    tokens = runs_field.split(RUN_SEPARATOR)
    if not all(_RUN_RE.fullmatch(token) for token in tokens):
        raise CodecError(f"Malformed runs: {runs_field[:40]!r}")
    runs = [int(token, 36) for token in tokens]

    cells = decode_runs(runs, width, height)

    return DecodedUniverse(
        grid=Grid.from_array(cells),
        rules=rules,
        generation=int(generation)
    )
