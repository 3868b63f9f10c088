"""
Seed Patterns
Well-known life patterns as (x, y) cell offsets
"""

from typing import Dict, List, Tuple

from .errors import NotFound
from .grid import Grid


Pattern = List[Tuple[int, int]]


def _from_rows(rows: List[str]) -> Pattern:
    """Parse a picture made of '.' (dead) and 'O' (alive)."""
    return [(x, y) for y, row in enumerate(rows) for x, char in enumerate(row) if char == 'O']


PATTERNS: Dict[str, Pattern] = {
    # Still lifes
    'block': _from_rows(["OO",
                         "OO"]),
    'beehive': _from_rows([".OO.",
                           "O..O",
                           ".OO."]),
    # Oscillators
    'blinker': _from_rows(["OOO"]),
    'toad': _from_rows([".OOO",
                        "OOO."]),
    'beacon': _from_rows(["OO..",
                          "OO..",
                          "..OO",
                          "..OO"]),
    # Spaceships
    'glider': _from_rows([".O.",
                          "..O",
                          "OOO"]),
    'lwss': _from_rows([".O..O",
                        "O....",
                        "O...O",
                        "OOOO."]),
    # Methuselahs
    'r_pentomino': _from_rows([".OO",
                               "OO.",
                               ".O."]),
    'acorn': _from_rows([".O.....",
                         "...O...",
                         "OO..OOO"]),
    'diehard': _from_rows(["......O.",
                           "OO......",
                           ".O...OOO"]),
    # Guns
    'gosper_glider_gun': _from_rows([
        "........................O...........",
        "......................O.O...........",
        "............OO......OO............OO",
        "...........O...O....OO............OO",
        "OO........O.....O...OO..............",
        "OO........O...O.OO....O.O...........",
        "..........O.....O.......O...........",
        "...........O...O....................",
        "............OO......................",
    ]),
}


def get_pattern(name: str) -> Pattern:
    """Look up a named pattern."""
    key = name.strip().lower().replace('-', '_').replace(' ', '_')
    if key not in PATTERNS:
        raise NotFound(f"Unknown pattern: {name!r} (available: {', '.join(PATTERNS)})")
    return PATTERNS[key]


def pattern_size(name: str) -> Tuple[int, int]:
    """(width, height) of a named pattern's bounding box."""
    cells = get_pattern(name)
    return (max(x for x, _ in cells) + 1, max(y for _, y in cells) + 1)


def place(grid: Grid, name: str, x: int = 0, y: int = 0) -> Grid:
    """
    Stamp a named pattern onto a grid with its top-left corner at (x, y).

    Coordinates wrap toroidally. Existing live cells are kept.

    Args:
        grid: Grid to modify in place
        name: Pattern name
        x: Column of the pattern's top-left corner
        y: Row of the pattern's top-left corner

    Returns:
        The same grid, for chaining
    """
    for dx, dy in get_pattern(name):
        grid.set_cell(x + dx, y + dy, True)
    return grid


def centered(name: str, width: int, height: int) -> Grid:
    """New grid with a named pattern placed in the middle."""
    pattern_width, pattern_height = pattern_size(name)
    grid = Grid(width, height)
    return place(grid, name, (width - pattern_width) // 2, (height - pattern_height) // 2)
