"""Grid lookups, bounds, and distance helpers."""

from __future__ import annotations

from models.map import FloorObject, Grid, GridCell, TileKind


def create_cells(size: int) -> list[list[GridCell]]:
    """Initialize a square grid of floor cells.

    Args:
        size: Side length.

    Returns:
        A 2D list indexed as cells[y][x].
    """
    return [
        [GridCell(x=x, y=y) for x in range(size)]
        for y in range(size)
    ]


def chebyshev_radius(pos: tuple[int, int], center: tuple[int, int]) -> int:
    """Square-ring distance from the center: max(|dx|, |dy|)."""
    return max(abs(pos[0] - center[0]), abs(pos[1] - center[1]))


def manhattan_distance(pos1: tuple[int, int], pos2: tuple[int, int]) -> int:
    """Taxicab distance between two grid positions."""
    return abs(pos1[0] - pos2[0]) + abs(pos1[1] - pos2[1])


def in_bounds(x: int, y: int, grid: Grid) -> bool:
    """Check if coordinates are within grid bounds."""
    return 0 <= x < grid.size and 0 <= y < grid.size


def _checked_cell(x: int, y: int, grid: Grid) -> GridCell:
    if not in_bounds(x, y, grid):
        raise ValueError(f"Position ({x}, {y}) is out of bounds")
    return grid.cell(x, y)


def get_tile(x: int, y: int, grid: Grid) -> TileKind:
    """Tile kind at (x, y).

    Raises:
        ValueError: If the position is out of bounds.
    """
    return _checked_cell(x, y, grid).tile


def get_ring_index(x: int, y: int, grid: Grid) -> int:
    """Ring index at (x, y).

    Raises:
        ValueError: If the position is out of bounds.
    """
    return _checked_cell(x, y, grid).ring_index


def get_floor_object(x: int, y: int, grid: Grid) -> FloorObject:
    """Floor object at (x, y).

    Raises:
        ValueError: If the position is out of bounds.
    """
    return _checked_cell(x, y, grid).floor_object
