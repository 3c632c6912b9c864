"""Prisoner sight lines and the Watcher's vision wedges."""

from __future__ import annotations

from engine.grid import in_bounds
from models.actors import Direction
from models.map import Grid, TileKind

SIGHT_RANGE = 5


def prisoner_visibility(
    grid: Grid,
    position: tuple[int, int],
    sight_range: int = SIGHT_RANGE,
) -> set[tuple[int, int]]:
    """Cells the prisoner can see: a plus shape clipped by walls and moat.

    Each cardinal ray marks the cell that stops it, so walls along the
    edge of sight are still visible.

    Args:
        grid: The game grid.
        position: (x, y) of the prisoner.
        sight_range: Steps per ray.

    Returns:
        Set of visible (x, y) positions, always including `position`.
    """
    visible = {position}
    for direction in Direction:
        dx, dy = direction.vector
        x, y = position
        for _ in range(sight_range):
            x += dx
            y += dy
            if not in_bounds(x, y, grid):
                break
            visible.add((x, y))
            if grid.cell(x, y).tile != TileKind.FLOOR:
                break
    return visible


def in_watcher_wedge(
    direction: Direction,
    point: tuple[int, int],
    center: tuple[int, int],
) -> bool:
    """Check if `point` sits in the 90-degree wedge facing `direction`.

    The dominant axis test is strict and the diagonal bound is not, so
    diagonal cells belong to the North/South wedges as well as East/West.
    """
    dx = point[0] - center[0]
    dy = point[1] - center[1]
    if direction == Direction.NORTH:
        return dy < 0 and abs(dx) <= -dy
    if direction == Direction.EAST:
        return dx > 0 and abs(dy) <= dx
    if direction == Direction.SOUTH:
        return dy > 0 and abs(dx) <= dy
    if direction == Direction.WEST:
        return dx < 0 and abs(dy) <= -dx
    raise ValueError(f"Unknown direction: {direction}")


def get_quadrant(point: tuple[int, int], center: tuple[int, int]) -> Direction | None:
    """The first wedge (N, E, S, W order) containing `point`, None at the center."""
    for direction in Direction:
        if in_watcher_wedge(direction, point, center):
            return direction
    return None
