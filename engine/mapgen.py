"""Procedural ring map generation and turf export."""

from __future__ import annotations

import logging
import random

from engine.grid import chebyshev_radius, create_cells
from models.map import FloorObject, Grid, GridCell, MapConfig, TileKind

logger = logging.getLogger(__name__)

TOWER_RING = -1
UNCLASSIFIED_RING = 0

SCATTER_OBJECTS = [
    FloorObject.GLASS,
    FloorObject.DOOR,
    FloorObject.DOOR_LOCKED,
    FloorObject.WALL_OBJECT,
]

# DM-style turf definitions: density 1 blocks movement, opacity 1 blocks vision.
TURFS: dict[str, dict] = {
    TileKind.FLOOR.value: {"path": "/turf/floor", "density": 0, "opacity": 0},
    TileKind.WALL.value: {"path": "/turf/wall", "density": 1, "opacity": 1},
    TileKind.MOAT.value: {"path": "/turf/moat", "density": 1, "opacity": 0.8},
}
OVERLAYS: dict[str, dict] = {
    FloorObject.GLASS.value: {"path": "/turf/window", "density": 0, "opacity": 0.3},
    FloorObject.DOOR.value: {"path": "/turf/door", "density": 0, "opacity": 1},
    FloorObject.DOOR_LOCKED.value: {"path": "/turf/door/locked", "density": 1, "opacity": 1},
    FloorObject.WALL_OBJECT.value: {"path": "/turf/wall", "density": 1, "opacity": 1},
}


def generate_map(config: MapConfig, rng: random.Random | None = None) -> Grid:
    """Build the ring map: tower, moat, rings, border, then obstacles.

    Args:
        config: Validated map settings.
        rng: Optional Random instance; overrides config.obstacle_seed.

    Returns:
        The generated Grid.
    """
    if rng is None:
        rng = random.Random() if config.random_scatter else random.Random(config.obstacle_seed)

    size = config.grid_size
    cells = create_cells(size)
    half = size // 2
    center = (half, half)

    _carve_tower(cells, half)
    ring_count = _classify_rings(cells, center, config)
    _wall_border(cells, size)
    _scatter_obstacles(cells, center, config, rng)
    _place_landmarks(cells, center, config)

    logger.debug(
        "Generated %dx%d map with %d ring(s), seed=%s",
        size, size, ring_count, config.obstacle_seed,
    )
    return Grid(size=size, cells=cells, ring_count=ring_count)


def _carve_tower(cells: list[list[GridCell]], half: int) -> None:
    """Central 3x3 tower: always wall, never playable."""
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            cell = cells[half + dy][half + dx]
            cell.tile = TileKind.WALL
            cell.ring_index = TOWER_RING


def _classify_rings(
    cells: list[list[GridCell]],
    center: tuple[int, int],
    config: MapConfig,
) -> int:
    """Assign moat and ring indices by Chebyshev radius.

    Returns:
        Highest ring index among cells inside the border wall.
    """
    moat_outer = 1 + config.moat_thickness
    first_ring = config.first_ring_radius
    border_radius = center[0]
    ring_count = 0

    for row in cells:
        for cell in row:
            r = chebyshev_radius((cell.x, cell.y), center)
            if r <= 1:
                continue  # Tower
            if r <= moat_outer:
                if cell.tile == TileKind.FLOOR:
                    cell.tile = TileKind.MOAT
                cell.ring_index = TOWER_RING
            elif r >= first_ring:
                idx = (r - first_ring) // config.ring_thickness + 1
                cell.ring_index = max(idx, UNCLASSIFIED_RING)
                if r < border_radius and idx > ring_count:
                    ring_count = idx

    return ring_count


def _wall_border(cells: list[list[GridCell]], size: int) -> None:
    for i in range(size):
        cells[0][i].tile = TileKind.WALL
        cells[size - 1][i].tile = TileKind.WALL
        cells[i][0].tile = TileKind.WALL
        cells[i][size - 1].tile = TileKind.WALL


def _scatter_obstacles(
    cells: list[list[GridCell]],
    center: tuple[int, int],
    config: MapConfig,
    rng: random.Random,
) -> None:
    """Sprinkle walls and floor objects over the outer rings.

    No connectivity check: pockets cut off by walls are allowed.
    """
    size = config.grid_size
    margin = config.obstacle_margin
    span = size - 2 * margin
    if span <= 0:
        return

    for _ in range(config.obstacle_samples):
        x = margin + int(rng.random() * span)
        y = margin + int(rng.random() * span)
        if chebyshev_radius((x, y), center) <= config.safe_radius:
            continue
        cell = cells[y][x]
        if cell.tile != TileKind.FLOOR:
            continue
        if rng.random() < config.wall_chance:
            cell.tile = TileKind.WALL
            cell.floor_object = FloorObject.NONE
        elif rng.random() < config.object_chance:
            cell.floor_object = rng.choice(SCATTER_OBJECTS)


def _place_landmarks(
    cells: list[list[GridCell]],
    center: tuple[int, int],
    config: MapConfig,
) -> None:
    """Drop configured objects at fixed offsets, floor cells only."""
    size = config.grid_size
    for landmark in config.landmarks:
        x, y = center[0] + landmark.dx, center[1] + landmark.dy
        if not (0 <= x < size and 0 <= y < size):
            continue
        cell = cells[y][x]
        if cell.tile == TileKind.FLOOR:
            cell.floor_object = landmark.floor_object


def export_turf_map(grid: Grid) -> dict:
    """Render the grid as turf and overlay paths for map tooling.

    Returns:
        {"width", "height", "grid": [[{"turf", "overlay", "density",
        "opacity", "ring_index"}]]}, rows indexed [y][x].
    """
    rows = []
    for row in grid.cells:
        out_row = []
        for cell in row:
            turf = TURFS[cell.tile.value]
            overlay = OVERLAYS.get(cell.floor_object.value)
            density = turf["density"]
            opacity = turf["opacity"]
            if overlay is not None:
                density = max(density, overlay["density"])
                opacity = max(opacity, overlay["opacity"])
            out_row.append({
                "turf": turf["path"],
                "overlay": overlay["path"] if overlay else None,
                "density": density,
                "opacity": opacity,
                "ring_index": cell.ring_index,
            })
        rows.append(out_row)
    return {"width": grid.size, "height": grid.size, "grid": rows}
