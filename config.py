"""Server-wide configuration defaults for the Opticon engine."""

from __future__ import annotations

import logging
import os

from models.game_state import GameConfig

GRID_SIZE = int(os.environ.get("OPTICON_GRID_SIZE", "31"))  # Odd side length
MOAT_THICKNESS = int(os.environ.get("OPTICON_MOAT_THICKNESS", "3"))
RING_THICKNESS = int(os.environ.get("OPTICON_RING_THICKNESS", "4"))
RING_COUNT = os.environ.get("OPTICON_RING_COUNT")  # None = derive from the map
OBSTACLE_SEED = os.environ.get("OPTICON_OBSTACLE_SEED", "12345")  # int or "random"
MAX_MP = int(os.environ.get("OPTICON_MAX_MP", "3"))  # Prisoner moves per turn
NOISE_TTL = float(os.environ.get("OPTICON_NOISE_TTL", "4.0"))  # Seconds
START_OFFSET = (4, 6)  # Prisoner spawn relative to the center
LOG_LEVEL = os.environ.get("OPTICON_LOG_LEVEL", "INFO")

# Obstacle scatter tunables
OBSTACLE_SAMPLES = 220
OBSTACLE_MARGIN = 3     # Samples never land within this many cells of the edge
SAFE_RADIUS = 4         # Chebyshev radius around the tower kept clear
WALL_CHANCE = 0.15
OBJECT_CHANCE = 0.05

# Hand-placed objects from the first prototype, as (dx, dy) offsets from center
CLASSIC_LANDMARKS = [
    {"dx": 8, "dy": 2, "floor_object": "door_locked"},
    {"dx": -9, "dy": -6, "floor_object": "wall_object"},
    {"dx": 12, "dy": -10, "floor_object": "glass"},
]

GAME_NAME = "Opticon"


def _parse_seed(raw: str) -> int | str:
    """Turn an env seed string into an int, keeping the literal 'random'."""
    if raw.strip().lower() == "random":
        return "random"
    return int(raw)


def load_game_config() -> GameConfig:
    """Build the server's default GameConfig from the values above."""
    return GameConfig(
        grid_size=GRID_SIZE,
        moat_thickness=MOAT_THICKNESS,
        ring_thickness=RING_THICKNESS,
        ring_count=int(RING_COUNT) if RING_COUNT else None,
        obstacle_seed=_parse_seed(OBSTACLE_SEED),
        max_mp=MAX_MP,
        noise_ttl=NOISE_TTL,
        start_offset=START_OFFSET,
        obstacle_samples=OBSTACLE_SAMPLES,
        obstacle_margin=OBSTACLE_MARGIN,
        safe_radius=SAFE_RADIUS,
        wall_chance=WALL_CHANCE,
        object_chance=OBJECT_CHANCE,
        landmarks=CLASSIC_LANDMARKS,
    )


def configure_logging() -> None:
    """Set up root logging at OPTICON_LOG_LEVEL."""
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
