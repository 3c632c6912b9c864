"""Map generation config, tiles, and grid models."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, field_validator, model_validator


class TileKind(str, Enum):
    """Base terrain of a cell."""
    FLOOR = "floor"
    WALL = "wall"
    MOAT = "moat"


class FloorObject(str, Enum):
    """Something sitting on a floor cell."""
    NONE = "none"
    GLASS = "glass"                 # Noisy to step on
    DOOR = "door"                   # Noisy, opens for good once stepped on
    DOOR_LOCKED = "door_locked"     # Blocks entry
    WALL_OBJECT = "wall_object"     # Blocks entry


class GridCell(BaseModel):
    """A single cell on the ring grid."""
    x: int
    y: int
    tile: TileKind = TileKind.FLOOR
    floor_object: FloorObject = FloorObject.NONE
    ring_index: int = 0             # -1 tower/moat, 0 unclassified, 1..K rings


class ObjectPlacement(BaseModel):
    """A floor object placed at a fixed offset from the center."""
    dx: int
    dy: int
    floor_object: FloorObject


class MapConfig(BaseModel):
    """Everything the map generator needs to build a grid."""
    grid_size: int = 31
    moat_thickness: int = 3
    ring_thickness: int = 4
    ring_count: int | None = None   # None = take whatever the scan finds
    obstacle_seed: int | Literal["random"] = 12345
    obstacle_samples: int = 220
    obstacle_margin: int = 3
    safe_radius: int = 4
    wall_chance: float = 0.15
    object_chance: float = 0.05
    landmarks: list[ObjectPlacement] = []

    @field_validator("grid_size")
    @classmethod
    def _odd_grid_size(cls, value: int) -> int:
        if value < 9 or value % 2 == 0:
            raise ValueError(f"grid_size must be odd and at least 9, got {value}")
        return value

    @field_validator("moat_thickness", "ring_thickness")
    @classmethod
    def _positive_thickness(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"thickness must be at least 1, got {value}")
        return value

    @field_validator("ring_count")
    @classmethod
    def _positive_ring_count(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError(f"ring_count must be at least 1, got {value}")
        return value

    @field_validator("obstacle_samples", "obstacle_margin", "safe_radius")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"value must not be negative, got {value}")
        return value

    @field_validator("wall_chance", "object_chance")
    @classmethod
    def _probability(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {value}")
        return value

    @model_validator(mode="after")
    def _rings_fit(self) -> "MapConfig":
        half = self.grid_size // 2
        if self.first_ring_radius >= half:
            raise ValueError(
                f"moat_thickness {self.moat_thickness} leaves no playable ring "
                f"on a {self.grid_size}x{self.grid_size} grid"
            )
        derived = self.derived_ring_count
        if derived < 2:
            raise ValueError(
                f"layout yields {derived} ring(s); at least 2 are needed so the "
                f"prisoner can start outside the escape ring"
            )
        if self.ring_count is not None and self.ring_count != derived:
            raise ValueError(
                f"ring_count {self.ring_count} disagrees with the map layout, "
                f"which yields {derived} ring(s)"
            )
        return self

    @property
    def first_ring_radius(self) -> int:
        """Chebyshev radius where ring 1 starts (tower is radius 1)."""
        return 2 + self.moat_thickness

    @property
    def derived_ring_count(self) -> int:
        """Outermost ring index reachable inside the border wall."""
        innermost_border = self.grid_size // 2
        return (innermost_border - 1 - self.first_ring_radius) // self.ring_thickness + 1

    @property
    def random_scatter(self) -> bool:
        return self.obstacle_seed == "random"


class Grid(BaseModel):
    """The generated map.

    Tile kinds and ring indices never change after generation. The only
    mutable bit is a DOOR's floor object, which the turn engine clears
    when the prisoner walks through it.
    """
    size: int
    cells: list[list[GridCell]]     # 2D grid [y][x]
    ring_count: int

    @property
    def center(self) -> tuple[int, int]:
        half = self.size // 2
        return (half, half)

    def cell(self, x: int, y: int) -> GridCell:
        return self.cells[y][x]
