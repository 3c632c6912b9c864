"""Prisoner, Watcher, and noise marker models."""

from enum import Enum

from pydantic import BaseModel


class Direction(str, Enum):
    """Cardinal facing, listed clockwise from North."""
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @property
    def ordinal(self) -> int:
        return _CLOCKWISE.index(self)

    @property
    def vector(self) -> tuple[int, int]:
        """Unit step (dx, dy); y grows southward."""
        return _VECTORS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    def rotated(self, delta: int) -> "Direction":
        """Turn by `delta` quarter-turns (+1 clockwise, -1 counter-clockwise)."""
        return _CLOCKWISE[(self.ordinal + delta) % 4]

    def opposite(self) -> "Direction":
        return self.rotated(2)

    @classmethod
    def from_vector(cls, dx: int, dy: int) -> "Direction":
        """Map a unit cardinal step back to its direction.

        Raises:
            ValueError: If (dx, dy) is not a unit cardinal step.
        """
        for direction, vec in _VECTORS.items():
            if vec == (dx, dy):
                return direction
        raise ValueError(f"({dx}, {dy}) is not a unit cardinal step")


_CLOCKWISE = [Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST]
_VECTORS = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
}


class Prisoner(BaseModel):
    """The escaping player."""
    position: tuple[int, int]
    movement_points: int
    turn_start_position: tuple[int, int]


class Watcher(BaseModel):
    """The player in the central tower."""
    facing: Direction = Direction.NORTH
    bluff_direction: Direction | None = None
    has_rotated_this_turn: bool = False


class NoiseMarker(BaseModel):
    """A decaying sound event on one cell."""
    position: tuple[int, int]
    ttl: float                      # Seconds of simulated time left
