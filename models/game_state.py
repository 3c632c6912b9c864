"""Game state, configuration, and event models for the Opticon engine."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator

from models.actors import NoiseMarker, Prisoner, Watcher
from models.map import Grid, MapConfig


class Turn(str, Enum):
    """Whose turn it is."""
    PRISONER = "prisoner"
    WATCHER = "watcher"


class GamePhase(str, Enum):
    """Possible states for a game."""
    IN_PROGRESS = "in_progress"
    OVER = "over"


class Role(str, Enum):
    """Who an event is about, or who won."""
    PRISONER = "prisoner"
    WATCHER = "watcher"
    SYSTEM = "system"


class EventKind(str, Enum):
    """Kinds of logged events. Audio cues key off these names."""
    MOVE = "move"
    BLOCKED = "blocked"
    GLASS = "glass"
    DOOR_OPENED = "door_opened"
    NOISE = "noise"
    ROTATE = "rotate"
    BLUFF = "bluff"
    END_TURN = "end_turn"
    PARANOIA = "paranoia"
    CAPTURE = "capture"
    ESCAPE = "escape"
    RESET = "reset"
    IGNORED = "ignored"


class GameEvent(BaseModel):
    """A logged event from the game."""
    turn_number: int
    role: Role
    kind: EventKind
    description: str
    details: dict = {}
    timestamp: datetime


class GameConfig(MapConfig):
    """Map settings plus the turn rules that sit on top of them."""
    max_mp: int = 3
    noise_ttl: float = 4.0
    start_offset: tuple[int, int] = (4, 6)  # Prisoner spawn, relative to center

    @field_validator("max_mp")
    @classmethod
    def _positive_mp(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"max_mp must be at least 1, got {value}")
        return value

    @field_validator("noise_ttl")
    @classmethod
    def _positive_ttl(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"noise_ttl must be positive, got {value}")
        return value


class GameState(BaseModel):
    """The full state of a game."""
    config: GameConfig
    grid: Grid
    prisoner: Prisoner
    watcher: Watcher = Watcher()
    active_turn: Turn = Turn.PRISONER
    phase: GamePhase = GamePhase.IN_PROGRESS
    winner: Role | None = None
    turn_number: int = 1
    noise_markers: list[NoiseMarker] = []
    event_log: list[GameEvent] = []
    log_history: list[list[GameEvent]] = []

    @property
    def ring_count(self) -> int:
        return self.grid.ring_count

    @property
    def ring_thickness(self) -> int:
        return self.config.ring_thickness

    @property
    def moat_thickness(self) -> int:
        return self.config.moat_thickness

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.OVER
