"""Command request and response models for the Opticon engine."""

from enum import Enum

from pydantic import BaseModel

from models.actors import Direction
from models.game_state import GameEvent, Role, Turn


class CommandType(str, Enum):
    """Commands the input layer can send to the engine."""
    MOVE = "move"
    ROTATE = "rotate"
    BLUFF = "bluff"
    END_TURN = "end_turn"
    TICK = "tick"
    RESET = "reset"


class RejectReason(str, Enum):
    """Why a command was ignored. Never raised, only reported."""
    OUT_OF_BOUNDS = "out_of_bounds"
    WALL = "wall"
    MOAT = "moat"
    DOOR_LOCKED = "door_locked"
    WALL_OBJECT = "wall_object"
    NO_MOVEMENT_POINTS = "no_movement_points"
    NOT_YOUR_TURN = "not_your_turn"
    ALREADY_ROTATED = "already_rotated"
    INVALID_BLUFF = "invalid_bluff"
    GAME_OVER = "game_over"
    GAME_IN_PROGRESS = "game_in_progress"


class CommandRequest(BaseModel):
    """A command sent by the input layer."""
    command: CommandType
    dx: int | None = None               # For move
    dy: int | None = None               # For move
    delta: int | None = None            # For rotate: +1 or -1
    direction: Direction | None = None  # For bluff
    delta_ms: float | None = None       # For tick


class CommandResult(BaseModel):
    """The engine's answer after handling a command."""
    success: bool
    command: CommandType
    description: str                    # Human-readable log line
    reason: RejectReason | None = None  # Set when success is False
    active_turn: Turn
    game_over: bool = False
    winner: Role | None = None
    events: list[GameEvent] = []        # Events this command produced
