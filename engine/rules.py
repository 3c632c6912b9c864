"""Stealth rules: command legality, movement blocking, win and alert checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from engine.grid import in_bounds
from engine.visibility import get_quadrant, in_watcher_wedge
from models.actions import CommandType, RejectReason
from models.actors import Direction
from models.map import FloorObject, TileKind
from models.game_state import Turn

if TYPE_CHECKING:
    from models.game_state import GameState

PRISONER_COMMANDS = (CommandType.MOVE, CommandType.END_TURN)
WATCHER_COMMANDS = (CommandType.ROTATE, CommandType.BLUFF, CommandType.END_TURN)

BLOCKED_MESSAGES = {
    RejectReason.OUT_OF_BOUNDS: "You hit the edge of the map.",
    RejectReason.WALL: "You hit a wall.",
    RejectReason.MOAT: "The moat blocks your way.",
    RejectReason.DOOR_LOCKED: "You try your lockpicks... the door is locked.",
    RejectReason.WALL_OBJECT: "You bump into a wall.",
    RejectReason.NO_MOVEMENT_POINTS: "You have no movement points left.",
}


def validate_unit_step(dx: int, dy: int) -> Direction:
    """Reject anything that isn't one cardinal step.

    Returns:
        The Direction of the step.

    Raises:
        ValueError: If (dx, dy) is not a unit cardinal vector.
    """
    return Direction.from_vector(dx, dy)


def validate_command(command: CommandType, game_state: GameState) -> tuple[bool, RejectReason | None]:
    """Check whether a command may run in the current phase and turn.

    Args:
        command: The command being attempted.
        game_state: Current game state.

    Returns:
        (valid, reason) tuple; reason is None when valid.
    """
    if game_state.is_over:
        if command == CommandType.RESET:
            return True, None
        return False, RejectReason.GAME_OVER

    if command == CommandType.RESET:
        return False, RejectReason.GAME_IN_PROGRESS

    if command == CommandType.TICK:
        return True, None

    if game_state.active_turn == Turn.PRISONER and command in PRISONER_COMMANDS:
        return True, None
    if game_state.active_turn == Turn.WATCHER and command in WATCHER_COMMANDS:
        return True, None

    return False, RejectReason.NOT_YOUR_TURN


def available_commands(game_state: GameState) -> list[CommandType]:
    """Commands that validate_command would currently accept."""
    return [c for c in CommandType if validate_command(c, game_state)[0]]


def check_move(game_state: GameState, dx: int, dy: int) -> RejectReason | None:
    """Find what, if anything, stops the prisoner stepping by (dx, dy).

    Args:
        game_state: Current game state.
        dx: Horizontal step.
        dy: Vertical step.

    Returns:
        The blocking reason, or None if the move is allowed.
    """
    prisoner = game_state.prisoner
    if prisoner.movement_points <= 0:
        return RejectReason.NO_MOVEMENT_POINTS

    grid = game_state.grid
    nx, ny = prisoner.position[0] + dx, prisoner.position[1] + dy
    if not in_bounds(nx, ny, grid):
        return RejectReason.OUT_OF_BOUNDS

    cell = grid.cell(nx, ny)
    if cell.tile == TileKind.WALL:
        return RejectReason.WALL
    if cell.tile == TileKind.MOAT:
        return RejectReason.MOAT
    if cell.floor_object == FloorObject.DOOR_LOCKED:
        return RejectReason.DOOR_LOCKED
    if cell.floor_object == FloorObject.WALL_OBJECT:
        return RejectReason.WALL_OBJECT
    return None


def check_bluff(game_state: GameState, direction: Direction) -> bool:
    """A bluff may not name the true facing or its opposite."""
    facing = game_state.watcher.facing
    return direction not in (facing, facing.opposite())


def check_escape(game_state: GameState) -> bool:
    """True once the prisoner stands in the outermost ring."""
    x, y = game_state.prisoner.position
    return game_state.grid.cell(x, y).ring_index == game_state.ring_count


def check_capture(game_state: GameState) -> bool:
    """Check if the prisoner is caught.

    Needs a live noise marker on the prisoner's current cell, and that cell
    inside the wedge the watcher is truly facing. End-of-turn noise lands on
    the turn-start cell, so only noise made on the current cell counts.
    """
    pos = game_state.prisoner.position
    noisy = any(m.position == pos and m.ttl > 0 for m in game_state.noise_markers)
    if not noisy:
        return False
    return in_watcher_wedge(game_state.watcher.facing, pos, game_state.grid.center)


def check_paranoia(game_state: GameState) -> bool:
    """True when the prisoner's quadrant matches the true or bluffed facing."""
    quadrant = get_quadrant(game_state.prisoner.position, game_state.grid.center)
    if quadrant is None:
        return False
    watcher = game_state.watcher
    return quadrant in (watcher.facing, watcher.bluff_direction)
