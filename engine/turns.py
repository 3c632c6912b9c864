"""Turn orchestration: the engine that owns one stealth session."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Callable

from engine.grid import get_floor_object, get_ring_index, get_tile, manhattan_distance
from engine.mapgen import generate_map
from engine.rules import (
    BLOCKED_MESSAGES,
    available_commands,
    check_bluff,
    check_capture,
    check_escape,
    check_move,
    check_paranoia,
    validate_command,
    validate_unit_step,
)
from engine.visibility import get_quadrant, in_watcher_wedge, prisoner_visibility
from models.actions import CommandRequest, CommandResult, CommandType, RejectReason
from models.actors import Direction, NoiseMarker, Prisoner
from models.game_state import (
    EventKind,
    GameConfig,
    GameEvent,
    GamePhase,
    GameState,
    Role,
    Turn,
)
from models.map import FloorObject, Grid, TileKind

logger = logging.getLogger(__name__)

EventListener = Callable[[GameEvent], None]

IGNORED_MESSAGES = {
    RejectReason.NOT_YOUR_TURN: "It's not your turn.",
    RejectReason.ALREADY_ROTATED: "The watcher has already rotated this turn.",
    RejectReason.INVALID_BLUFF: "A bluff can't name the true facing or its opposite.",
    RejectReason.GAME_OVER: "The game is over.",
    RejectReason.GAME_IN_PROGRESS: "The game is still in progress.",
}

COMMAND_ROLES = {
    CommandType.MOVE: Role.PRISONER,
    CommandType.ROTATE: Role.WATCHER,
    CommandType.BLUFF: Role.WATCHER,
    CommandType.TICK: Role.SYSTEM,
    CommandType.RESET: Role.SYSTEM,
}


def find_start_position(grid: Grid, offset: tuple[int, int]) -> tuple[int, int]:
    """Pick the prisoner's spawn cell.

    Uses center + offset when that cell is open floor inside the escape
    ring, otherwise the nearest such cell.

    Raises:
        ValueError: If no playable floor cell exists.
    """
    cx, cy = grid.center
    preferred = (cx + offset[0], cy + offset[1])

    candidates = [
        (cell.x, cell.y)
        for row in grid.cells
        for cell in row
        if cell.tile == TileKind.FLOOR
        and cell.floor_object == FloorObject.NONE
        and 1 <= cell.ring_index < grid.ring_count
    ]
    if not candidates:
        raise ValueError("Map has no open floor cell for the prisoner to start on")
    if preferred in candidates:
        return preferred
    return min(candidates, key=lambda pos: (manhattan_distance(pos, preferred), pos[1], pos[0]))


def new_game_state(config: GameConfig, rng: random.Random | None = None) -> GameState:
    """Generate a map and place both roles in their starting state."""
    grid = generate_map(config, rng)
    start = find_start_position(grid, config.start_offset)
    return GameState(
        config=config,
        grid=grid,
        prisoner=Prisoner(
            position=start,
            movement_points=config.max_mp,
            turn_start_position=start,
        ),
    )


class TurnEngine:
    """Owns the mutable state of one session and applies commands to it.

    Calls must be serialized by the caller; nothing here is thread-safe.
    """

    def __init__(self, config: GameConfig | None = None, rng: random.Random | None = None):
        self.config = config or GameConfig()
        self._rng = rng
        self._listeners: list[EventListener] = []
        self._pending: list[GameEvent] = []
        self.state = new_game_state(self.config, rng)
        logger.info(
            "New session: %dx%d grid, %d ring(s), prisoner at %s",
            self.config.grid_size, self.config.grid_size,
            self.state.ring_count, self.state.prisoner.position,
        )

    # ------------------------------------------------------------------
    # Event stream
    # ------------------------------------------------------------------

    def subscribe(self, listener: EventListener) -> None:
        """Register a callback that receives each logged event once its command finishes."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _log(
        self,
        role: Role,
        kind: EventKind,
        description: str,
        details: dict | None = None,
    ) -> GameEvent:
        event = GameEvent(
            turn_number=self.state.turn_number,
            role=role,
            kind=kind,
            description=description,
            details=details or {},
            timestamp=datetime.now(timezone.utc),
        )
        self.state.event_log.append(event)
        self._pending.append(event)
        logger.debug("[%s] %s", kind.value, description)
        return event

    def _notify(self, events: list[GameEvent]) -> None:
        """Hand finished events to listeners; a failing listener is logged and skipped."""
        for event in events:
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:
                    logger.exception("Event listener %r failed on %s", listener, event.kind.value)

    def _result(
        self,
        command: CommandType,
        success: bool,
        description: str,
        reason: RejectReason | None = None,
    ) -> CommandResult:
        events, self._pending = self._pending, []
        self._notify(events)
        return CommandResult(
            success=success,
            command=command,
            description=description,
            reason=reason,
            active_turn=self.state.active_turn,
            game_over=self.state.is_over,
            winner=self.state.winner,
            events=events,
        )

    def _ignore(self, command: CommandType, reason: RejectReason, quiet: bool = False) -> CommandResult:
        description = IGNORED_MESSAGES[reason]
        if not quiet:
            role = COMMAND_ROLES.get(command, Role(self.state.active_turn.value))
            self._log(role, EventKind.IGNORED, description, {
                "command": command.value,
                "reason": reason.value,
            })
        return self._result(command, False, description, reason)

    def _check(self, command: CommandType) -> CommandResult | None:
        valid, reason = validate_command(command, self.state)
        if valid:
            return None
        return self._ignore(command, reason, quiet=command == CommandType.TICK)

    def _push_noise(self, position: tuple[int, int]) -> NoiseMarker:
        marker = NoiseMarker(position=position, ttl=self.config.noise_ttl)
        self.state.noise_markers.append(marker)
        return marker

    def _finish(self, winner: Role, kind: EventKind, description: str) -> None:
        self.state.phase = GamePhase.OVER
        self.state.winner = winner
        self._log(winner, kind, description, {"winner": winner.value})
        logger.info("Game over: %s wins on turn %d", winner.value, self.state.turn_number)

    # ------------------------------------------------------------------
    # Prisoner commands
    # ------------------------------------------------------------------

    def move(self, dx: int, dy: int) -> CommandResult:
        """Step the prisoner one cell.

        Blocked moves cost nothing. Glass and unlocked doors make noise on
        the spot; a door stays open afterwards. Reaching the outermost ring
        ends the game.

        Raises:
            ValueError: If (dx, dy) is not a unit cardinal step.
        """
        direction = validate_unit_step(dx, dy)
        rejected = self._check(CommandType.MOVE)
        if rejected is not None:
            return rejected

        prisoner = self.state.prisoner
        nx, ny = prisoner.position[0] + dx, prisoner.position[1] + dy
        reason = check_move(self.state, dx, dy)
        if reason is not None:
            description = BLOCKED_MESSAGES[reason]
            self._log(Role.PRISONER, EventKind.BLOCKED, description, {
                "reason": reason.value,
                "target": (nx, ny),
            })
            return self._result(CommandType.MOVE, False, description, reason)

        prisoner.position = (nx, ny)
        prisoner.movement_points -= 1
        self._log(Role.PRISONER, EventKind.MOVE, f"Prisoner moves to ({nx}, {ny}).", {
            "position": (nx, ny),
            "movement_points": prisoner.movement_points,
            "direction": direction.value,
        })

        cell = self.state.grid.cell(nx, ny)
        if cell.floor_object == FloorObject.GLASS:
            self._push_noise((nx, ny))
            self._log(Role.PRISONER, EventKind.GLASS, f"Glass shards crunch at ({nx}, {ny})", {
                "position": (nx, ny),
            })
        elif cell.floor_object == FloorObject.DOOR:
            self._push_noise((nx, ny))
            cell.floor_object = FloorObject.NONE
            self._log(Role.PRISONER, EventKind.DOOR_OPENED, f"The door creaks open at ({nx}, {ny})", {
                "position": (nx, ny),
            })

        if check_escape(self.state):
            self._finish(Role.PRISONER, EventKind.ESCAPE, "The prisoner slips past the last ring and escapes!")

        return self._result(CommandType.MOVE, True, f"Prisoner moves to ({nx}, {ny}).")

    # ------------------------------------------------------------------
    # Watcher commands
    # ------------------------------------------------------------------

    def rotate_watcher(self, delta: int) -> CommandResult:
        """Turn the watcher a quarter-turn; once per watcher turn.

        Raises:
            ValueError: If delta is not +1 or -1.
        """
        if delta not in (1, -1):
            raise ValueError(f"Rotation delta must be +1 or -1, got {delta}")
        rejected = self._check(CommandType.ROTATE)
        if rejected is not None:
            return rejected

        watcher = self.state.watcher
        if watcher.has_rotated_this_turn:
            return self._ignore(CommandType.ROTATE, RejectReason.ALREADY_ROTATED)

        watcher.facing = watcher.facing.rotated(delta)
        watcher.has_rotated_this_turn = True
        description = f"Watcher rotated to {watcher.facing.label}"
        self._log(Role.WATCHER, EventKind.ROTATE, description, {"facing": watcher.facing.value})
        return self._result(CommandType.ROTATE, True, description)

    def set_bluff(self, direction: Direction | str) -> CommandResult:
        """Declare a fake facing for the prisoner to worry about.

        Raises:
            ValueError: If direction is not a known Direction.
        """
        direction = Direction(direction)
        rejected = self._check(CommandType.BLUFF)
        if rejected is not None:
            return rejected

        if not check_bluff(self.state, direction):
            return self._ignore(CommandType.BLUFF, RejectReason.INVALID_BLUFF)

        self.state.watcher.bluff_direction = direction
        description = f"Watcher bluff declared: {direction.label}"
        self._log(Role.WATCHER, EventKind.BLUFF, description, {"bluff_direction": direction.value})
        return self._result(CommandType.BLUFF, True, description)

    # ------------------------------------------------------------------
    # Shared commands
    # ------------------------------------------------------------------

    def end_turn(self) -> CommandResult:
        """Hand the turn to the other role."""
        rejected = self._check(CommandType.END_TURN)
        if rejected is not None:
            return rejected

        if self.state.active_turn == Turn.PRISONER:
            self._end_prisoner_turn()
        else:
            self._end_watcher_turn()

        description = self.state.event_log[-1].description
        return self._result(CommandType.END_TURN, True, description)

    def _end_prisoner_turn(self) -> None:
        state = self.state
        prisoner = state.prisoner
        start = prisoner.turn_start_position
        moved = manhattan_distance(start, prisoner.position)
        if moved >= 2:
            self._push_noise(start)
            self._log(Role.PRISONER, EventKind.NOISE, f"Noise reported at ({start[0]}, {start[1]})", {
                "position": start,
                "distance_moved": moved,
            })

        prisoner.movement_points = 0
        state.watcher.has_rotated_this_turn = False
        state.active_turn = Turn.WATCHER
        self._log(Role.PRISONER, EventKind.END_TURN, "Prisoner ends their turn. Watcher to act.")
        state.turn_number += 1

        if check_capture(state):
            x, y = prisoner.position
            self._finish(Role.WATCHER, EventKind.CAPTURE, f"The watcher spots the prisoner at ({x}, {y})!")

    def _end_watcher_turn(self) -> None:
        state = self.state
        if check_paranoia(state):
            quadrant = get_quadrant(state.prisoner.position, state.grid.center)
            self._log(Role.PRISONER, EventKind.PARANOIA, "You feel like you're being watched...", {
                "quadrant": quadrant.value if quadrant else None,
            })

        state.watcher.bluff_direction = None
        state.prisoner.movement_points = self.config.max_mp
        state.prisoner.turn_start_position = state.prisoner.position
        state.active_turn = Turn.PRISONER
        self._log(Role.WATCHER, EventKind.END_TURN, "Watcher ends their turn. Prisoner to act.")
        state.turn_number += 1

    def tick(self, delta_seconds: float) -> CommandResult:
        """Age every noise marker and drop the expired ones.

        Raises:
            ValueError: If delta_seconds is negative.
        """
        if delta_seconds < 0:
            raise ValueError(f"Tick delta must not be negative, got {delta_seconds}")
        rejected = self._check(CommandType.TICK)
        if rejected is not None:
            return rejected

        for marker in self.state.noise_markers:
            marker.ttl -= delta_seconds
        before = len(self.state.noise_markers)
        self.state.noise_markers = [m for m in self.state.noise_markers if m.ttl > 0]
        faded = before - len(self.state.noise_markers)
        return self._result(CommandType.TICK, True, f"{faded} noise marker(s) faded.")

    def reset(self) -> CommandResult:
        """Start a new game on a freshly generated map once the last one ended."""
        rejected = self._check(CommandType.RESET)
        if rejected is not None:
            return rejected

        history = self.state.log_history
        history.append(list(self.state.event_log))
        self.state = new_game_state(self.config, self._rng)
        self.state.log_history = history
        self._log(Role.SYSTEM, EventKind.RESET, "A new game begins.")
        return self._result(CommandType.RESET, True, "A new game begins.")

    def process_command(self, request: CommandRequest) -> CommandResult:
        """Dispatch a CommandRequest to the matching command.

        Raises:
            ValueError: If a field the command needs is missing or invalid.
        """
        command = request.command
        if command == CommandType.MOVE:
            if request.dx is None or request.dy is None:
                raise ValueError("Move command requires dx and dy")
            return self.move(request.dx, request.dy)
        if command == CommandType.ROTATE:
            if request.delta is None:
                raise ValueError("Rotate command requires delta")
            return self.rotate_watcher(request.delta)
        if command == CommandType.BLUFF:
            if request.direction is None:
                raise ValueError("Bluff command requires direction")
            return self.set_bluff(request.direction)
        if command == CommandType.END_TURN:
            return self.end_turn()
        if command == CommandType.TICK:
            if request.delta_ms is None:
                raise ValueError("Tick command requires delta_ms")
            return self.tick(request.delta_ms / 1000.0)
        if command == CommandType.RESET:
            return self.reset()
        raise ValueError(f"Unknown command: {command}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_tile(self, x: int, y: int) -> TileKind:
        return get_tile(x, y, self.state.grid)

    def get_ring_index(self, x: int, y: int) -> int:
        return get_ring_index(x, y, self.state.grid)

    def get_floor_object(self, x: int, y: int) -> FloorObject:
        return get_floor_object(x, y, self.state.grid)

    def get_prisoner_visibility(self) -> set[tuple[int, int]]:
        return prisoner_visibility(self.state.grid, self.state.prisoner.position)

    def is_in_watcher_wedge(self, direction: Direction | str, x: int, y: int) -> bool:
        return in_watcher_wedge(Direction(direction), (x, y), self.state.grid.center)

    def get_noise_markers(self) -> list[NoiseMarker]:
        return [m.model_copy() for m in self.state.noise_markers]

    def get_game_state(self) -> GameState:
        """A deep copy that collaborators can read without touching the engine."""
        return self.state.model_copy(deep=True)

    def get_available_commands(self) -> list[CommandType]:
        return available_commands(self.state)
