"""Tests for command legality, move blocking, and win/alert checks."""

import pytest

from engine.rules import (
    available_commands,
    check_bluff,
    check_capture,
    check_escape,
    check_move,
    check_paranoia,
    validate_command,
    validate_unit_step,
)
from engine.turns import new_game_state
from models.actions import CommandType, RejectReason
from models.actors import Direction, NoiseMarker
from models.game_state import GameConfig, GamePhase, GameState, Turn
from models.map import FloorObject, TileKind


def _make_game_state(**overrides) -> GameState:
    """Helper: fresh game on an open 31x31 map, prisoner at (19, 21)."""
    values = dict(wall_chance=0.0, object_chance=0.0)
    values.update(overrides)
    return new_game_state(GameConfig(**values))


class TestValidateUnitStep:
    """Tests for validate_unit_step()."""

    @pytest.mark.parametrize("dx,dy,direction", [
        (1, 0, Direction.EAST),
        (-1, 0, Direction.WEST),
        (0, 1, Direction.SOUTH),
        (0, -1, Direction.NORTH),
    ])
    def test_cardinal_steps_name_their_direction(self, dx, dy, direction):
        assert validate_unit_step(dx, dy) == direction
        assert direction.vector == (dx, dy)

    @pytest.mark.parametrize("dx,dy", [(0, 0), (1, 1), (2, 0), (0, -3)])
    def test_other_vectors_rejected(self, dx, dy):
        with pytest.raises(ValueError, match="cardinal"):
            validate_unit_step(dx, dy)


class TestValidateCommand:
    """Tests for validate_command()."""

    def test_prisoner_turn(self):
        gs = _make_game_state()
        assert validate_command(CommandType.MOVE, gs) == (True, None)
        assert validate_command(CommandType.END_TURN, gs) == (True, None)
        assert validate_command(CommandType.ROTATE, gs) == (False, RejectReason.NOT_YOUR_TURN)
        assert validate_command(CommandType.BLUFF, gs) == (False, RejectReason.NOT_YOUR_TURN)

    def test_watcher_turn(self):
        gs = _make_game_state()
        gs.active_turn = Turn.WATCHER
        assert validate_command(CommandType.MOVE, gs) == (False, RejectReason.NOT_YOUR_TURN)
        assert validate_command(CommandType.ROTATE, gs) == (True, None)
        assert validate_command(CommandType.BLUFF, gs) == (True, None)

    def test_tick_any_live_turn(self):
        gs = _make_game_state()
        assert validate_command(CommandType.TICK, gs)[0]
        gs.active_turn = Turn.WATCHER
        assert validate_command(CommandType.TICK, gs)[0]

    def test_reset_only_when_over(self):
        gs = _make_game_state()
        assert validate_command(CommandType.RESET, gs) == (False, RejectReason.GAME_IN_PROGRESS)
        gs.phase = GamePhase.OVER
        assert validate_command(CommandType.RESET, gs) == (True, None)

    def test_game_over_freezes_everything_else(self):
        gs = _make_game_state()
        gs.phase = GamePhase.OVER
        for command in (CommandType.MOVE, CommandType.END_TURN, CommandType.TICK, CommandType.ROTATE):
            assert validate_command(command, gs) == (False, RejectReason.GAME_OVER)

    def test_available_commands(self):
        gs = _make_game_state()
        assert available_commands(gs) == [CommandType.MOVE, CommandType.END_TURN, CommandType.TICK]
        gs.phase = GamePhase.OVER
        assert available_commands(gs) == [CommandType.RESET]


class TestCheckMove:
    """Tests for check_move()."""

    def test_open_floor(self):
        assert check_move(_make_game_state(), 1, 0) is None

    def test_no_movement_points(self):
        gs = _make_game_state()
        gs.prisoner.movement_points = 0
        assert check_move(gs, 1, 0) == RejectReason.NO_MOVEMENT_POINTS

    def test_wall(self):
        gs = _make_game_state()
        gs.grid.cell(20, 21).tile = TileKind.WALL
        assert check_move(gs, 1, 0) == RejectReason.WALL

    def test_moat(self):
        gs = _make_game_state()
        gs.prisoner.position = (20, 15)
        assert check_move(gs, -1, 0) == RejectReason.MOAT

    def test_out_of_bounds(self):
        gs = _make_game_state()
        gs.prisoner.position = (0, 15)
        assert check_move(gs, -1, 0) == RejectReason.OUT_OF_BOUNDS

    def test_locked_door_and_wall_object(self):
        gs = _make_game_state()
        gs.grid.cell(20, 21).floor_object = FloorObject.DOOR_LOCKED
        gs.grid.cell(18, 21).floor_object = FloorObject.WALL_OBJECT
        assert check_move(gs, 1, 0) == RejectReason.DOOR_LOCKED
        assert check_move(gs, -1, 0) == RejectReason.WALL_OBJECT

    def test_glass_and_door_allowed(self):
        gs = _make_game_state()
        gs.grid.cell(20, 21).floor_object = FloorObject.GLASS
        gs.grid.cell(18, 21).floor_object = FloorObject.DOOR
        assert check_move(gs, 1, 0) is None
        assert check_move(gs, -1, 0) is None


class TestCheckBluff:
    """Tests for check_bluff()."""

    def test_true_facing_and_opposite_rejected(self):
        gs = _make_game_state()
        assert not check_bluff(gs, Direction.NORTH)
        assert not check_bluff(gs, Direction.SOUTH)

    def test_sideways_accepted(self):
        gs = _make_game_state()
        assert check_bluff(gs, Direction.EAST)
        assert check_bluff(gs, Direction.WEST)


class TestCheckEscape:
    """Tests for check_escape()."""

    def test_inner_ring_not_escape(self):
        assert not check_escape(_make_game_state())

    def test_outer_ring_is_escape(self):
        gs = _make_game_state()
        gs.prisoner.position = (28, 15)
        assert check_escape(gs)


class TestCheckCapture:
    """Tests for check_capture()."""

    def test_needs_noise_and_wedge(self):
        gs = _make_game_state()
        gs.watcher.facing = Direction.SOUTH
        gs.noise_markers.append(NoiseMarker(position=(19, 21), ttl=4.0))
        assert check_capture(gs)

    def test_noise_outside_wedge(self):
        gs = _make_game_state()
        gs.noise_markers.append(NoiseMarker(position=(19, 21), ttl=4.0))
        assert not check_capture(gs)  # Facing north

    def test_wedge_without_noise(self):
        gs = _make_game_state()
        gs.watcher.facing = Direction.SOUTH
        assert not check_capture(gs)

    def test_noise_elsewhere(self):
        gs = _make_game_state()
        gs.watcher.facing = Direction.SOUTH
        gs.noise_markers.append(NoiseMarker(position=(19, 22), ttl=4.0))
        assert not check_capture(gs)

    def test_dead_marker_ignored(self):
        gs = _make_game_state()
        gs.watcher.facing = Direction.SOUTH
        gs.noise_markers.append(NoiseMarker(position=(19, 21), ttl=0.0))
        assert not check_capture(gs)

    def test_bluff_does_not_capture(self):
        gs = _make_game_state()
        gs.watcher.facing = Direction.EAST
        gs.watcher.bluff_direction = Direction.SOUTH
        gs.noise_markers.append(NoiseMarker(position=(19, 21), ttl=4.0))
        assert not check_capture(gs)


class TestCheckParanoia:
    """Tests for check_paranoia()."""

    def test_true_facing_matches(self):
        gs = _make_game_state()
        gs.watcher.facing = Direction.SOUTH
        assert check_paranoia(gs)

    def test_bluff_matches(self):
        gs = _make_game_state()
        gs.watcher.facing = Direction.EAST
        gs.watcher.bluff_direction = Direction.SOUTH
        assert check_paranoia(gs)

    def test_no_match(self):
        gs = _make_game_state()
        gs.watcher.bluff_direction = Direction.EAST
        assert not check_paranoia(gs)
