"""Query and command endpoints for the single hot-seat session.

Handlers that touch the engine are async so they all run on the event
loop, one at a time, which is the serialization the engine expects.
"""

from typing import Callable

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from engine.mapgen import export_turf_map
from engine.turns import TurnEngine
from models.actions import CommandRequest, CommandResult
from models.actors import Direction

router = APIRouter()


class MoveRequest(BaseModel):
    """Request body for a prisoner step."""
    dx: int
    dy: int


class RotateRequest(BaseModel):
    """Request body for a watcher quarter-turn."""
    delta: int


class BluffRequest(BaseModel):
    """Request body for a watcher bluff."""
    direction: Direction


class TickRequest(BaseModel):
    """Request body for advancing simulated time."""
    delta_ms: float


def _get_engine(request: Request) -> TurnEngine:
    """Get the singleton engine from app state."""
    return request.app.state.engine


def _run(action: Callable[..., CommandResult], *args) -> CommandResult:
    """Run an engine command, turning precondition errors into 400s."""
    try:
        return action(*args)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/state")
async def get_game_state(request: Request) -> dict:
    """Live actor state, turn, and phase (the grid lives at /map)."""
    engine = _get_engine(request)
    state = engine.state
    return {
        "active_turn": state.active_turn.value,
        "phase": state.phase.value,
        "winner": state.winner.value if state.winner else None,
        "turn_number": state.turn_number,
        "grid_size": state.grid.size,
        "ring_count": state.ring_count,
        "ring_thickness": state.ring_thickness,
        "moat_thickness": state.moat_thickness,
        "prisoner": state.prisoner.model_dump(mode="json"),
        "watcher": state.watcher.model_dump(mode="json"),
        "noise_markers": [m.model_dump(mode="json") for m in state.noise_markers],
        "available_commands": [c.value for c in engine.get_available_commands()],
    }


@router.get("/tile/{x}/{y}")
async def get_tile(x: int, y: int, request: Request) -> dict:
    """Tile kind, floor object, and ring index of one cell."""
    engine = _get_engine(request)
    try:
        tile = engine.get_tile(x, y)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return {
        "x": x,
        "y": y,
        "tile": tile.value,
        "floor_object": engine.get_floor_object(x, y).value,
        "ring_index": engine.get_ring_index(x, y),
    }


@router.get("/visibility")
async def get_prisoner_visibility(request: Request) -> list[tuple[int, int]]:
    """Cells the prisoner can currently see, sorted row by row."""
    engine = _get_engine(request)
    return sorted(engine.get_prisoner_visibility(), key=lambda p: (p[1], p[0]))


@router.get("/wedge/{direction}/{x}/{y}")
async def is_in_watcher_wedge(direction: Direction, x: int, y: int, request: Request) -> dict:
    """Whether (x, y) falls in the watcher wedge for `direction`."""
    engine = _get_engine(request)
    return {
        "direction": direction.value,
        "x": x,
        "y": y,
        "in_wedge": engine.is_in_watcher_wedge(direction, x, y),
    }


@router.get("/noise")
async def get_noise_markers(request: Request) -> list[dict]:
    """Live noise markers."""
    engine = _get_engine(request)
    return [m.model_dump(mode="json") for m in engine.get_noise_markers()]


@router.get("/map")
async def get_map(request: Request) -> dict:
    """The whole grid as turf and overlay paths."""
    return export_turf_map(_get_engine(request).state.grid)


@router.get("/log")
async def get_game_log(request: Request) -> list[dict]:
    """Event log for the current game."""
    engine = _get_engine(request)
    return [event.model_dump(mode="json") for event in engine.state.event_log]


@router.get("/history")
async def get_game_history(request: Request) -> list[list[dict]]:
    """Archived logs from all finished games."""
    engine = _get_engine(request)
    return [
        [event.model_dump(mode="json") for event in game]
        for game in engine.state.log_history
    ]


@router.post("/move", response_model=CommandResult)
async def move(body: MoveRequest, request: Request) -> CommandResult:
    """Step the prisoner one cell. Blocked moves come back with success=false."""
    return _run(_get_engine(request).move, body.dx, body.dy)


@router.post("/rotate", response_model=CommandResult)
async def rotate_watcher(body: RotateRequest, request: Request) -> CommandResult:
    """Turn the watcher by +1 (clockwise) or -1."""
    return _run(_get_engine(request).rotate_watcher, body.delta)


@router.post("/bluff", response_model=CommandResult)
async def set_bluff(body: BluffRequest, request: Request) -> CommandResult:
    """Declare a bluff direction for this watcher turn."""
    return _run(_get_engine(request).set_bluff, body.direction)


@router.post("/end-turn", response_model=CommandResult)
async def end_turn(request: Request) -> CommandResult:
    """End the active role's turn."""
    return _run(_get_engine(request).end_turn)


@router.post("/tick", response_model=CommandResult)
async def tick(body: TickRequest, request: Request) -> CommandResult:
    """Advance simulated time so noise markers decay."""
    return _run(_get_engine(request).tick, body.delta_ms / 1000.0)


@router.post("/reset", response_model=CommandResult)
async def reset(request: Request) -> CommandResult:
    """Start a new game after the current one has ended."""
    return _run(_get_engine(request).reset)


@router.post("/command", response_model=CommandResult)
async def submit_command(body: CommandRequest, request: Request) -> CommandResult:
    """Generic entry point taking any CommandRequest."""
    return _run(_get_engine(request).process_command, body)
