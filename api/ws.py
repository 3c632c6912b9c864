"""WebSocket endpoint streaming engine events to audio/UI listeners."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from models.game_state import GameEvent

logger = logging.getLogger(__name__)

router = APIRouter()

# Connected clients
connections: list[WebSocket] = []

# Strong references so pending broadcasts aren't garbage collected
_pending: set[asyncio.Task] = set()


async def broadcast(message: dict[str, Any]) -> None:
    """Send a message to all connected WebSocket clients.

    Args:
        message: The JSON-serializable message to send.
    """
    disconnected = []
    for ws in list(connections):
        try:
            await ws.send_json(message)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.info("Dropping websocket client: %s", e)
            disconnected.append(ws)
    for ws in disconnected:
        if ws in connections:
            connections.remove(ws)


def relay_event(event: GameEvent) -> None:
    """Engine listener: schedule a broadcast of `event`.

    Engine commands run inside async route handlers, so there is always a
    running loop to schedule on. Without one the event is only logged.
    """
    if not connections:
        return
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.warning("No running loop; event %s not relayed", event.kind.value)
        return
    task = loop.create_task(broadcast({"type": "event", **event.model_dump(mode="json")}))
    _pending.add(task)
    task.add_done_callback(_pending.discard)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """Stream every GameEvent as JSON, starting with a 'connected' hello."""
    engine = websocket.app.state.engine
    await websocket.accept()
    connections.append(websocket)

    try:
        await websocket.send_json({
            "type": "connected",
            "active_turn": engine.state.active_turn.value,
            "turn_number": engine.state.turn_number,
        })

        # Keep connection alive; client messages are ignored
        while True:
            try:
                await websocket.receive_text()
            except WebSocketDisconnect:
                break
    finally:
        if websocket in connections:
            connections.remove(websocket)
