"""FastAPI app entry point for the Opticon engine."""

from fastapi import FastAPI

from api.game import router as game_router
from api.ws import relay_event, router as ws_router
from config import GAME_NAME, configure_logging, load_game_config
from engine.turns import TurnEngine

configure_logging()

app = FastAPI(
    title="Opticon",
    description="Stealth pursuit engine: a prisoner, a watcher, and concentric rings",
    version="0.1.0",
)

# One engine per process; every route reads and commands this instance
app.state.engine = TurnEngine(load_game_config())
app.state.engine.subscribe(relay_event)

app.include_router(game_router, prefix="/game", tags=["Game"])
app.include_router(ws_router, prefix="/game", tags=["WebSocket"])


@app.get("/")
def root() -> dict:
    """Root endpoint returning server info."""
    return {"name": GAME_NAME, "version": "0.1.0", "status": "running"}


@app.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {"healthy": True}
