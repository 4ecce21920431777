"""ASGI application exposing the maze chase match over websockets."""
from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from . import config
from .bridge import SimulatedBridge
from .broadcast import BRIDGE_STATUS, ERROR, Message, offer
from .config import ServerSettings
from .engine import GameEngine
from .input import InputSource, InvalidDirectionToken
from .leaderboard import leaderboard_router
from .models import DirectionIntent
from .storage import ScoreRecorder, ScoreStore

logger = logging.getLogger(__name__)


class PressRequest(BaseModel):
    direction: Optional[str] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: ServerSettings = app.state.settings
    store: ScoreStore = app.state.store
    engine: GameEngine = app.state.engine
    if store.configured:
        try:
            await store.create_schema()
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Score database unavailable, continuing without it: %s", exc)
    else:
        logger.warning("No database URL configured, scores will not be saved")
    bridge = SimulatedBridge(engine) if settings.simulated_bridge else None
    if bridge is not None:
        await bridge.start()
    try:
        yield
    finally:
        if bridge is not None:
            await bridge.stop()
        await engine.stop()
        await app.state.recorder.drain()
        await store.dispose()
        logger.info("Stop Server")


def create_app(settings: Optional[ServerSettings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or ServerSettings.from_env()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title=config.GAME_NAME, version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        allow_credentials=True,
    )
    store = ScoreStore(settings.database_url)
    recorder = ScoreRecorder(store)
    app.state.settings = settings
    app.state.store = store
    app.state.recorder = recorder
    app.state.engine = GameEngine(score_sink=recorder.submit, tick_ms=settings.tick_ms)
    app.include_router(leaderboard_router)
    app.add_api_route("/", healthcheck, methods=["GET"])
    app.add_api_route("/api/bridge/press", press_button, methods=["POST"])
    app.add_api_websocket_route("/ws", websocket_endpoint)
    return app


async def healthcheck(request: Request) -> Dict[str, Any]:
    """Simple readiness probe for container orchestration."""

    engine: GameEngine = request.app.state.engine
    return {
        "message": f"{config.GAME_NAME} backend is running!",
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "session_active": engine.running,
    }


async def press_button(body: PressRequest, request: Request) -> Any:
    """Manual bridge press, useful for testing without hardware."""

    engine: GameEngine = request.app.state.engine
    try:
        intent = engine.press(body.direction)
    except InvalidDirectionToken as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    return {
        "success": True,
        "message": f"Button {body.direction.strip().upper()} pressed",
        "input": intent.serialise(),
    }


async def websocket_endpoint(websocket: WebSocket) -> None:
    engine: GameEngine = websocket.app.state.engine
    await websocket.accept()
    connection_id = uuid.uuid4().hex
    queue = engine.broadcaster.subscribe()
    offer(queue, Message(BRIDGE_STATUS, engine.bridges.status().serialise()))
    sender = asyncio.create_task(_forward(websocket, queue))
    logger.info("Client connected: %s", connection_id)
    try:
        while True:
            try:
                data = await websocket.receive_json()
            except ValueError:
                offer(queue, Message(ERROR, {"message": "Malformed JSON"}))
                continue
            error = await handle_message(engine, connection_id, data)
            if error:
                offer(queue, Message(ERROR, {"message": error}))
    except WebSocketDisconnect:
        pass
    finally:
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
        engine.broadcaster.unsubscribe(queue)
        if not engine.unregister_bridge(connection_id):
            logger.info("Client disconnected: %s", connection_id)


async def _forward(websocket: WebSocket, queue: "asyncio.Queue[Message]") -> None:
    while True:
        message = await queue.get()
        try:
            await websocket.send_json(message.serialise())
        except (RuntimeError, WebSocketDisconnect):
            return


async def handle_message(engine: GameEngine, connection_id: str, data: Any) -> Optional[str]:
    """Apply one inbound websocket message. Returns an error text for the sender."""

    if not isinstance(data, dict):
        return "Messages must be JSON objects"
    msg_type = str(data.get("type", "")).lower()
    payload = data.get("payload") or {}
    if not isinstance(payload, dict):
        return "Payload must be a JSON object"

    if msg_type == "start-game":
        await engine.start_session(str(payload.get("player1_name") or ""), str(payload.get("player2_name") or ""))
    elif msg_type == "player-input":
        player = payload.get("player")
        if not isinstance(player, int):
            logger.debug("Ignoring player-input without a player index")
            return None
        raw_input = payload.get("input")
        if raw_input is not None and not isinstance(raw_input, dict):
            return "Input must be a JSON object"
        engine.apply_player_input(player, DirectionIntent.from_payload(raw_input))
    elif msg_type == "register-bridge":
        engine.register_bridge(connection_id, _bridge_source(payload.get("kind")))
    elif msg_type == "bridge-input":
        source = engine.bridges.source_for(connection_id) or InputSource.HARDWARE_BRIDGE
        engine.apply_bridge_input(DirectionIntent.from_payload(payload), source)
    elif msg_type == "bridge-heartbeat":
        logger.debug("Bridge heartbeat from %s", connection_id)
    elif msg_type == "manual-press":
        try:
            engine.press(payload.get("direction"))
        except InvalidDirectionToken as exc:
            return str(exc)
    else:
        logger.debug("Ignoring unknown message type %r", msg_type)
    return None


def _bridge_source(kind: object) -> InputSource:
    if kind == InputSource.SIMULATED_BRIDGE.value:
        return InputSource.SIMULATED_BRIDGE
    return InputSource.HARDWARE_BRIDGE


app = create_app()


__all__ = ["app", "create_app", "handle_message"]
