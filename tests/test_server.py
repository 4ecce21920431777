"""HTTP and websocket surface of the ASGI app."""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from mazechase.config import ServerSettings
from mazechase.engine import GameEngine
from mazechase.models import Direction
from mazechase.server import create_app, handle_message


@pytest.fixture()
def client() -> Iterator[TestClient]:
    with TestClient(create_app(ServerSettings(database_url=None))) as client:
        yield client


@pytest.fixture()
def db_client(tmp_path: Path) -> Iterator[TestClient]:
    settings = ServerSettings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'scores.db'}")
    with TestClient(create_app(settings)) as client:
        yield client


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["session_active"] is False


def test_press_endpoint(client: TestClient) -> None:
    response = client.post("/api/bridge/press", json={"direction": "up"})
    assert response.status_code == 200
    assert response.json()["message"] == "Button UP pressed"
    assert response.json()["input"] == {"up": True, "down": False, "left": False, "right": False}
    rejected = client.post("/api/bridge/press", json={"direction": "jump"})
    assert rejected.status_code == 400
    assert rejected.json() == {"error": "Invalid direction. Use UP, DOWN, LEFT, or RIGHT"}
    assert client.post("/api/bridge/press", json={}).status_code == 400


def test_leaderboard_without_database(client: TestClient) -> None:
    assert client.get("/api/leaderboard").status_code == 503
    assert client.post("/api/leaderboard", json={"player_name": "Alpha", "score": 10}).status_code == 503


def test_leaderboard_round_trip(db_client: TestClient) -> None:
    created = db_client.post("/api/leaderboard", json={"player_name": "Alpha", "score": 300})
    assert created.status_code == 201
    assert created.json()["score"]["player_name"] == "Alpha"
    db_client.post("/api/leaderboard", json={"player_name": "bravo", "score": 500})
    top = db_client.get("/api/leaderboard", params={"limit": 5}).json()
    assert [row["player_name"] for row in top] == ["bravo", "Alpha"]
    mine = db_client.get("/api/leaderboard/player/ALP").json()
    assert [row["score"] for row in mine] == [300]
    assert db_client.post("/api/leaderboard", json={"player_name": "  ", "score": 5}).status_code == 400
    assert db_client.get("/api/leaderboard", params={"limit": 0}).status_code == 422


def test_websocket_session_flow(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "bridge-status", "payload": {"connected": False, "bridge_count": 0}}

        ws.send_json({"type": "register-bridge", "payload": {"kind": "hardware"}})
        assert ws.receive_json()["payload"] == {"connected": True, "bridge_count": 1}

        ws.send_json({"type": "manual-press", "payload": {"direction": "north"}})
        error = ws.receive_json()
        assert error["type"] == "error"
        assert "UP, DOWN, LEFT, or RIGHT" in error["payload"]["message"]

        ws.send_text("{not json")
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "start-game", "payload": {"player1_name": "Alpha", "player2_name": "Bravo"}})
        started = ws.receive_json()
        assert started == {"type": "game-started", "payload": {"player1_name": "Alpha", "player2_name": "Bravo"}}
        for _ in range(5):
            message = ws.receive_json()
            if message["type"] == "game-update":
                break
        assert message["type"] == "game-update"
        assert message["payload"]["player1"]["name"] == "Alpha"
        assert message["payload"]["game_over"] is False

    assert client.app.state.engine.bridges.status().bridge_count == 0


def test_handle_message_validation() -> None:
    async def scenario() -> None:
        engine = GameEngine(seed=1)
        engine.reset("Alpha", "Bravo")
        assert await handle_message(engine, "c1", ["start-game"]) == "Messages must be JSON objects"
        assert await handle_message(engine, "c1", {"type": "player-input", "payload": []}) == "Payload must be a JSON object"
        for bad_input in ("up", ["up"]):
            reply = await handle_message(engine, "c1", {"type": "player-input", "payload": {"player": 1, "input": bad_input}})
            assert reply == "Input must be a JSON object"
        assert engine.session.player1.direction is Direction.RIGHT
        await handle_message(engine, "c1", {"type": "player-input", "payload": {"player": "2", "input": {"up": True}}})
        assert engine.session.player2.direction is Direction.LEFT
        await handle_message(engine, "c1", {"type": "player-input", "payload": {"player": 2, "input": {"up": True}}})
        assert engine.session.player2.direction is Direction.UP
        await handle_message(engine, "c1", {"type": "bridge-input", "payload": {"down": True}})
        assert engine.session.player1.direction is Direction.DOWN
        assert await handle_message(engine, "c1", {"type": "mystery"}) is None

    asyncio.run(scenario())
