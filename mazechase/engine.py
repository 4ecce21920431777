"""Real time simulation engine for the maze chase match.

The engine owns the single live :class:`~mazechase.models.GameSession`, runs
the fixed period clock and sequences every tick. A tick is plain synchronous
code on the event loop, so input handlers running on the same loop can never
interleave with it.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import random
import time
from typing import Callable, Dict, List, Optional

from . import config
from .broadcast import BRIDGE_INPUT, BRIDGE_STATUS, GAME_STARTED, GAME_UPDATE, Broadcaster
from .input import BridgeRegistry, BridgeStatus, InputRouter, InputSource, parse_direction_token
from .maze import MazeModel, default_maze
from .models import Direction, DirectionIntent, GameSession
from .systems import CollisionSystem, GhostBrain, MovementSystem, WinRules

logger = logging.getLogger(__name__)

ScoreSink = Callable[[str, int], None]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class GameEngine:
    """Simulation core responsible for the single live match."""

    def __init__(
        self,
        seed: Optional[int] = None,
        maze: Optional[MazeModel] = None,
        broadcaster: Optional[Broadcaster] = None,
        score_sink: Optional[ScoreSink] = None,
        tick_ms: int = config.TICK_MS,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self.random = random.Random(seed)
        self.maze = maze or default_maze()
        self.broadcaster = broadcaster or Broadcaster()
        self.router = InputRouter()
        self.bridges = BridgeRegistry()
        self.movement = MovementSystem(self.maze, self.random)
        self.ghost_brain = GhostBrain(self.random)
        self.collisions = CollisionSystem()
        self.rules = WinRules()
        self.session: Optional[GameSession] = None
        self.score_sink = score_sink
        self._clock = clock
        self._tick_interval = tick_ms / 1000
        self._tick_task: Optional[asyncio.Task[None]] = None

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def reset(self, player1_name: str = "", player2_name: str = "") -> GameSession:
        """Replace the session with a fresh one. Does not touch the clock."""

        self.session = GameSession.create(self.maze, player1_name, player2_name)
        return self.session

    async def start_session(self, player1_name: str = "", player2_name: str = "") -> GameSession:
        await self.stop()
        session = self.reset(player1_name, player2_name)
        logger.info("Starting match: %s vs %s", session.player1.display_name, session.player2.display_name)
        self._tick_task = asyncio.create_task(self._run_loop(session))
        self.broadcaster.publish(
            GAME_STARTED,
            {"player1_name": session.player1.display_name, "player2_name": session.player2.display_name},
        )
        return session

    @property
    def running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    async def wait_until_finished(self) -> None:
        if self._tick_task is not None:
            await self._tick_task

    async def stop(self) -> None:
        if self._tick_task:
            self._tick_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._tick_task
            self._tick_task = None

    # ------------------------------------------------------------------
    # Simulation loop
    # ------------------------------------------------------------------
    async def _run_loop(self, session: GameSession) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._tick_interval
        while self.session is session and not session.terminal:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            if self.session is not session:
                break
            next_tick += self._tick_interval
            self.tick()

    def tick(self, now: Optional[float] = None) -> Optional[Dict[str, object]]:
        """Advance the live session by one step and publish a snapshot."""

        session = self.session
        if session is None or session.terminal:
            return None
        now = self._clock() if now is None else now
        events: List[Dict[str, object]] = []
        session.ticks += 1
        self.collisions.advance_timers(session, now, events)
        self.movement.update_players(session)
        for ghost in session.ghosts:
            self.movement.step_ghost(ghost, self.ghost_brain.select_target(session, ghost))
        self.collisions.update(session, now, events)
        finished = self.rules.update(session, events)
        snapshot = self._publish_snapshot(session, events)
        if finished:
            self._record_scores(session)
        return snapshot

    def _publish_snapshot(self, session: GameSession, events: List[Dict[str, object]]) -> Dict[str, object]:
        snapshot = session.serialise()
        snapshot["events"] = events
        self.broadcaster.publish(GAME_UPDATE, snapshot)
        return snapshot

    def _record_scores(self, session: GameSession) -> None:
        if self.score_sink is None:
            logger.warning("No score store attached, skipping score save")
            return
        for player in session.players:
            if not player.name:
                continue
            try:
                self.score_sink(player.name, player.score)
            except Exception:
                logger.exception("Failed to hand off score for %s", player.name)

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------
    def apply_player_input(self, player_index: int, intent: DirectionIntent) -> Optional[Direction]:
        return self.router.route(self.session, InputSource.NETWORK_PLAYER, intent, player_index)

    def apply_bridge_input(
        self, intent: DirectionIntent, source: InputSource = InputSource.HARDWARE_BRIDGE
    ) -> Optional[Direction]:
        direction = self.router.route(self.session, source, intent)
        self.broadcaster.publish(BRIDGE_INPUT, intent.serialise())
        if self.session is not None:
            self._publish_snapshot(self.session, [])
        return direction

    def press(self, token: object) -> DirectionIntent:
        """Single-shot administrative command, handled like a bridge press."""

        intent = parse_direction_token(token)
        self.apply_bridge_input(intent)
        return intent

    # ------------------------------------------------------------------
    # Bridge connectivity
    # ------------------------------------------------------------------
    def register_bridge(self, connection_id: str, source: InputSource = InputSource.HARDWARE_BRIDGE) -> BridgeStatus:
        status = self.bridges.register(connection_id, source)
        self.broadcaster.publish(BRIDGE_STATUS, status.serialise())
        return status

    def unregister_bridge(self, connection_id: str) -> bool:
        if not self.bridges.unregister(connection_id):
            return False
        self.broadcaster.publish(BRIDGE_STATUS, self.bridges.status().serialise())
        return True


__all__ = ["GameEngine", "ScoreSink"]
