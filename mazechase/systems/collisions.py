"""Collectible pickup, ghost contact and timed effect expiry."""
from __future__ import annotations

import logging
from typing import Dict, List, Set, Tuple

from mazechase import config
from mazechase.models import GameSession, Ghost, Player, Position

logger = logging.getLogger(__name__)

Events = List[Dict[str, object]]


class CollisionSystem:
    """Applies every contact rule for one tick."""

    def advance_timers(self, session: GameSession, now: float, events: Events) -> None:
        if session.power_mode.expired(now):
            session.power_mode.clear()
            for ghost in session.ghosts:
                ghost.restore_color()
            events.append({"type": "power_mode_ended"})
        for player in session.players:
            if player.invulnerability.expired(now):
                player.invulnerability.clear()

    def update(self, session: GameSession, now: float, events: Events) -> None:
        self.collect_dots(session)
        if self.collect_power_pellets(session):
            session.power_mode.activate(now)
            for ghost in session.ghosts:
                ghost.make_vulnerable()
            events.append({"type": "power_mode_started"})
        for ghost in session.ghosts:
            for player in session.players:
                if ghost.position == player.position:
                    self._resolve_contact(session, ghost, player, now, events)

    def collect_dots(self, session: GameSession) -> int:
        return _consume(session.dots, session.players, config.DOT_POINTS)

    def collect_power_pellets(self, session: GameSession) -> int:
        return _consume(session.power_pellets, session.players, config.PELLET_POINTS)

    def _resolve_contact(self, session: GameSession, ghost: Ghost, player: Player, now: float, events: Events) -> None:
        if session.power_mode_active:
            player.score += config.GHOST_POINTS
            ghost.position = ghost.home
            ghost.restore_color()
            events.append({"type": "ghost_eaten", "ghost": ghost.role, "player": player.index})
            return
        if player.invulnerable:
            return
        player.lives -= 1
        player.invulnerability.activate(now)
        player.respawn()
        logger.debug("Player %s caught by ghost %s, %s lives left", player.index, ghost.role, player.lives)
        events.append({"type": "life_lost", "ghost": ghost.role, "player": player.index, "lives": player.lives})


def _consume(cells: Set[Position], players: Tuple[Player, ...], points: int) -> int:
    """Remove every cell a player stands on, awarding ``points`` per player."""

    consumed = 0
    for player in players:
        if player.position in cells:
            player.score += points
    for player in players:
        if player.position in cells:
            cells.discard(player.position)
            consumed += 1
    return consumed
