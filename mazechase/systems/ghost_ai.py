"""Target selection for the four ghosts."""
from __future__ import annotations

import random
from typing import Optional

from mazechase import config
from mazechase.models import GameSession, Ghost, Player, Position


class GhostBrain:
    """Chooses where each ghost heads on the current tick.

    Outside power mode every ghost follows its role: role 0 chases player 1,
    role 1 chases player 2, role 2 chases the score leader and role 3 mostly
    wanders. In power mode all ghosts flee from the nearer player.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._random = rng or random.Random()

    def select_target(self, session: GameSession, ghost: Ghost) -> Optional[Position]:
        if session.power_mode_active:
            threat = nearest_player(session, ghost.position).position
            return Position(2 * ghost.position.x - threat.x, 2 * ghost.position.y - threat.y)
        if ghost.role == 0:
            return session.player1.position
        if ghost.role == 1:
            return session.player2.position
        if ghost.role == 2:
            leader = session.player1 if session.player1.score >= session.player2.score else session.player2
            return leader.position
        if self._random.random() < config.ROLE3_TARGET_CHANCE:
            return nearest_player(session, ghost.position).position
        return None


def nearest_player(session: GameSession, origin: Position) -> Player:
    """Return the player closest to ``origin`` by Manhattan distance.

    Player 2 is returned when both are equally close.
    """

    if origin.manhattan(session.player1.position) < origin.manhattan(session.player2.position):
        return session.player1
    return session.player2
