"""Terminal state and winner determination."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from mazechase.models import GameSession

logger = logging.getLogger(__name__)


class WinRules:
    """Decides whether the match is over and who won.

    The checks run in a fixed order and a later match overrides the winner
    chosen by an earlier one within the same tick.
    """

    def update(self, session: GameSession, events: List[Dict[str, object]]) -> bool:
        if session.terminal:
            return True
        p1, p2 = session.players
        if not session.dots and not session.power_pellets:
            self._finish(session, score_leader(session))
        if p1.lives <= 0 and p2.lives <= 0:
            self._finish(session, score_leader(session))
        elif p1.lives <= 0:
            self._finish(session, p2.display_name)
        elif p2.lives <= 0:
            self._finish(session, p1.display_name)
        if session.terminal:
            logger.info("Match finished, winner: %s", session.winner or "draw")
            events.append({"type": "game_over", "winner": session.winner})
        return session.terminal

    @staticmethod
    def _finish(session: GameSession, winner: Optional[str]) -> None:
        session.terminal = True
        session.winner = winner


def score_leader(session: GameSession) -> Optional[str]:
    """Display name of the higher scorer, or ``None`` on a tie."""

    p1, p2 = session.players
    if p1.score > p2.score:
        return p1.display_name
    if p2.score > p1.score:
        return p2.display_name
    return None
