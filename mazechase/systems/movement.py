"""Grid movement for players and ghosts."""
from __future__ import annotations

import random
from typing import Optional

from mazechase.maze import MazeModel
from mazechase.models import Direction, GameSession, Ghost, Player, Position


class MovementSystem:
    """Resolves one cell of motion per mover each tick.

    Players are blocked by walls. Ghosts only have to stay inside the grid,
    which lets them cross the ghost house and its walls freely.
    """

    def __init__(self, maze: MazeModel, rng: Optional[random.Random] = None) -> None:
        self._maze = maze
        self._random = rng or random.Random()

    def step_player(self, player: Player) -> bool:
        candidate = self._maze.wrap(player.position.step(player.direction))
        if not self._maze.is_passable(candidate):
            # Keep facing the obstruction until the player redirects.
            return False
        player.position = candidate
        return True

    def step_ghost(self, ghost: Ghost, target: Optional[Position]) -> bool:
        if target is None:
            ghost.direction = self._random.choice(list(Direction))
        else:
            ghost.direction = direction_towards(ghost.position, target)
        candidate = self._maze.wrap(ghost.position.step(ghost.direction))
        if not self._maze.in_bounds(candidate):
            return False
        ghost.position = candidate
        return True

    def update_players(self, session: GameSession) -> None:
        for player in session.players:
            self.step_player(player)


def direction_towards(origin: Position, target: Position) -> Direction:
    """Pick the axis with the larger gap; ties move horizontally."""

    dx = target.x - origin.x
    dy = target.y - origin.y
    if abs(dy) > abs(dx):
        return Direction.DOWN if dy > 0 else Direction.UP
    return Direction.RIGHT if dx > 0 else Direction.LEFT
