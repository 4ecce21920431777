"""Movement rules for players and ghosts."""
from __future__ import annotations

import random

import pytest

from mazechase.maze import CellKind, default_maze
from mazechase.models import Direction, GameSession, Position
from mazechase.systems.movement import MovementSystem, direction_towards


@pytest.fixture()
def session() -> GameSession:
    return GameSession.create(default_maze(), "Alpha", "Bravo")


@pytest.fixture()
def movement() -> MovementSystem:
    return MovementSystem(default_maze(), random.Random(7))


def test_player_blocked_by_wall_keeps_facing(session: GameSession, movement: MovementSystem) -> None:
    player = session.player1
    player.direction = Direction.LEFT
    assert movement.step_player(player) is False
    assert player.position == Position(1, 1)
    assert player.direction is Direction.LEFT


def test_player_moves_through_corridor(session: GameSession, movement: MovementSystem) -> None:
    assert movement.step_player(session.player1) is True
    assert session.player1.position == Position(2, 1)


def test_player_uses_tunnel(session: GameSession, movement: MovementSystem) -> None:
    player = session.player2
    player.position = Position(27, 14)
    player.direction = Direction.RIGHT
    movement.step_player(player)
    assert player.position == Position(0, 14)
    player.direction = Direction.LEFT
    movement.step_player(player)
    assert player.position == Position(27, 14)


def test_axis_choice_prefers_horizontal_on_tie() -> None:
    origin = Position(5, 5)
    assert direction_towards(origin, Position(8, 8)) is Direction.RIGHT
    assert direction_towards(origin, Position(2, 8)) is Direction.LEFT
    assert direction_towards(origin, Position(6, 9)) is Direction.DOWN
    assert direction_towards(origin, Position(5, 1)) is Direction.UP
    assert direction_towards(origin, origin) is Direction.LEFT


def test_ghosts_pass_through_walls(session: GameSession, movement: MovementSystem) -> None:
    maze = default_maze()
    ghost = session.ghosts[0]
    ghost.position = Position(1, 1)
    assert movement.step_ghost(ghost, Position(1, 0)) is True
    assert ghost.position == Position(1, 0)
    assert maze.classify(ghost.position) is CellKind.WALL


def test_ghost_stays_inside_vertical_bounds(session: GameSession, movement: MovementSystem) -> None:
    ghost = session.ghosts[1]
    ghost.position = Position(4, 0)
    assert movement.step_ghost(ghost, Position(4, -6)) is False
    assert ghost.position == Position(4, 0)
    assert ghost.direction is Direction.UP


def test_untargeted_ghost_wanders_within_grid(session: GameSession, movement: MovementSystem) -> None:
    maze = default_maze()
    ghost = session.ghosts[3]
    for _ in range(500):
        before = ghost.position
        movement.step_ghost(ghost, None)
        assert maze.in_bounds(ghost.position)
        assert ghost.position == before or ghost.position == maze.wrap(before.step(ghost.direction))
