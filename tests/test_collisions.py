"""Collectibles, ghost contact and timed effects."""
from __future__ import annotations

from typing import Dict, List

import pytest

from mazechase import config
from mazechase.maze import default_maze
from mazechase.models import Direction, GameSession, Position
from mazechase.systems.collisions import CollisionSystem


@pytest.fixture()
def session() -> GameSession:
    return GameSession.create(default_maze(), "Alpha", "Bravo")


@pytest.fixture()
def collisions() -> CollisionSystem:
    return CollisionSystem()


def _park_ghosts(session: GameSession) -> None:
    for ghost in session.ghosts:
        ghost.position = ghost.home


def test_shared_dot_scores_for_both_players(session: GameSession, collisions: CollisionSystem) -> None:
    cell = Position(6, 5)
    session.player1.position = cell
    session.player2.position = cell
    before = len(session.dots)
    collisions.update(session, 0, [])
    assert session.player1.score == config.DOT_POINTS
    assert session.player2.score == config.DOT_POINTS
    assert cell not in session.dots
    assert len(session.dots) == before - 1


def test_pellet_starts_power_mode(session: GameSession, collisions: CollisionSystem) -> None:
    events: List[Dict[str, object]] = []
    session.player1.position = Position(1, 3)
    collisions.update(session, 1_000, events)
    assert session.player1.score == config.PELLET_POINTS
    assert session.power_mode_active
    assert session.power_mode.started_at == 1_000
    assert [ghost.color for ghost in session.ghosts] == [config.VULNERABLE_COLOR] * 4
    assert [ghost.baseline_color for ghost in session.ghosts] == list(config.GHOST_COLORS)
    assert {"type": "power_mode_started"} in events


def test_second_pellet_keeps_baseline_colors(session: GameSession, collisions: CollisionSystem) -> None:
    session.player1.position = Position(1, 3)
    collisions.update(session, 1_000, [])
    session.player1.position = Position(1, 23)
    collisions.update(session, 4_000, [])
    assert session.power_mode.started_at == 4_000
    assert [ghost.baseline_color for ghost in session.ghosts] == list(config.GHOST_COLORS)


def test_power_mode_expires_exactly_after_duration(session: GameSession, collisions: CollisionSystem) -> None:
    session.player1.position = Position(1, 3)
    collisions.update(session, 5_000, [])
    collisions.advance_timers(session, 5_000 + config.POWER_MODE_MS - 1, [])
    assert session.power_mode_active
    collisions.advance_timers(session, 5_000 + config.POWER_MODE_MS, [])
    assert not session.power_mode_active
    assert [ghost.color for ghost in session.ghosts] == list(config.GHOST_COLORS)
    assert all(ghost.baseline_color is None for ghost in session.ghosts)


def test_eating_a_ghost_sends_it_home(session: GameSession, collisions: CollisionSystem) -> None:
    session.player1.position = Position(1, 3)
    collisions.update(session, 0, [])
    ghost = session.ghosts[2]
    ghost.position = Position(6, 8)
    session.player2.position = Position(6, 8)
    session.dots.discard(Position(6, 8))
    score_before = session.player2.score
    events: List[Dict[str, object]] = []
    collisions.update(session, 100, events)
    assert session.player2.score == score_before + config.GHOST_POINTS
    assert ghost.position == Position(13, 15)
    assert ghost.color == "cyan"
    assert not ghost.vulnerable
    assert {"type": "ghost_eaten", "ghost": 2, "player": 2} in events


def test_ghost_homes_follow_role_layout() -> None:
    assert [config.ghost_home(role) for role in range(4)] == [(13, 14), (14, 14), (13, 15), (14, 15)]


def test_ghost_hit_costs_one_life_once(session: GameSession, collisions: CollisionSystem) -> None:
    player = session.player1
    player.lives = 1
    player.position = Position(9, 11)
    player.direction = Direction.UP
    session.ghosts[0].position = Position(9, 11)
    session.ghosts[1].position = Position(9, 11)
    collisions.update(session, 2_000, [])
    assert player.lives == 0
    assert player.invulnerable
    assert player.invulnerability.started_at == 2_000
    assert player.position == Position(1, 1)
    assert player.direction is Direction.RIGHT


def test_invulnerable_player_coexists_with_ghost(session: GameSession, collisions: CollisionSystem) -> None:
    player = session.player2
    player.invulnerability.activate(0)
    session.ghosts[3].position = player.position
    collisions.update(session, 500, [])
    assert player.lives == config.STARTING_LIVES
    assert player.position == Position(26, 1)


def test_invulnerability_expires(session: GameSession, collisions: CollisionSystem) -> None:
    player = session.player1
    player.invulnerability.activate(10_000)
    collisions.advance_timers(session, 10_000 + config.INVULNERABLE_MS - 1, [])
    assert player.invulnerable
    collisions.advance_timers(session, 10_000 + config.INVULNERABLE_MS, [])
    assert not player.invulnerable
