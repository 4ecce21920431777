"""Data models for the maze chase simulation.

All authoritative match state lives in these dataclasses. Every model knows
how to ``serialise`` itself into the JSON friendly structure broadcast to
websocket clients, so the transport layer never has to reach into the
simulation internals.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

from . import config

if TYPE_CHECKING:  # pragma: no cover - imported for type checkers only
    from .maze import MazeModel


class Direction(str, Enum):
    """Facing directions understood by players and ghosts."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> Tuple[int, int]:
        return _DELTAS[self]


_DELTAS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


@dataclass(frozen=True)
class Position:
    """Integer grid coordinate."""

    x: int
    y: int

    def step(self, direction: Direction) -> "Position":
        dx, dy = direction.delta
        return Position(self.x + dx, self.y + dy)

    def manhattan(self, other: "Position") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def serialise(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class DirectionIntent:
    """Directional flags as sent by a controller.

    More than one flag may be set; :meth:`resolve` picks one using the
    priority up > down > left > right.
    """

    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, object]]) -> "DirectionIntent":
        payload = payload or {}
        return cls(
            up=bool(payload.get("up")),
            down=bool(payload.get("down")),
            left=bool(payload.get("left")),
            right=bool(payload.get("right")),
        )

    @classmethod
    def for_direction(cls, direction: Direction) -> "DirectionIntent":
        return cls(**{direction.value: True})

    def resolve(self) -> Optional[Direction]:
        if self.up:
            return Direction.UP
        if self.down:
            return Direction.DOWN
        if self.left:
            return Direction.LEFT
        if self.right:
            return Direction.RIGHT
        return None

    def serialise(self) -> Dict[str, bool]:
        return {"up": self.up, "down": self.down, "left": self.left, "right": self.right}


@dataclass(slots=True)
class TimedEffect:
    """An effect that lasts ``duration_ms`` after its activation timestamp."""

    duration_ms: int
    started_at: Optional[float] = None

    @property
    def active(self) -> bool:
        return self.started_at is not None

    def activate(self, now: float) -> None:
        self.started_at = now

    def expired(self, now: float) -> bool:
        return self.started_at is not None and now - self.started_at >= self.duration_ms

    def clear(self) -> None:
        self.started_at = None


@dataclass(slots=True)
class Player:
    """One of the two competitors."""

    index: int
    position: Position
    direction: Direction
    spawn: Position
    spawn_direction: Direction
    name: str = ""
    score: int = 0
    lives: int = config.STARTING_LIVES
    invulnerability: TimedEffect = field(default_factory=lambda: TimedEffect(config.INVULNERABLE_MS))

    @property
    def display_name(self) -> str:
        return self.name or config.DEFAULT_PLAYER_NAMES[self.index - 1]

    @property
    def invulnerable(self) -> bool:
        return self.invulnerability.active

    def respawn(self) -> None:
        self.position = self.spawn
        self.direction = self.spawn_direction

    def serialise(self) -> Dict[str, object]:
        return {
            "x": self.position.x,
            "y": self.position.y,
            "direction": self.direction.value,
            "score": self.score,
            "lives": self.lives,
            "invulnerable": self.invulnerable,
            "invulnerable_time": self.invulnerability.started_at or 0,
            "name": self.name,
        }


@dataclass(slots=True)
class Ghost:
    """A computer controlled chaser.

    ``baseline_color`` is only set while the ghost is vulnerable and holds the
    colour to restore once power mode ends or the ghost is eaten.
    """

    role: int
    position: Position
    direction: Direction
    color: str
    baseline_color: Optional[str] = None

    @property
    def vulnerable(self) -> bool:
        return self.baseline_color is not None

    @property
    def home(self) -> Position:
        return Position(*config.ghost_home(self.role))

    def make_vulnerable(self) -> None:
        if self.vulnerable:
            return
        self.baseline_color = self.color
        self.color = config.VULNERABLE_COLOR

    def restore_color(self) -> None:
        if self.baseline_color is None:
            return
        self.color = self.baseline_color
        self.baseline_color = None

    def serialise(self) -> Dict[str, object]:
        return {
            "role": self.role,
            "x": self.position.x,
            "y": self.position.y,
            "direction": self.direction.value,
            "color": self.color,
            "vulnerable": self.vulnerable,
        }


@dataclass(slots=True)
class GameSession:
    """All authoritative state for the single live match."""

    player1: Player
    player2: Player
    ghosts: Tuple[Ghost, ...]
    dots: Set[Position]
    power_pellets: Set[Position]
    power_mode: TimedEffect = field(default_factory=lambda: TimedEffect(config.POWER_MODE_MS))
    terminal: bool = False
    winner: Optional[str] = None
    ticks: int = 0

    @classmethod
    def create(cls, maze: "MazeModel", player1_name: str = "", player2_name: str = "") -> "GameSession":
        """Build a session in the canonical starting layout."""

        players = []
        for index, ((x, y, facing), name) in enumerate(zip(config.PLAYER_SPAWNS, (player1_name, player2_name)), start=1):
            spawn = Position(x, y)
            direction = Direction(facing)
            players.append(
                Player(
                    index=index,
                    position=spawn,
                    direction=direction,
                    spawn=spawn,
                    spawn_direction=direction,
                    name=(name or "").strip(),
                )
            )
        ghosts = tuple(
            Ghost(
                role=role,
                position=Position(*config.ghost_home(role)),
                direction=Direction(facing),
                color=color,
            )
            for role, (color, facing) in enumerate(zip(config.GHOST_COLORS, config.GHOST_FACINGS))
        )
        return cls(
            player1=players[0],
            player2=players[1],
            ghosts=ghosts,
            dots=maze.initial_dots(),
            power_pellets=maze.initial_power_pellets(),
        )

    @property
    def players(self) -> Tuple[Player, Player]:
        return self.player1, self.player2

    @property
    def power_mode_active(self) -> bool:
        return self.power_mode.active

    def player(self, index: int) -> Player:
        if index == 1:
            return self.player1
        if index == 2:
            return self.player2
        raise ValueError(f"Unknown player index {index}")

    def serialise(self) -> Dict[str, object]:
        return {
            "player1": self.player1.serialise(),
            "player2": self.player2.serialise(),
            "dots": _serialise_cells(self.dots),
            "power_pellets": _serialise_cells(self.power_pellets),
            "ghosts": [ghost.serialise() for ghost in self.ghosts],
            "game_over": self.terminal,
            "winner": self.winner,
            "power_mode": self.power_mode_active,
            "power_mode_time": self.power_mode.started_at or 0,
            "tick": self.ticks,
            "config": {
                "maze": [config.MAZE_WIDTH, config.MAZE_HEIGHT],
                "game_name": config.GAME_NAME,
            },
        }


def _serialise_cells(cells: Set[Position]) -> List[Dict[str, int]]:
    return [cell.serialise() for cell in sorted(cells, key=lambda cell: (cell.y, cell.x))]


__all__ = [
    "Direction",
    "DirectionIntent",
    "GameSession",
    "Ghost",
    "Player",
    "Position",
    "TimedEffect",
]
