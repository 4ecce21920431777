"""Configuration constants for the maze chase server.

Gameplay values are plain module constants so the simulation can be tuned in
one place. Process level settings (ports, database, CORS) are read from the
environment by :class:`ServerSettings`.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

TICK_MS = 150  # Fixed simulation period.

MAZE_WIDTH = 28
MAZE_HEIGHT = 31

STARTING_LIVES = 5
DOT_POINTS = 10
PELLET_POINTS = 50
GHOST_POINTS = 200

POWER_MODE_MS = 10_000
INVULNERABLE_MS = 3_000

# Chance per tick that the role 3 ghost chases the nearer player.
ROLE3_TARGET_CHANCE = 0.3

# Spawn cell and facing for player 1 and player 2.
PLAYER_SPAWNS: Tuple[Tuple[int, int, str], ...] = (
    (1, 1, "right"),
    (26, 1, "left"),
)

GHOST_COLORS: Tuple[str, ...] = ("red", "pink", "cyan", "orange")
GHOST_FACINGS: Tuple[str, ...] = ("up", "up", "left", "right")
VULNERABLE_COLOR = "blue"

DEFAULT_PLAYER_NAMES: Tuple[str, str] = ("Player 1", "Player 2")

LEADERBOARD_LIMIT = 10
SIMULATED_BRIDGE_INTERVAL_MS = 600

GAME_NAME = "Maze Chase"


def ghost_home(role: int) -> Tuple[int, int]:
    """Return the fixed ``(x, y)`` home cell of the ghost with ``role``."""

    return 13 + role % 2, 14 + role // 2


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ServerSettings:
    """Runtime settings for the server process.

    Attributes
    ----------
    host, port:
        Bind address for the ASGI server.
    database_url:
        SQLAlchemy async URL used for score history. ``None`` means storage
        is not configured and scores are not persisted.
    cors_origins:
        Origins allowed to call the HTTP API from a browser.
    simulated_bridge:
        Start the in-process simulated bridge driving player 1.
    log_level:
        Name of the root logging level.
    tick_ms:
        Simulation period in milliseconds.
    """

    host: str = "0.0.0.0"
    port: int = 3001
    database_url: Optional[str] = None
    cors_origins: Tuple[str, ...] = ("http://localhost:5173", "http://localhost:3000")
    simulated_bridge: bool = False
    log_level: str = "INFO"
    tick_ms: int = TICK_MS

    @classmethod
    def from_env(cls) -> "ServerSettings":
        load_dotenv()
        origins = os.getenv("MAZECHASE_CORS_ORIGINS")
        settings = cls(
            host=os.getenv("MAZECHASE_HOST", cls.host),
            port=int(os.getenv("MAZECHASE_PORT", cls.port)),
            database_url=os.getenv("MAZECHASE_DATABASE_URL") or None,
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) if origins else cls.cors_origins,
            simulated_bridge=_truthy(os.getenv("MAZECHASE_SIMULATED_BRIDGE")),
            log_level=os.getenv("MAZECHASE_LOG_LEVEL", cls.log_level).upper(),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError("Port must be between 1 and 65535")
        if self.tick_ms <= 0:
            raise ValueError("Tick period must be positive")
