"""Server-authoritative two player maze chase.

The package exposes the simulation engine that a transport layer drives, and
a FastAPI application in :mod:`mazechase.server` that wires it to websockets,
a manual bridge endpoint and the score leaderboard.
"""

from .engine import GameEngine
from .input import InputSource, InvalidDirectionToken
from .maze import MazeModel
from .models import Direction, DirectionIntent, GameSession
from .storage import StorageUnavailable

__all__ = [
    "Direction",
    "DirectionIntent",
    "GameEngine",
    "GameSession",
    "InputSource",
    "InvalidDirectionToken",
    "MazeModel",
    "StorageUnavailable",
]
