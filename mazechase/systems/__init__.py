"""Per-tick systems that advance a :class:`~mazechase.models.GameSession`."""

from .collisions import CollisionSystem
from .ghost_ai import GhostBrain
from .movement import MovementSystem
from .rules import WinRules

__all__ = ["CollisionSystem", "GhostBrain", "MovementSystem", "WinRules"]
