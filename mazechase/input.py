"""Routing of directional input from players and bridges.

Every controller, whether a browser player, a hardware bridge or the
simulated bridge, produces :class:`~mazechase.models.DirectionIntent` values.
The router only ever overwrites one player's facing direction, the next tick
picks the change up.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .models import Direction, DirectionIntent, GameSession

logger = logging.getLogger(__name__)

BRIDGE_PLAYER = 1


class InvalidDirectionToken(ValueError):
    """Raised when a single-shot command is not one of UP, DOWN, LEFT, RIGHT."""


class InputSource(str, Enum):
    """Kinds of controller that can steer a player."""

    NETWORK_PLAYER = "network"
    HARDWARE_BRIDGE = "hardware"
    SIMULATED_BRIDGE = "simulated"

    @property
    def is_bridge(self) -> bool:
        return self is not InputSource.NETWORK_PLAYER

    def target_player(self, requested: Optional[int]) -> Optional[int]:
        """Bridges always drive player 1 whatever the caller asked for."""

        if self.is_bridge:
            return BRIDGE_PLAYER
        return requested


def parse_direction_token(token: object) -> DirectionIntent:
    if not isinstance(token, str):
        raise InvalidDirectionToken("Invalid direction. Use UP, DOWN, LEFT, or RIGHT")
    try:
        direction = Direction(token.strip().lower())
    except ValueError as exc:
        raise InvalidDirectionToken("Invalid direction. Use UP, DOWN, LEFT, or RIGHT") from exc
    return DirectionIntent.for_direction(direction)


class InputRouter:
    """Applies intents to the pending direction of a player."""

    def set_intent(self, session: Optional[GameSession], player_index: int, intent: DirectionIntent) -> Optional[Direction]:
        if session is None or session.terminal:
            return None
        if player_index not in (1, 2):
            logger.debug("Ignoring input for unknown player %r", player_index)
            return None
        direction = intent.resolve()
        if direction is None:
            return None
        session.player(player_index).direction = direction
        return direction

    def route(
        self,
        session: Optional[GameSession],
        source: InputSource,
        intent: DirectionIntent,
        player_index: Optional[int] = None,
    ) -> Optional[Direction]:
        target = source.target_player(player_index)
        logger.debug("%s input for player %s: %s", source.value, target, intent.serialise())
        if target is None:
            return None
        return self.set_intent(session, target, intent)


@dataclass(frozen=True)
class BridgeStatus:
    connected: bool
    bridge_count: int

    def serialise(self) -> Dict[str, object]:
        return {"connected": self.connected, "bridge_count": self.bridge_count}


@dataclass
class BridgeRegistry:
    """Connectivity bookkeeping for bridges. Has no effect on the simulation."""

    _bridges: Dict[str, InputSource] = field(default_factory=dict)

    def register(self, connection_id: str, source: InputSource = InputSource.HARDWARE_BRIDGE) -> BridgeStatus:
        if not source.is_bridge:
            raise ValueError(f"{source.value} is not a bridge source")
        self._bridges[connection_id] = source
        logger.info("Bridge %s connected (%s)", connection_id, source.value)
        return self.status()

    def unregister(self, connection_id: str) -> bool:
        """Forget a connection, returning whether it was a bridge."""

        if self._bridges.pop(connection_id, None) is None:
            return False
        logger.info("Bridge %s disconnected", connection_id)
        return True

    def source_for(self, connection_id: str) -> Optional[InputSource]:
        return self._bridges.get(connection_id)

    def status(self) -> BridgeStatus:
        count = len(self._bridges)
        return BridgeStatus(connected=count > 0, bridge_count=count)


__all__ = [
    "BRIDGE_PLAYER",
    "BridgeRegistry",
    "BridgeStatus",
    "InputRouter",
    "InputSource",
    "InvalidDirectionToken",
    "parse_direction_token",
]
