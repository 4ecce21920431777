"""In-process stand-in for the hardware controller bridge."""
from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from typing import Optional

from . import config
from .engine import GameEngine
from .input import InputSource
from .models import Direction, DirectionIntent

logger = logging.getLogger(__name__)


class SimulatedBridge:
    """Presses a random direction for player 1 at a fixed interval.

    It registers and unregisters itself like any other bridge so clients see
    the same connectivity status they would with real hardware attached.
    """

    def __init__(
        self,
        engine: GameEngine,
        interval_ms: int = config.SIMULATED_BRIDGE_INTERVAL_MS,
        seed: Optional[int] = None,
        connection_id: str = "simulated-bridge",
    ) -> None:
        self.engine = engine
        self.connection_id = connection_id
        self.random = random.Random(seed)
        self._interval = interval_ms / 1000
        self._task: Optional[asyncio.Task[None]] = None

    async def start(self) -> None:
        if self._task is not None:
            return
        self.engine.register_bridge(self.connection_id, InputSource.SIMULATED_BRIDGE)
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self.engine.unregister_bridge(self.connection_id)

    def press_once(self) -> DirectionIntent:
        intent = DirectionIntent.for_direction(self.random.choice(list(Direction)))
        self.engine.apply_bridge_input(intent, InputSource.SIMULATED_BRIDGE)
        return intent

    async def _run(self) -> None:
        logger.info("Simulated bridge pressing every %.0f ms", self._interval * 1000)
        while True:
            await asyncio.sleep(self._interval)
            self.press_once()


__all__ = ["SimulatedBridge"]
