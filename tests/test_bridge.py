"""The in-process simulated bridge."""
from __future__ import annotations

import asyncio

from mazechase.bridge import SimulatedBridge
from mazechase.engine import GameEngine
from mazechase.input import InputSource


def test_simulated_bridge_registers_and_presses() -> None:
    async def scenario() -> None:
        engine = GameEngine(seed=1)
        engine.reset("Alpha", "Bravo")
        bridge = SimulatedBridge(engine, interval_ms=1, seed=4)
        await bridge.start()
        assert engine.bridges.source_for(bridge.connection_id) is InputSource.SIMULATED_BRIDGE
        assert engine.bridges.status().connected
        intent = bridge.press_once()
        assert engine.session.player1.direction is intent.resolve()
        await asyncio.sleep(0.01)
        await bridge.stop()
        assert not engine.bridges.status().connected

    asyncio.run(scenario())
