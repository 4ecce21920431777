"""Fan-out of server events to connected websocket clients."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Dict, List

logger = logging.getLogger(__name__)

GAME_UPDATE = "game-update"
GAME_STARTED = "game-started"
BRIDGE_STATUS = "bridge-status"
BRIDGE_INPUT = "bridge-input"
ERROR = "error"


@dataclass(slots=True)
class Message:
    """Envelope pushed to every subscriber."""

    type: str
    payload: Dict[str, object]

    def serialise(self) -> Dict[str, object]:
        return {"type": self.type, "payload": self.payload}


class Broadcaster:
    """Delivers every published message to all subscriber queues.

    ``publish`` never blocks so it can be called from inside a tick. When a
    slow subscriber's queue is full its oldest message is dropped.
    """

    def __init__(self, maxsize: int = 64) -> None:
        self._maxsize = maxsize
        self._subscribers: List[asyncio.Queue[Message]] = []

    def subscribe(self) -> asyncio.Queue[Message]:
        queue: asyncio.Queue[Message] = asyncio.Queue(maxsize=self._maxsize)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[Message]) -> None:
        with contextlib.suppress(ValueError):
            self._subscribers.remove(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event_type: str, payload: Dict[str, object]) -> None:
        message = Message(type=event_type, payload=payload)
        for queue in list(self._subscribers):
            offer(queue, message)


def offer(queue: asyncio.Queue[Message], message: Message) -> None:
    """Enqueue without blocking, evicting the oldest message when full."""

    if queue.full():
        with contextlib.suppress(asyncio.QueueEmpty):
            queue.get_nowait()
        logger.debug("Subscriber lagging, dropped oldest message")
    queue.put_nowait(message)


__all__ = [
    "BRIDGE_INPUT",
    "BRIDGE_STATUS",
    "Broadcaster",
    "ERROR",
    "GAME_STARTED",
    "GAME_UPDATE",
    "Message",
    "offer",
]
