"""Subscriber fan-out and back-pressure."""
from __future__ import annotations

import asyncio

from mazechase.broadcast import ERROR, GAME_UPDATE, Broadcaster, Message, offer


def test_publish_reaches_every_subscriber() -> None:
    broadcaster = Broadcaster()
    first, second = broadcaster.subscribe(), broadcaster.subscribe()
    broadcaster.publish(GAME_UPDATE, {"tick": 1})
    assert first.get_nowait() == Message(GAME_UPDATE, {"tick": 1})
    assert second.get_nowait().serialise() == {"type": GAME_UPDATE, "payload": {"tick": 1}}
    broadcaster.unsubscribe(first)
    assert broadcaster.subscriber_count == 1


def test_lagging_subscriber_loses_oldest_message() -> None:
    broadcaster = Broadcaster(maxsize=2)
    queue = broadcaster.subscribe()
    for tick in range(3):
        broadcaster.publish(GAME_UPDATE, {"tick": tick})
    assert [queue.get_nowait().payload["tick"] for _ in range(2)] == [1, 2]


def test_offer_to_full_queue_keeps_newest() -> None:
    queue: asyncio.Queue[Message] = asyncio.Queue(maxsize=2)
    offer(queue, Message(GAME_UPDATE, {"tick": 1}))
    offer(queue, Message(GAME_UPDATE, {"tick": 2}))
    offer(queue, Message(ERROR, {"message": "Malformed JSON"}))
    assert queue.qsize() == 2
    assert queue.get_nowait().payload == {"tick": 2}
    assert queue.get_nowait().type == ERROR
