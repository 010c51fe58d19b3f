"""Subscriber registry: lossy, non-blocking fan-out of event strings.

Each live SSE connection registers one ``Subscriber`` whose inbox holds at
most one pending event.  ``broadcast()`` offers the event to every inbox
with ``put_nowait`` and drops it for any subscriber whose inbox is still
full.  Consumers re-fetch the whole cached content on ``contentUpdated``,
so a slow client that only sees the latest of a burst loses nothing.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from docmirror._locks import ReadWriteLock

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from docmirror._types import ClientID, EventMessage
    from docmirror.observability.collector import SyncCollector

CONTENT_UPDATED: Final = "contentUpdated"
ERROR_PREFIX: Final = "error:"

# Inbox capacity: one outstanding event per subscriber
INBOX_SIZE: Final = 1


def error_event(message: object) -> EventMessage:
    """Build an ``error:<message>`` event string."""
    return f"{ERROR_PREFIX}{message}"


def _new_inbox() -> asyncio.Queue[EventMessage]:
    return asyncio.Queue(maxsize=INBOX_SIZE)


@dataclass(frozen=True, slots=True)
class Subscriber:
    """A registered SSE client.

    Attributes:
        client_id: Unique identifier for this connection.
        queue: Bounded inbox read by the connection's transport.

    """

    client_id: ClientID = field(default_factory=lambda: str(uuid.uuid4()))
    queue: asyncio.Queue[EventMessage] = field(
        default_factory=_new_inbox, compare=False, hash=False,
    )


class Broadcaster:
    """Registry of live subscribers with non-blocking broadcast.

    Membership changes take the write lock; ``broadcast`` iterates under the
    read lock so concurrent broadcasts proceed together but never see a
    half-added or half-removed member.

    Args:
        collector: Optional collector for ``BroadcastSent`` events.

    """

    def __init__(self, collector: SyncCollector | None = None) -> None:
        self._members: dict[ClientID, Subscriber] = {}
        self._lock = ReadWriteLock()
        self._collector = collector

    @property
    def subscriber_count(self) -> int:
        """Number of active subscribers."""
        with self._lock.read():
            return len(self._members)

    def register(self) -> Subscriber:
        """Create a subscriber with an empty inbox and add it to the active set."""
        subscriber = Subscriber()
        with self._lock.write():
            self._members[subscriber.client_id] = subscriber
        return subscriber

    def unregister(self, subscriber: Subscriber) -> None:
        """Remove a subscriber.  Unknown or already-removed subscribers are ignored."""
        with self._lock.write():
            self._members.pop(subscriber.client_id, None)

    def broadcast(self, message: EventMessage) -> int:
        """Offer message to every subscriber without waiting.

        Returns:
            Number of subscribers whose inbox accepted the message.

        """
        delivered = 0
        dropped = 0
        with self._lock.read():
            for subscriber in self._members.values():
                try:
                    subscriber.queue.put_nowait(message)
                    delivered += 1
                except asyncio.QueueFull:
                    dropped += 1

        if self._collector is not None:
            self._collector.record_broadcast(message, delivered=delivered, dropped=dropped)

        return delivered

    async def client_generator(self, subscriber: Subscriber) -> AsyncIterator[EventMessage]:
        """Yield events from a subscriber's inbox until the connection ends.

        Used as the event source for Chirp's ``EventStream``, which sends the
        idle heartbeat comments itself.  The subscriber is unregistered when
        the generator is cancelled (client disconnect) or closed.

        Catches ``CancelledError`` and ``GeneratorExit`` so shutdown does not
        leak ``StopAsyncIteration`` noise into the event loop.

        """
        try:
            while True:
                yield await subscriber.queue.get()
        except (asyncio.CancelledError, GeneratorExit):
            return
        finally:
            self.unregister(subscriber)
