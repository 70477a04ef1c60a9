"""In-process publish/subscribe channel for refresh notifications."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[[dict], None]


class Broadcaster:
    """Fan out events to every current subscriber.

    Subscribers are plain callables invoked on the publishing thread; the web
    layer wraps each WebSocket connection in a callable that hands the event
    over to its event loop. A subscriber that raises is logged and does not
    stop delivery to the others.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Add a subscriber. Returns a function that removes it again."""
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event: dict) -> int:
        """Deliver an event to all subscribers. Returns how many received it."""
        with self._lock:
            subscribers = list(self._subscribers)

        delivered = 0
        for subscriber in subscribers:
            try:
                subscriber(event)
                delivered += 1
            except Exception:
                logger.exception("Subscriber failed to receive event")
        return delivered
