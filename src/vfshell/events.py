"""Synchronous broadcast of command results to subscribers."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .models import CommandResult

Subscriber = Callable[[CommandResult], None]

logger = logging.getLogger(__name__)


class EventBus:
    """Fan out each published result to every current subscriber.

    Subscribers run synchronously in registration order before ``publish``
    returns. The bus keeps no history.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Subscriber:
        """Register a callback; returns it so it can be used as a decorator."""
        self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: Subscriber) -> None:
        """Deregister a callback; unknown callbacks are ignored."""
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def publish(self, result: CommandResult) -> None:
        """Deliver ``result`` to a snapshot of the current subscribers."""
        for callback in list(self._subscribers):
            try:
                callback(result)
            except Exception:
                logger.exception("Subscriber %r failed handling '%s' result.", callback, result.command_executed)
