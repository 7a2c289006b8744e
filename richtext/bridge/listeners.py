"""Listener registries for recurring renderer events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class Subscription:
    """Handle returned by ``ListenerRegistry.add``."""

    def __init__(self, registry: ListenerRegistry, listener: Listener) -> None:
        self._registry = registry
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._registry._remove(self)
            self.active = False


class ListenerRegistry:
    """Ordered callbacks notified with one argument per event."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscriptions: list[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def add(self, listener: Listener) -> Subscription:
        subscription = Subscription(self, listener)
        self._subscriptions.append(subscription)
        return subscription

    def notify(self, value: Any) -> None:
        """Call every listener in registration order.

        A failing listener is logged and skipped; the rest still run.
        """
        for subscription in list(self._subscriptions):
            try:
                subscription.listener(value)
            except Exception:
                logger.exception(f"{self.name} listener {subscription.listener!r} failed")

    def _remove(self, subscription: Subscription) -> None:
        self._subscriptions.remove(subscription)
