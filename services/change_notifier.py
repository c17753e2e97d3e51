"""
Catalog Change Notifier

A payload-less signal fired after each successful bulk catalog write, so views
built on the catalog know to re-query.

- Delivery is synchronous: every current subscriber has been called before
  ``notify_refreshed`` returns.
- There is no replay. A subscriber only sees signals fired while subscribed.
- A subscriber that raises is logged and skipped; the others still run.
"""

import threading
from typing import Callable, List

from core.logging import get_logger


Callback = Callable[[], None]


class Subscription:
    """
    Live handle returned by ``ChangeNotifier.subscribe``.

    Cancel it to stop receiving signals. Also works as a context manager:

        with notifier.subscribe(refresh_view):
            ...
    """

    def __init__(self, notifier: "ChangeNotifier", callback: Callback) -> None:
        self._notifier = notifier
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._notifier._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cancel()


class ChangeNotifier:
    """
    Observer registry for catalog refreshes.

    Example:
        >>> notifier = ChangeNotifier()
        >>> sub = notifier.subscribe(lambda: print("catalog refreshed"))
        >>> notifier.notify_refreshed()
        catalog refreshed
        >>> sub.cancel()
    """

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()
        self._logger = get_logger(__name__)

    def subscribe(self, callback: Callback) -> Subscription:
        subscription = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        self._logger.debug(f"Catalog subscriber added. total={len(self._subscriptions)}")
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
        self._logger.debug(f"Catalog subscriber removed. total={len(self._subscriptions)}")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def notify_refreshed(self) -> None:
        """Call every current subscriber once."""
        with self._lock:
            subscriptions = list(self._subscriptions)

        for subscription in subscriptions:
            if not subscription.active:
                continue
            try:
                subscription.callback()
            except Exception as e:
                self._logger.error(f"Catalog subscriber {subscription.callback!r} failed: {e}")
