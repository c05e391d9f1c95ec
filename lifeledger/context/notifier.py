"""
Change Notification

A single parameterless "records may have changed" signal. It fires after
every mutating store operation and after login, logout and federated
sync. Views subscribe and recompute their aggregates from a fresh read.
"""

import threading
from typing import Callable

import structlog


Listener = Callable[[], None]

logger = structlog.get_logger(__name__)


class ChangeNotifier:
    """
    Observer registry for the change signal.

    Listeners run synchronously, in subscription order, after the write
    that triggered them has been stored.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self) -> None:
        """Notify every listener. A failing listener does not stop the others."""
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.error(
                    "change_listener_failed",
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(e),
                )

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
