"""Application-wide change notification."""

from lifeledger.context.notifier import ChangeNotifier, Listener

__all__ = ["ChangeNotifier", "Listener"]
