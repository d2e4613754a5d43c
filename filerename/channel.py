"""Inbound channels delivering file selections to a running engine.

A second launch of the application forwards its file arguments to the
instance that is already running. The transport (socket, OS IPC, ...) lives
behind SelectionChannel; the engine only subscribes a callback.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence


logger = logging.getLogger(__name__)

SelectionCallback = Callable[[list[str]], None]


class SelectionChannel(ABC):
    """Source of file selections arriving out of band."""

    @abstractmethod
    def subscribe(self, callback: SelectionCallback) -> Callable[[], None]:
        """Register a callback for incoming selections.

        Args:
            callback: Called with the list of paths of every delivered selection.

        Returns:
            A function that removes the subscription.
        """
        pass


class LocalSelectionChannel(SelectionChannel):
    """In-process channel; publish() delivers synchronously to all subscribers."""

    def __init__(self) -> None:
        self._subscribers: list[SelectionCallback] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: SelectionCallback) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, paths: Sequence[str]) -> int:
        """Deliver a selection to every subscriber.

        Empty selections are ignored, matching how forwarded launches without
        arguments only bring the running instance forward.

        Returns:
            Number of subscribers notified.
        """
        if not paths:
            return 0

        with self._lock:
            subscribers = list(self._subscribers)

        logger.debug("Delivering %d path(s) to %d subscriber(s)", len(paths), len(subscribers))
        for callback in subscribers:
            callback(list(paths))
        return len(subscribers)
