"""
Last-value broadcast of printer status.

The connection manager is the only writer. Readers either poll ``value`` or
subscribe a callback; a new subscriber is handed the current value straight
away and then every later value in publish order. Nothing is replayed, so a
late subscriber only ever sees the latest status.
"""

import threading
from typing import Callable, Dict, Optional

from .models import PrinterStatus
from .utils.logger import logger

StatusCallback = Callable[[PrinterStatus], None]


class Subscription:
    """Handle returned by StatusChannel.subscribe."""

    def __init__(self, channel: "StatusChannel", token: int):
        self._channel = channel
        self._token = token
        self.active = True

    def cancel(self):
        if self.active:
            self._channel._remove(self._token)
            self.active = False


class StatusChannel:
    """Single-writer, multi-reader observable holding the latest PrinterStatus."""

    def __init__(self, initial: PrinterStatus = PrinterStatus.DISCONNECTED):
        self._value = initial
        self._sequence = 0
        self._subscribers: Dict[int, StatusCallback] = {}
        self._next_token = 0
        self._condition = threading.Condition()
        # Serializes callback delivery so every subscriber sees values in publish order
        self._delivery_lock = threading.RLock()

    @property
    def value(self) -> PrinterStatus:
        with self._condition:
            return self._value

    @property
    def sequence(self) -> int:
        """Number of values published so far."""
        with self._condition:
            return self._sequence

    def publish(self, status: PrinterStatus):
        """Replace the current value and notify subscribers."""
        with self._delivery_lock:
            with self._condition:
                previous = self._value
                self._value = status
                self._sequence += 1
                subscribers = list(self._subscribers.values())
                self._condition.notify_all()

            if previous != status:
                logger.status_changed(previous.value, status.value)

            for callback in subscribers:
                self._deliver(callback, status)

    def subscribe(self, callback: StatusCallback) -> Subscription:
        """Register a callback and hand it the current value immediately."""
        with self._delivery_lock:
            with self._condition:
                token = self._next_token
                self._next_token += 1
                self._subscribers[token] = callback
                current = self._value
            self._deliver(callback, current)
        return Subscription(self, token)

    def wait_for(self, status: PrinterStatus, timeout: Optional[float] = None) -> bool:
        """Block until the current value equals status. Returns False on timeout."""
        with self._condition:
            return self._condition.wait_for(lambda: self._value == status, timeout)

    def _remove(self, token: int):
        with self._condition:
            self._subscribers.pop(token, None)

    def _deliver(self, callback: StatusCallback, status: PrinterStatus):
        try:
            callback(status)
        except Exception as e:
            logger.error(f"❌ Status subscriber failed: {str(e)}")
