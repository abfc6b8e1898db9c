"""Connection breaker for calls to the booking server.

Tracks whether the server is reachable so front-ends can degrade to a
"not connected" state instead of waiting on every call.

States:
- CONNECTED: Calls pass through
- DISCONNECTED: Server considered down, calls fail immediately
- RECONNECTING: Retry window elapsed, the next call probes the server
"""
import threading
import time
from enum import Enum
from typing import Any, Callable, Optional

from metrocare.errors import BookingError, CommunicationFailure, ConnectionBreakerOpen
from metrocare.logging_config import get_logger

logger = get_logger(__name__)


class ConnectionState(Enum):
    """Connection states."""
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"


class ConnectionBreaker:
    """Fails fast after repeated communication failures."""

    def __init__(self, failure_threshold: int = 3, retry_after: float = 30.0):
        """
        Args:
            failure_threshold: Consecutive failures before disconnecting
            retry_after: Seconds to stay disconnected before probing again
        """
        self.failure_threshold = failure_threshold
        self.retry_after = retry_after
        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self._state = ConnectionState.CONNECTED
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        """Current state as string."""
        with self._lock:
            if self._state is ConnectionState.DISCONNECTED and self._retry_due():
                return ConnectionState.RECONNECTING.value
            return self._state.value

    @property
    def connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED.value

    def call(self, func: Callable, *args, **kwargs) -> Any:
        """
        Run `func` unless the server is known to be down.

        Only CommunicationFailure counts as a failure; business errors mean
        the server answered.

        Raises:
            ConnectionBreakerOpen: While disconnected and before retry_after
            CommunicationFailure: If `func` fails to reach the server
        """
        with self._lock:
            if self._state is ConnectionState.DISCONNECTED:
                if not self._retry_due():
                    raise ConnectionBreakerOpen(
                        f"Not connected to server. "
                        f"Retry in {self._seconds_until_retry():.1f}s"
                    )
                self._state = ConnectionState.RECONNECTING
                logger.info("connection_reconnecting")

        try:
            result = func(*args, **kwargs)
        except CommunicationFailure:
            self._on_failure()
            raise
        except BookingError:
            self._on_success()
            raise
        self._on_success()
        return result

    def reset(self):
        """Forget past failures so the next call goes straight to the server."""
        with self._lock:
            self.failure_count = 0
            self.last_failure_time = None
            self._state = ConnectionState.CONNECTED

    def _retry_due(self) -> bool:
        return self._seconds_until_retry() == 0

    def _seconds_until_retry(self) -> float:
        if self.last_failure_time is None:
            return 0
        elapsed = time.monotonic() - self.last_failure_time
        return max(0, self.retry_after - elapsed)

    def _on_success(self):
        with self._lock:
            self.failure_count = 0
            if self._state is not ConnectionState.CONNECTED:
                self._state = ConnectionState.CONNECTED
                logger.info("connection_restored")

    def _on_failure(self):
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = time.monotonic()

            if self._state is ConnectionState.RECONNECTING:
                self._state = ConnectionState.DISCONNECTED
                logger.warning("connection_probe_failed")
            elif self.failure_count >= self.failure_threshold:
                self._state = ConnectionState.DISCONNECTED
                logger.error(
                    "connection_lost",
                    failures=self.failure_count,
                    retry_after=self.retry_after,
                )
