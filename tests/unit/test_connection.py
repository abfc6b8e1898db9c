"""Tests for the connection breaker."""
import time

import pytest

from metrocare.connection import ConnectionBreaker
from metrocare.errors import CommunicationFailure, ConnectionBreakerOpen, UnknownDoctorError


def unreachable():
    raise CommunicationFailure("Connection refused")


class TestConnectionBreaker:
    """Test connected / disconnected / reconnecting transitions."""

    def test_passes_calls_when_connected(self):
        breaker = ConnectionBreaker(failure_threshold=3, retry_after=1)

        assert breaker.call(lambda: "doctors") == "doctors"
        assert breaker.state == "connected"
        assert breaker.connected is True

    def test_disconnects_after_threshold_failures(self):
        breaker = ConnectionBreaker(failure_threshold=3, retry_after=60)

        for _ in range(3):
            with pytest.raises(CommunicationFailure):
                breaker.call(unreachable)

        assert breaker.state == "disconnected"

        calls = []
        with pytest.raises(ConnectionBreakerOpen, match="Not connected"):
            breaker.call(lambda: calls.append("attempt"))
        assert calls == []

    def test_business_errors_do_not_disconnect(self):
        """The server answered, so the connection is fine."""
        breaker = ConnectionBreaker(failure_threshold=1, retry_after=60)

        def rejected():
            raise UnknownDoctorError("Dr. Unknown")

        for _ in range(3):
            with pytest.raises(UnknownDoctorError):
                breaker.call(rejected)

        assert breaker.state == "connected"

    def test_reports_reconnecting_after_retry_window(self):
        breaker = ConnectionBreaker(failure_threshold=1, retry_after=0.2)

        with pytest.raises(CommunicationFailure):
            breaker.call(unreachable)
        assert breaker.state == "disconnected"

        time.sleep(0.3)
        assert breaker.state == "reconnecting"

    def test_failed_probe_disconnects_again(self):
        breaker = ConnectionBreaker(failure_threshold=2, retry_after=0.2)

        for _ in range(2):
            with pytest.raises(CommunicationFailure):
                breaker.call(unreachable)

        time.sleep(0.3)

        with pytest.raises(CommunicationFailure):
            breaker.call(unreachable)
        assert breaker.state == "disconnected"

    def test_successful_probe_reconnects(self):
        breaker = ConnectionBreaker(failure_threshold=2, retry_after=0.2)

        for _ in range(2):
            with pytest.raises(CommunicationFailure):
                breaker.call(unreachable)

        time.sleep(0.3)

        assert breaker.call(lambda: "ok") == "ok"
        assert breaker.state == "connected"

    def test_success_resets_failure_count(self):
        breaker = ConnectionBreaker(failure_threshold=3, retry_after=60)

        for _ in range(2):
            with pytest.raises(CommunicationFailure):
                breaker.call(unreachable)

        breaker.call(lambda: "ok")

        for _ in range(2):
            with pytest.raises(CommunicationFailure):
                breaker.call(unreachable)

        assert breaker.state == "connected"

    def test_reset(self):
        breaker = ConnectionBreaker(failure_threshold=1, retry_after=60)
        with pytest.raises(CommunicationFailure):
            breaker.call(unreachable)

        breaker.reset()

        assert breaker.state == "connected"
        assert breaker.failure_count == 0
