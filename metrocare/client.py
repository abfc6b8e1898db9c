"""HTTP client for the MetroCare booking server.

Pattern: requests.Session with connection pooling, tenacity retries for
read-only calls and a connection breaker around every call.

Bookings are never retried automatically: a POST that timed out may still
have been recorded, so the front-end decides whether to re-issue it.
"""
import logging
from typing import List, Optional

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)

from metrocare import config
from metrocare.connection import ConnectionBreaker
from metrocare.errors import CommunicationFailure, ConnectionBreakerOpen, error_from_payload
from metrocare.models import AppointmentConfirmation

logger = logging.getLogger(__name__)


def create_http_session(pool_size: int = 10) -> requests.Session:
    """Create a pooled session for talking to the booking server."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Accept": "application/json"})
    return session


class HospitalClient:
    """Remote proxy for the booking service."""

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        max_retries: int = 3,
        backoff_factor: float = 1.0,
        breaker: Optional[ConnectionBreaker] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: Server root, e.g. http://127.0.0.1:5000
            timeout: Per-request timeout in seconds
            max_retries: Extra attempts for read-only calls (delays 1s, 2s, 4s...)
            backoff_factor: Multiplier for the exponential backoff (0 disables waiting)
            breaker: Shared connection breaker (one is created if omitted)
            session: Preconfigured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.breaker = breaker or ConnectionBreaker()
        self.session = session or create_http_session()

        read_with_retry = retry(
            stop=stop_after_attempt(max_retries + 1),
            wait=wait_exponential(multiplier=backoff_factor, max=8),
            retry=retry_if_exception_type(CommunicationFailure),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )
        self._read = read_with_retry(self._get)

    @property
    def connected(self) -> bool:
        return self.breaker.connected

    def reconnect(self) -> dict:
        """Clear the breaker and probe the server with a health check."""
        self.breaker.reset()
        return self.health()

    def list_doctors(self) -> List[str]:
        payload = self._call(self._read, "/doctors")
        return list(self._field(payload, "doctors"))

    def is_available(self, doctor: str) -> bool:
        payload = self._call(self._read, "/doctors/availability", params={"doctor": doctor})
        return bool(self._field(payload, "available"))

    def next_available_slot(self, doctor: str) -> str:
        payload = self._call(self._read, "/doctors/next-slot", params={"doctor": doctor})
        return self._field(payload, "slot")

    def book_appointment(self, doctor: str, patient_name: str) -> AppointmentConfirmation:
        """
        Book an appointment.

        Raises:
            EmptyPatientNameError: If the server rejected the patient name
            UnknownDoctorError: If the server does not know the doctor
            CommunicationFailure: If the server could not be reached
        """
        payload = self._call(
            self._post,
            "/appointments",
            json={"doctor": doctor, "patient_name": patient_name},
        )
        try:
            return AppointmentConfirmation(**self._field(payload, "appointment"))
        except (TypeError, ValidationError) as e:
            raise CommunicationFailure(f"Malformed confirmation from server: {e}") from e

    def health(self) -> dict:
        return self._call(self._read, "/health")

    def close(self):
        self.session.close()

    def _call(self, send, path: str, **kwargs) -> dict:
        """Run a request through the connection breaker."""
        try:
            return self.breaker.call(send, path, **kwargs)
        except ConnectionBreakerOpen:
            logger.warning("Skipping %s: server marked unreachable", path)
            raise

    def _get(self, path: str, **kwargs) -> dict:
        return self._request("GET", path, **kwargs)

    def _post(self, path: str, **kwargs) -> dict:
        return self._request("POST", path, **kwargs)

    def _request(self, method: str, path: str, **kwargs) -> dict:
        """
        Send one request and decode the JSON envelope.

        Raises:
            CommunicationFailure: Connection error, timeout, 5xx or bad body
            BookingError: The tagged business error the server returned
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise CommunicationFailure(f"Cannot reach booking server at {self.base_url}: {e}") from e

        if response.status_code >= 500:
            raise CommunicationFailure(f"Booking server error: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise CommunicationFailure(f"Malformed response from {url}") from e

        if not isinstance(payload, dict):
            raise CommunicationFailure(f"Malformed response from {url}")
        if not payload.get("success"):
            raise error_from_payload(payload)
        return payload

    @staticmethod
    def _field(payload: dict, key: str):
        try:
            return payload[key]
        except KeyError:
            raise CommunicationFailure(f"Response is missing '{key}'") from None
