"""Constants and helpers shared by the test modules."""
from datetime import datetime
from urllib.parse import urlsplit

CARDIOLOGIST = "Dr. Sarah Wanjiku - Cardiologist"
PEDIATRICIAN = "Dr. James Kiprotich - Pediatrician"

DEFAULT_DOCTORS = [
    "Dr. Sarah Wanjiku - Cardiologist",
    "Dr. James Kiprotich - Pediatrician",
    "Dr. Amina Hassan - Dermatologist",
    "Dr. Peter Mwangi - General Medicine",
    "Dr. Grace Achieng - Gynecologist",
]

FIXED_NOW = datetime(2026, 10, 19, 22, 37, 12)


class _BridgedResponse:
    """Just enough of requests.Response for HospitalClient."""

    def __init__(self, test_response):
        self.status_code = test_response.status_code
        self._body = test_response.get_data(as_text=True)
        self._test_response = test_response

    def json(self):
        payload = self._test_response.get_json(silent=True)
        if payload is None:
            raise ValueError(f"Not JSON: {self._body[:80]}")
        return payload


class FlaskSession:
    """requests.Session stand-in that routes calls into a Flask app in-process."""

    def __init__(self, app):
        self.app = app

    def request(self, method, url, timeout=None, params=None, json=None):
        path = urlsplit(url).path
        with self.app.test_client() as client:
            response = client.open(path, method=method, query_string=params, json=json)
        return _BridgedResponse(response)

    def close(self):
        pass
