"""Shared test fixtures."""
import pytest

from metrocare.client import HospitalClient
from metrocare.server import create_app
from metrocare.service import AppointmentService
from tests.helpers import FIXED_NOW, FlaskSession


@pytest.fixture
def fixed_clock():
    """Clock pinned to FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def service(fixed_clock) -> AppointmentService:
    """Freshly initialized service with the default doctors."""
    return AppointmentService(clock=fixed_clock)


@pytest.fixture
def app(service):
    """Flask app bound to the service fixture."""
    app = create_app(service)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def api(app):
    """Flask test client."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def hospital_client(app):
    """HospitalClient wired to the Flask app in-process."""
    return HospitalClient(base_url="http://metrocare.test", backoff_factor=0, session=FlaskSession(app))
