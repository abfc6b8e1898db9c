"""End-to-end tests: HospitalClient against the real Flask app."""
import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from metrocare import config
from metrocare.errors import AppointmentIdsExhaustedError, EmptyPatientNameError, UnknownDoctorError
from tests.helpers import CARDIOLOGIST, DEFAULT_DOCTORS


class TestClientAgainstServer:

    def test_list_doctors(self, hospital_client):
        assert hospital_client.list_doctors() == DEFAULT_DOCTORS
        assert hospital_client.list_doctors() == DEFAULT_DOCTORS

    def test_availability(self, hospital_client):
        assert hospital_client.is_available(CARDIOLOGIST) is True
        assert hospital_client.is_available("Dr. Unknown") is False

    def test_next_slot(self, hospital_client):
        slot = hospital_client.next_available_slot(CARDIOLOGIST)
        assert re.match(r"^2026-10-20 \d{2}:(00|15|30|45)$", slot)

    def test_book_appointment(self, hospital_client, service):
        confirmation = hospital_client.book_appointment(CARDIOLOGIST, "Jane Doe")

        assert confirmation.patient_name == "Jane Doe"
        assert confirmation.doctor == CARDIOLOGIST
        assert confirmation.specialization == "Heart and cardiovascular conditions"
        assert service.appointments_for(CARDIOLOGIST)[0].appointment_id == confirmation.appointment_id

    def test_unknown_doctor_round_trip(self, hospital_client, service):
        with pytest.raises(UnknownDoctorError) as exc_info:
            hospital_client.book_appointment("Dr. Unknown", "Jane Doe")

        assert exc_info.value.doctor == "Dr. Unknown"
        assert sum(service.appointment_stats().values()) == 0
        assert hospital_client.connected is True

    def test_empty_name_round_trip(self, hospital_client):
        with pytest.raises(EmptyPatientNameError):
            hospital_client.book_appointment(CARDIOLOGIST, "  ")

    def test_concurrent_clients(self, hospital_client, service):
        with ThreadPoolExecutor(max_workers=8) as pool:
            confirmations = list(pool.map(
                lambda i: hospital_client.book_appointment(CARDIOLOGIST, f"Patient {i}"),
                range(40)
            ))

        assert len({c.appointment_id for c in confirmations}) == 40
        assert service.appointment_stats()[CARDIOLOGIST] == 40

    def test_exhausted_ids_keep_connection(self, hospital_client, service, monkeypatch):
        """Running out of ids is an answer from the server, not a lost connection."""
        monkeypatch.setattr(config, "APPOINTMENT_ID_MODULUS", 2)
        hospital_client.book_appointment(CARDIOLOGIST, "Jane Doe")
        hospital_client.book_appointment(CARDIOLOGIST, "John Doe")

        for _ in range(3):
            with pytest.raises(AppointmentIdsExhaustedError):
                hospital_client.book_appointment(CARDIOLOGIST, "Late Patient")

        assert hospital_client.connected is True
        assert hospital_client.breaker.state == "connected"
        assert hospital_client.list_doctors() == DEFAULT_DOCTORS
        assert service.appointment_stats()[CARDIOLOGIST] == 2
