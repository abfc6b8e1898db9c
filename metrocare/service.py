"""Appointment booking service.

Owns the doctor directory and one append-only ledger per doctor.

Concurrency:
- The directory is fixed at construction and read without locking.
- Each doctor's ledger has its own lock, so bookings for different doctors
  never wait on each other.
- Appointment ids come from a single id lock and are unique for the lifetime
  of the service.
"""
import random
import threading
import time
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from metrocare import config
from metrocare.errors import AppointmentIdsExhaustedError, EmptyPatientNameError, UnknownDoctorError
from metrocare.logging_config import get_logger
from metrocare.models import AppointmentConfirmation, AppointmentRecord, Doctor

logger = get_logger(__name__)


def load_doctors(entries: Iterable[dict] = None) -> List[Doctor]:
    """Build Doctor models from config-style dicts (defaults to config.DOCTORS)."""
    return [Doctor(**entry) for entry in (config.DOCTORS if entries is None else entries)]


class AppointmentService:
    """In-memory booking service for a fixed set of doctors."""

    def __init__(
        self,
        doctors: Optional[Iterable[Doctor]] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the directory and an empty ledger per doctor.

        Args:
            doctors: Doctor set in display order (defaults to config.DOCTORS)
            rng: Random source for slot selection. Defaults to SystemRandom,
                 which keeps no shared generator state between threads.
            clock: Returns the current local time; slots are for its next day

        Raises:
            ValueError: If two doctors share the same identity
        """
        self._doctors: Dict[str, Doctor] = {}
        for doctor in (load_doctors() if doctors is None else doctors):
            if doctor.identity in self._doctors:
                raise ValueError(f"Duplicate doctor identity: {doctor.identity}")
            self._doctors[doctor.identity] = doctor

        self._ledgers: Dict[str, List[AppointmentRecord]] = {
            identity: [] for identity in self._doctors
        }
        self._ledger_locks: Dict[str, threading.Lock] = {
            identity: threading.Lock() for identity in self._doctors
        }

        self._id_lock = threading.Lock()
        self._last_tick = 0
        self._issued_ids = set()

        self._rng = rng or random.SystemRandom()
        self._clock = clock

        logger.info("appointment_service_initialized", doctors=len(self._doctors))

    def list_doctors(self) -> List[str]:
        """Return doctor identities in definition order."""
        logger.info("doctors_listed")
        return list(self._doctors)

    def is_available(self, doctor: str) -> bool:
        """True iff `doctor` exactly matches a known identity (case-sensitive)."""
        available = self._find(doctor) is not None
        logger.info("availability_checked", doctor=doctor, available=available)
        return available

    def get_doctor(self, doctor: str) -> Doctor:
        """Look up a doctor by identity or raise UnknownDoctorError."""
        profile = self._find(doctor)
        if profile is None:
            raise UnknownDoctorError(doctor)
        return profile

    def _find(self, doctor) -> Optional[Doctor]:
        # Only exact string identities match.
        if not isinstance(doctor, str):
            return None
        return self._doctors.get(doctor)

    def next_available_slot(self, doctor: str) -> str:
        """
        Propose a slot for tomorrow between 09:00 and 16:45 in 15-minute steps.

        The ledger is not consulted, so repeated calls may return the same slot.

        Raises:
            UnknownDoctorError: If the doctor is not in the directory
        """
        self.get_doctor(doctor)

        hours = config.BUSINESS_HOURS
        day = self._clock() + timedelta(days=1)
        slot = day.replace(hour=hours["start_hour"], minute=0, second=0, microsecond=0)
        slot += timedelta(
            hours=self._rng.randrange(hours["hour_span"]),
            minutes=self._rng.randrange(hours["slots_per_hour"]) * hours["slot_step_minutes"],
        )
        return slot.strftime(config.SLOT_TIME_FORMAT)

    def book_appointment(self, doctor: str, patient_name: str) -> AppointmentConfirmation:
        """
        Book the next slot with `doctor` for `patient_name`.

        Validation order: patient name first, then doctor identity. A failed
        booking leaves every ledger untouched.

        Raises:
            EmptyPatientNameError: If the name is empty or whitespace only
            UnknownDoctorError: If the doctor is not in the directory
            AppointmentIdsExhaustedError: If every appointment id is taken
        """
        logger.info("booking_requested", doctor=doctor, patient=patient_name)

        name = patient_name.strip() if isinstance(patient_name, str) else ""
        if not name:
            logger.warning("booking_rejected", reason="empty_patient_name", doctor=doctor)
            raise EmptyPatientNameError()

        profile = self._find(doctor)
        if profile is None:
            logger.warning("booking_rejected", reason="unknown_doctor", doctor=doctor)
            raise UnknownDoctorError(doctor)

        record = AppointmentRecord(
            patient_name=name,
            slot_time=self.next_available_slot(doctor),
            appointment_id=self._generate_appointment_id(),
        )

        with self._ledger_locks[doctor]:
            self._ledgers[doctor].append(record)

        logger.info(
            "appointment_booked",
            doctor=doctor,
            appointment_id=record.appointment_id,
            slot_time=record.slot_time,
        )
        return AppointmentConfirmation(
            patient_name=record.patient_name,
            doctor=doctor,
            slot_time=record.slot_time,
            appointment_id=record.appointment_id,
            specialization=profile.specialty_description,
        )

    def appointments_for(self, doctor: str) -> Tuple[AppointmentRecord, ...]:
        """Snapshot of one doctor's ledger in booking order."""
        self.get_doctor(doctor)
        with self._ledger_locks[doctor]:
            return tuple(self._ledgers[doctor])

    def appointment_stats(self) -> Dict[str, int]:
        """Snapshot of appointment counts per doctor, in directory order."""
        stats = {}
        for identity, lock in self._ledger_locks.items():
            with lock:
                stats[identity] = len(self._ledgers[identity])
        return stats

    def print_stats(self) -> Dict[str, int]:
        """Log the per-doctor appointment counts and return them."""
        stats = self.appointment_stats()
        logger.info(
            "appointment_stats",
            total=sum(stats.values()),
            appointments=stats,
        )
        return stats

    def _generate_appointment_id(self) -> str:
        """Facility code plus a millisecond tick reduced mod APPOINTMENT_ID_MODULUS.

        Ticks strictly increase between calls and skip ids already issued.
        """
        modulus = config.APPOINTMENT_ID_MODULUS
        with self._id_lock:
            if len(self._issued_ids) >= modulus:
                logger.error("appointment_ids_exhausted", issued=len(self._issued_ids))
                raise AppointmentIdsExhaustedError()

            tick = max(time.time_ns() // 1_000_000, self._last_tick + 1)
            appointment_id = f"{config.FACILITY_CODE}{tick % modulus}"
            while appointment_id in self._issued_ids:
                tick += 1
                appointment_id = f"{config.FACILITY_CODE}{tick % modulus}"

            self._last_tick = tick
            self._issued_ids.add(appointment_id)
            return appointment_id


class StatsReporter(threading.Thread):
    """Background thread that reports appointment stats every `interval` seconds."""

    def __init__(self, service: AppointmentService, interval: float = config.STATS_INTERVAL_SECONDS):
        super().__init__(name="stats-reporter", daemon=True)
        self.service = service
        self.interval = interval
        self._stopped = threading.Event()

    def run(self):
        while not self._stopped.wait(self.interval):
            self.service.print_stats()

    def stop(self, timeout: Optional[float] = None):
        """Signal the loop to exit and wait for it."""
        self._stopped.set()
        if self.is_alive():
            self.join(timeout)
