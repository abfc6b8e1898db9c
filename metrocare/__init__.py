"""MetroCare appointment booking service."""
from metrocare.errors import (
    AppointmentIdsExhaustedError,
    BookingError,
    CommunicationFailure,
    EmptyPatientNameError,
    ErrorKind,
    UnknownDoctorError,
)
from metrocare.service import AppointmentService

__version__ = "1.0.0"

__all__ = [
    "AppointmentIdsExhaustedError",
    "AppointmentService",
    "BookingError",
    "CommunicationFailure",
    "EmptyPatientNameError",
    "ErrorKind",
    "UnknownDoctorError",
]
