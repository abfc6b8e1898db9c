"""Error kinds shared by the service, the HTTP API and the client."""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Machine-readable error codes carried in error payloads."""
    EMPTY_PATIENT_NAME = "EMPTY_PATIENT_NAME"
    UNKNOWN_DOCTOR = "UNKNOWN_DOCTOR"
    INVALID_REQUEST = "INVALID_REQUEST"
    APPOINTMENT_IDS_EXHAUSTED = "APPOINTMENT_IDS_EXHAUSTED"
    COMMUNICATION_FAILURE = "COMMUNICATION_FAILURE"


# HTTP status used when an error kind crosses the API boundary
HTTP_STATUS = {
    ErrorKind.EMPTY_PATIENT_NAME: 400,
    ErrorKind.UNKNOWN_DOCTOR: 404,
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.APPOINTMENT_IDS_EXHAUSTED: 409,
}


class BookingError(Exception):
    """Base exception for booking failures."""

    kind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def to_payload(self) -> dict:
        """Tagged error payload sent over the wire."""
        return {
            "success": False,
            "error": self.message,
            "code": self.kind.value,
        }


class EmptyPatientNameError(BookingError):
    """Raised when the patient name is empty or whitespace only."""

    kind = ErrorKind.EMPTY_PATIENT_NAME

    def __init__(self, message: str = "Patient name cannot be empty"):
        super().__init__(message)


class UnknownDoctorError(BookingError):
    """Raised when a doctor identity is not in the directory."""

    kind = ErrorKind.UNKNOWN_DOCTOR

    def __init__(self, doctor: str, message: Optional[str] = None):
        super().__init__(message or f"Doctor '{doctor}' is not available")
        self.doctor = doctor

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["doctor"] = self.doctor
        return payload


class AppointmentIdsExhaustedError(BookingError):
    """Raised when every appointment id has already been issued."""

    kind = ErrorKind.APPOINTMENT_IDS_EXHAUSTED

    def __init__(self, message: str = "No appointment ids left to issue"):
        super().__init__(message)


class CommunicationFailure(BookingError):
    """Raised by the client when the server cannot be reached."""

    kind = ErrorKind.COMMUNICATION_FAILURE


class ConnectionBreakerOpen(CommunicationFailure):
    """Raised when the connection breaker is open (fail fast)."""
    pass


def error_from_payload(payload: dict) -> BookingError:
    """Rebuild the exception described by a tagged error payload."""
    message = payload.get("error") or "Unknown error"
    try:
        kind = ErrorKind(payload.get("code"))
    except ValueError:
        return BookingError(message)

    if kind is ErrorKind.EMPTY_PATIENT_NAME:
        return EmptyPatientNameError(message)
    if kind is ErrorKind.UNKNOWN_DOCTOR:
        return UnknownDoctorError(payload.get("doctor", ""), message)
    if kind is ErrorKind.APPOINTMENT_IDS_EXHAUSTED:
        return AppointmentIdsExhaustedError(message)
    if kind is ErrorKind.COMMUNICATION_FAILURE:
        return CommunicationFailure(message)
    return BookingError(message, kind)
