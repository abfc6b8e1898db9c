"""Pydantic models for doctors, appointments and API payloads."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from metrocare import config


class Doctor(BaseModel):
    """A doctor in the hospital directory."""
    name: str = Field(..., min_length=1, description="Doctor display name")
    specialty_label: str = Field(..., min_length=1, description="Short specialty label")
    specialty_description: str = Field(..., description="What the specialty treats")

    model_config = ConfigDict(frozen=True)

    @property
    def identity(self) -> str:
        """Display string used as the doctor's key, e.g. 'Dr. X - Cardiologist'."""
        return f"{self.name} - {self.specialty_label}"


class AppointmentRecord(BaseModel):
    """One entry in a doctor's ledger."""
    patient_name: str = Field(..., min_length=1)
    slot_time: str = Field(..., description="YYYY-MM-DD HH:MM")
    appointment_id: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)


class AppointmentConfirmation(BaseModel):
    """Returned to the caller after a successful booking."""
    patient_name: str
    doctor: str
    slot_time: str
    appointment_id: str
    specialization: str
    location: str = config.LOCATION
    notice: str = config.ARRIVAL_NOTICE

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "patient_name": "Jane Doe",
                "doctor": "Dr. Sarah Wanjiku - Cardiologist",
                "slot_time": "2026-10-20 10:45",
                "appointment_id": "MCH48213",
                "specialization": "Heart and cardiovascular conditions",
                "location": "MetroCare Hospital, Nairobi",
                "notice": "Please arrive 15 minutes early."
            }
        }
    )


class BookingRequest(BaseModel):
    """Request schema for POST /appointments.

    Missing fields default to empty strings so the service reports them
    with its own validation errors.
    """
    doctor: StrictStr = ""
    patient_name: StrictStr = ""


class ErrorResponse(BaseModel):
    """Tagged error payload."""
    success: bool = False
    error: str
    code: str
    doctor: Optional[str] = None
