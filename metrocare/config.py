"""Configuration for the MetroCare booking service.

Hospital data lives here; deployment settings come from the environment
(a local .env file is honoured).
"""
import os

from dotenv import load_dotenv

load_dotenv()

DOCTORS = [
    {
        "name": "Dr. Sarah Wanjiku",
        "specialty_label": "Cardiologist",
        "specialty_description": "Heart and cardiovascular conditions",
    },
    {
        "name": "Dr. James Kiprotich",
        "specialty_label": "Pediatrician",
        "specialty_description": "Children's health and development",
    },
    {
        "name": "Dr. Amina Hassan",
        "specialty_label": "Dermatologist",
        "specialty_description": "Skin, hair, and nail conditions",
    },
    {
        "name": "Dr. Peter Mwangi",
        "specialty_label": "General Medicine",
        "specialty_description": "General health consultations",
    },
    {
        "name": "Dr. Grace Achieng",
        "specialty_label": "Gynecologist",
        "specialty_description": "Women's reproductive health",
    },
]

HOSPITAL_NAME = "MetroCare Hospital"
LOCATION = "MetroCare Hospital, Nairobi"
ARRIVAL_NOTICE = "Please arrive 15 minutes early."

# Appointment ids are FACILITY_CODE + (tick % APPOINTMENT_ID_MODULUS)
FACILITY_CODE = "MCH"
APPOINTMENT_ID_MODULUS = 100000

SLOT_TIME_FORMAT = "%Y-%m-%d %H:%M"
BUSINESS_HOURS = {
    "start_hour": 9,
    "hour_span": 8,
    "slot_step_minutes": 15,
    "slots_per_hour": 4,
}

# Deployment
API_HOST = os.getenv("METROCARE_HOST", "127.0.0.1")
API_PORT = int(os.getenv("METROCARE_PORT", "5000"))
API_BASE_URL = os.getenv("METROCARE_API_URL", f"http://{API_HOST}:{API_PORT}")
STATS_INTERVAL_SECONDS = float(os.getenv("METROCARE_STATS_INTERVAL", "5"))
LOG_LEVEL = os.getenv("METROCARE_LOG_LEVEL", "INFO")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("METROCARE_REQUEST_TIMEOUT", "15"))
