"""HTTP API for the MetroCare booking service.

Flask server exposing the booking service:
- Doctor listing
- Availability checks
- Next available slot
- Appointment booking

Run with: metrocare-server (or python -m metrocare.server)
"""
from datetime import datetime

from flask import Flask, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from metrocare import config
from metrocare.errors import HTTP_STATUS, BookingError, ErrorKind
from metrocare.logging_config import RequestIDMiddleware, get_logger, setup_structured_logging
from metrocare.models import BookingRequest, ErrorResponse
from metrocare.service import AppointmentService, StatsReporter

logger = get_logger(__name__)


def invalid_request(message: str):
    """Build a 400 INVALID_REQUEST response."""
    body = ErrorResponse(error=message, code=ErrorKind.INVALID_REQUEST.value)
    return jsonify(body.model_dump(exclude_none=True)), 400


def doctor_param():
    """Read the required ?doctor= query parameter (kept verbatim, no trimming)."""
    return request.args.get('doctor')


def create_app(service: AppointmentService) -> Flask:
    """
    Build the Flask app bound to an explicit service instance.

    Args:
        service: The booking service every route delegates to

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    CORS(app, expose_headers=["X-Request-ID"])
    app.wsgi_app = RequestIDMiddleware(app.wsgi_app)

    @app.errorhandler(BookingError)
    def handle_booking_error(error: BookingError):
        return jsonify(error.to_payload()), HTTP_STATUS[error.kind]

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        body = ErrorResponse(error=error.description, code=ErrorKind.INVALID_REQUEST.value)
        return jsonify(body.model_dump(exclude_none=True)), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception("unexpected_server_error")
        body = ErrorResponse(error="Internal server error", code="INTERNAL_ERROR")
        return jsonify(body.model_dump(exclude_none=True)), 500

    @app.route('/doctors', methods=['GET'])
    def list_doctors():
        """GET /doctors - List doctors in directory order."""
        doctors = service.list_doctors()
        return jsonify({
            "success": True,
            "doctors": doctors,
            "total": len(doctors)
        })

    @app.route('/doctors/availability', methods=['GET'])
    def check_availability():
        """GET /doctors/availability?doctor=Dr.%20X%20-%20Cardiologist"""
        doctor = doctor_param()
        if doctor is None:
            return invalid_request("doctor parameter is required")

        return jsonify({
            "success": True,
            "doctor": doctor,
            "available": service.is_available(doctor)
        })

    @app.route('/doctors/next-slot', methods=['GET'])
    def next_slot():
        """GET /doctors/next-slot?doctor=... - Propose a slot for tomorrow."""
        doctor = doctor_param()
        if doctor is None:
            return invalid_request("doctor parameter is required")

        return jsonify({
            "success": True,
            "doctor": doctor,
            "slot": service.next_available_slot(doctor)
        })

    @app.route('/appointments', methods=['POST'])
    def book_appointment():
        """POST /appointments - Book an appointment.

        Expected JSON body:
        {
            "doctor": "Dr. Sarah Wanjiku - Cardiologist",
            "patient_name": "Jane Doe"
        }
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return invalid_request("Request body must be a JSON object")

        try:
            booking = BookingRequest(**data)
        except ValidationError as e:
            return invalid_request(f"Invalid booking request: {e.errors()[0]['msg']}")

        confirmation = service.book_appointment(booking.doctor, booking.patient_name)
        return jsonify({
            "success": True,
            "appointment": confirmation.model_dump(),
            "message": f"Appointment confirmed! Appointment ID: {confirmation.appointment_id}"
        }), 201

    @app.route('/health', methods=['GET'])
    def health_check():
        """GET /health - Health check endpoint."""
        return jsonify({
            "success": True,
            "status": "healthy",
            "total_appointments": sum(service.appointment_stats().values()),
            "timestamp": datetime.now().isoformat()
        })

    return app


def print_startup_info(service: AppointmentService):
    """Print server startup information."""
    print("=" * 70)
    print(f"🏥 {config.HOSPITAL_NAME.upper()} BOOKING SERVER")
    print("=" * 70)
    print(f"\n📍 Server: http://{config.API_HOST}:{config.API_PORT}")
    doctors = service.list_doctors()
    print(f"👩‍⚕️ Doctors: {len(doctors)}")
    for doctor in doctors:
        print(f"   - {doctor}")

    print("\n📡 Endpoints:")
    print("   GET  /doctors                        - List doctors")
    print("   GET  /doctors/availability?doctor=.. - Check a doctor")
    print("   GET  /doctors/next-slot?doctor=...   - Next available slot")
    print("   POST /appointments                   - Book appointment")
    print("   GET  /health                         - Health check")

    print(f"\n📊 Stats report every {config.STATS_INTERVAL_SECONDS:g}s")
    print("\n✅ Server ready! Waiting for requests... (Ctrl+C to stop)")
    print("=" * 70)


def main():
    """Start the booking server with its periodic stats report."""
    setup_structured_logging(config.LOG_LEVEL)

    service = AppointmentService()
    app = create_app(service)
    reporter = StatsReporter(service, interval=config.STATS_INTERVAL_SECONDS)
    reporter.start()

    print_startup_info(service)
    try:
        app.run(host=config.API_HOST, port=config.API_PORT, threaded=True)
    finally:
        reporter.stop(timeout=1)


if __name__ == '__main__':
    main()
