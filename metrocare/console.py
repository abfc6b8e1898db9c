#!/usr/bin/env python3
"""Console front-end for the MetroCare booking server.

Usage:
    metrocare-client   (or python -m metrocare.console)

Features:
- Numbered doctor selection
- Booking summary with y/n confirmation
- Keeps running when the server is down, with a reconnect option
"""
from typing import Callable, List, Optional

from metrocare import config
from metrocare.client import HospitalClient
from metrocare.errors import BookingError, CommunicationFailure, ErrorKind
from metrocare.logging_config import setup_structured_logging
from metrocare.models import AppointmentConfirmation


# ANSI color codes
class Colors:
    BLUE = '\033[94m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    RESET = '\033[0m'
    BOLD = '\033[1m'


ERROR_MESSAGES = {
    ErrorKind.EMPTY_PATIENT_NAME: "Patient name cannot be empty.",
    ErrorKind.UNKNOWN_DOCTOR: "That doctor is not available. Check the doctors list for exact names.",
    ErrorKind.INVALID_REQUEST: "The server rejected the request.",
    ErrorKind.APPOINTMENT_IDS_EXHAUSTED: "The hospital cannot take new bookings right now. Please call the front desk.",
    ErrorKind.COMMUNICATION_FAILURE: "Not connected to the hospital server.",
}


def print_colored(text: str, color: str = Colors.RESET, **kwargs):
    """Print colored text."""
    print(f"{color}{text}{Colors.RESET}", **kwargs)


def error_message(error: BookingError) -> str:
    """Display text for an error, chosen from its kind."""
    return ERROR_MESSAGES.get(error.kind, error.message)


def format_confirmation(confirmation: AppointmentConfirmation) -> str:
    """Render the confirmation block shown after a booking."""
    return "\n".join([
        "✅ APPOINTMENT CONFIRMED",
        f"Patient: {confirmation.patient_name}",
        f"Doctor: {confirmation.doctor}",
        f"Appointment Time: {confirmation.slot_time}",
        f"Appointment ID: {confirmation.appointment_id}",
        f"Specialization: {confirmation.specialization}",
        f"Location: {confirmation.location}",
        confirmation.notice,
    ])


class ConsoleFrontEnd:
    """Menu-driven console client."""

    def __init__(self, client: HospitalClient, read: Callable[[str], str] = input):
        self.client = client
        self.read = read

    def run(self):
        """Main interactive loop."""
        print_colored(f"🏥 Welcome to {config.HOSPITAL_NAME} Appointment System", Colors.BOLD)
        self.connect()

        running = True
        while running:
            try:
                running = self.show_main_menu()
            except (KeyboardInterrupt, EOFError):
                print()
                running = False
        self.say_goodbye()

    def connect(self) -> bool:
        """Probe the server and report whether it is reachable."""
        print_colored("Connecting to hospital server...", Colors.YELLOW)
        try:
            self.client.reconnect()
        except CommunicationFailure as e:
            self.show_not_connected(e)
            return False
        print_colored("✅ Connected to hospital server successfully!", Colors.GREEN)
        return True

    def show_main_menu(self) -> bool:
        """Display the menu and run one choice. Returns False on exit."""
        print_colored("\n" + "=" * 50, Colors.BLUE)
        print_colored(f"        {config.HOSPITAL_NAME.upper()} SYSTEM", Colors.BOLD)
        print_colored("=" * 50, Colors.BLUE)
        print("1. View Available Doctors")
        print("2. Book an Appointment")
        print("3. Check Doctor Availability")
        print("4. Get Next Available Slot")
        print("5. Exit")
        if not self.client.connected:
            print_colored("R. Reconnect to server (currently not connected)", Colors.YELLOW)
        print_colored("=" * 50, Colors.BLUE)

        choice = self.read("Please select an option (1-5): ").strip().lower()

        actions = {
            "1": self.view_doctors,
            "2": self.book_appointment,
            "3": self.check_availability,
            "4": self.next_available_slot,
            "r": self.connect,
        }
        if choice == "5":
            return False
        if choice not in actions:
            print_colored("❌ Invalid option. Please select 1-5.", Colors.RED)
            return True

        try:
            actions[choice]()
        except CommunicationFailure as e:
            self.show_not_connected(e)
        except BookingError as e:
            print_colored(f"❌ {error_message(e)}", Colors.RED)
        return True

    def view_doctors(self):
        print_colored(f"\n📋 Available Doctors at {config.HOSPITAL_NAME}:", Colors.BOLD)
        print("-" * 60)
        doctors = self.client.list_doctors()
        self.print_doctors(doctors)
        print("-" * 60)
        print(f"Total doctors available: {len(doctors)}")

    def book_appointment(self):
        print_colored("\n📅 Book an Appointment", Colors.BOLD)
        print("-" * 30)

        doctor = self.select_doctor(self.client.list_doctors())
        if doctor is None:
            return

        patient_name = self.read("Enter patient name: ").strip()
        if not patient_name:
            print_colored(f"❌ {ERROR_MESSAGES[ErrorKind.EMPTY_PATIENT_NAME]}", Colors.RED)
            return

        print_colored("\n📋 Booking Summary:", Colors.BOLD)
        print(f"Doctor: {doctor}")
        print(f"Patient: {patient_name}")
        confirm = self.read("Confirm booking? (y/n): ").strip().lower()
        if confirm not in ("y", "yes"):
            print_colored("❌ Booking cancelled.", Colors.YELLOW)
            return

        print("\n⏳ Processing appointment...")
        confirmation = self.client.book_appointment(doctor, patient_name)
        print("\n" + "=" * 60)
        print_colored(format_confirmation(confirmation), Colors.GREEN)
        print("=" * 60)

    def check_availability(self):
        print_colored("\n🔍 Check Doctor Availability", Colors.BOLD)
        print("-" * 35)

        doctor = self.read("Enter doctor name to check: ").strip()
        if not doctor:
            print_colored("❌ Doctor name cannot be empty.", Colors.RED)
            return

        if self.client.is_available(doctor):
            print_colored(f"✅ {doctor} is available for appointments.", Colors.GREEN)
        else:
            print_colored(f"❌ {doctor} is not available.", Colors.RED)
            print("Please check the available doctors list for correct names.")

    def next_available_slot(self):
        print_colored("\n🕒 Get Next Available Slot", Colors.BOLD)
        print("-" * 35)

        doctor = self.select_doctor(self.client.list_doctors())
        if doctor is None:
            return

        slot = self.client.next_available_slot(doctor)
        print_colored("\n📅 Next available appointment slot:", Colors.BOLD)
        print(f"Doctor: {doctor}")
        print(f"Available time: {slot}")

    def select_doctor(self, doctors: List[str]) -> Optional[str]:
        """Ask for a doctor by number; None if the choice is invalid."""
        print("Available doctors:")
        self.print_doctors(doctors)

        raw = self.read(f"\nSelect doctor (enter number 1-{len(doctors)}): ").strip()
        if not raw.isdigit() or not 1 <= int(raw) <= len(doctors):
            print_colored("❌ Invalid doctor selection.", Colors.RED)
            return None
        return doctors[int(raw) - 1]

    @staticmethod
    def print_doctors(doctors: List[str]):
        for i, doctor in enumerate(doctors, start=1):
            print(f"{i}. {doctor}")

    @staticmethod
    def show_not_connected(error: CommunicationFailure):
        print_colored(f"❌ {ERROR_MESSAGES[ErrorKind.COMMUNICATION_FAILURE]}", Colors.RED)
        print_colored(f"   {error.message}", Colors.RED)
        print_colored(
            f"Please ensure the server is running at {config.API_BASE_URL} "
            "and choose R to reconnect.",
            Colors.YELLOW,
        )

    @staticmethod
    def say_goodbye():
        print_colored(f"\nThank you for using {config.HOSPITAL_NAME} System!", Colors.GREEN)
        print("Have a great day! 🌟")


def main():
    """Start the console client."""
    setup_structured_logging("WARNING")
    client = HospitalClient(max_retries=1)
    try:
        ConsoleFrontEnd(client).run()
    finally:
        client.close()


if __name__ == "__main__":
    main()
