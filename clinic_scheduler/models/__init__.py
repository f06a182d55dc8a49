from .admin import Admin
from .doctor import Doctor
from .patient import Patient
from .appointment import Appointment, AppointmentStatus
from .prescription import Prescription

__all__ = ["Admin", "Doctor", "Patient", "Appointment", "AppointmentStatus", "Prescription"]
