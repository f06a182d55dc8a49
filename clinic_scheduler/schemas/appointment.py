from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from ..models.appointment import Appointment, AppointmentStatus

MAX_NOTES_LENGTH = 600


def _strip_timezone(value: datetime) -> datetime:
    # Appointments are stored as wall-clock local time
    return value.replace(tzinfo=None) if value.tzinfo else value


def _clean_notes(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip()
    if not normalized:
        return None
    if len(normalized) > MAX_NOTES_LENGTH:
        raise ValueError(f"Notes must be {MAX_NOTES_LENGTH} characters or fewer.")
    return normalized


class AppointmentCreate(BaseModel):
    doctor_id: int
    patient_id: Optional[int] = None
    appointment_time: datetime
    notes: Optional[str] = None

    @field_validator("appointment_time")
    @classmethod
    def validate_time(cls, value: datetime) -> datetime:
        return _strip_timezone(value)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, value: Optional[str]) -> Optional[str]:
        return _clean_notes(value)


class AppointmentUpdate(AppointmentCreate):
    """Full replacement of an appointment's doctor, patient, time and notes."""


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    """Appointment with doctor and patient display fields, never credentials."""

    id: int
    doctor_id: int
    doctor_name: Optional[str] = None
    patient_id: int
    patient_name: Optional[str] = None
    patient_email: Optional[str] = None
    patient_phone: Optional[str] = None
    patient_address: Optional[str] = None
    appointment_time: datetime
    appointment_date: date
    time_label: str
    status: int
    status_name: str
    notes: Optional[str] = None

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentResponse":
        doctor = appointment.doctor
        patient = appointment.patient
        status = AppointmentStatus(appointment.status)
        return cls(
            id=appointment.id,
            doctor_id=appointment.doctor_id,
            doctor_name=doctor.name if doctor else None,
            patient_id=appointment.patient_id,
            patient_name=patient.name if patient else None,
            patient_email=patient.email if patient else None,
            patient_phone=patient.phone if patient else None,
            patient_address=patient.address if patient else None,
            appointment_time=appointment.appointment_time,
            appointment_date=appointment.appointment_time.date(),
            time_label=appointment.appointment_time.strftime("%H:%M"),
            status=status.value,
            status_name=status.name.lower(),
            notes=appointment.notes,
        )


class AppointmentMessageResponse(BaseModel):
    message: str
    appointment: Optional[AppointmentResponse] = None


class AppointmentListResponse(BaseModel):
    appointments: List[AppointmentResponse]
    message: Optional[str] = None
