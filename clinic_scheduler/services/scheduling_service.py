"""
Scheduling engine: slot availability and appointment mutations.

Free slots are the doctor's availability labels minus the times already
booked on that date. The availability check before a write is only a fast
path; the ``(doctor_id, appointment_time)`` unique constraint is what
actually prevents two concurrent requests from booking the same slot, and
the row version counter turns lost updates into conflicts.
"""
import enum
import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.exceptions import (
    AuthorizationError, ConflictError, InternalError, InvalidInputError, NotFoundError
)
from ..models.appointment import Appointment, AppointmentStatus
from ..models.patient import Patient
from ..repositories.appointment_repository import AppointmentRepository, day_bounds
from ..schemas.appointment import AppointmentCreate, AppointmentUpdate
from ..utils.time_labels import parse_time_label, slot_key, truncate_to_minute
from .doctor_service import DoctorService
from .token_service import TokenService

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "Selected time slot is no longer available."
STALE_WRITE_MESSAGE = "Appointment was modified by another request. Please reload and try again."


class ValidationResult(enum.Enum):
    OK = "ok"
    DOCTOR_INVALID = "doctor_invalid"
    SLOT_UNAVAILABLE = "slot_unavailable"


class SchedulingService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.doctors = DoctorService(db)
        self.tokens = TokenService(db)

    def get_availability(
        self,
        doctor_id: int,
        day: date,
        exclude_appointment_id: Optional[int] = None,
    ) -> List[str]:
        """Free time labels of a doctor on ``day``, in the doctor's own order.

        Labels that do not parse as a time of day are kept as available and
        logged, so a malformed entry never blocks the doctor's calendar.
        ``exclude_appointment_id`` leaves one booking out of the booked set.
        """
        doctor = self.doctors.get_doctor(doctor_id)
        labels = list(doctor.available_times or [])
        if not labels or not doctor.is_active:
            return []

        start, end = day_bounds(day)
        booked = {
            slot_key(appointment.appointment_time.time())
            for appointment in self.repo.find_by_doctor_and_range(
                self.db, doctor.id, start, end, exclude_id=exclude_appointment_id
            )
        }

        available = []
        for label in labels:
            parsed = parse_time_label(label)
            if parsed is None:
                logger.warning(f"Doctor {doctor.id} has unparseable availability label {label!r}")
                available.append(label)
            elif slot_key(parsed) not in booked:
                available.append(label)
        return available

    def validate_appointment(
        self,
        doctor_id: Optional[int],
        appointment_time: Optional[datetime],
        exclude_appointment_id: Optional[int] = None,
    ) -> ValidationResult:
        """Check that the doctor exists and the requested minute is still free."""
        if doctor_id is None or self.doctors.find_doctor(doctor_id) is None:
            return ValidationResult.DOCTOR_INVALID
        if appointment_time is None:
            return ValidationResult.SLOT_UNAVAILABLE

        requested = slot_key(appointment_time.time())
        free = self.get_availability(
            doctor_id, appointment_time.date(), exclude_appointment_id=exclude_appointment_id
        )
        for label in free:
            parsed = parse_time_label(label)
            key = slot_key(parsed) if parsed is not None else label.strip()[:5]
            if key == requested:
                return ValidationResult.OK
        return ValidationResult.SLOT_UNAVAILABLE

    def book_appointment(self, data: AppointmentCreate, patient_id: int) -> Appointment:
        """Validate and insert a new appointment for ``patient_id``."""
        if data.patient_id is not None and data.patient_id != patient_id:
            raise AuthorizationError("Appointments can only be booked for your own account.")
        if self.db.query(Patient).filter(Patient.id == patient_id).first() is None:
            raise NotFoundError("Patient not found.")

        appointment_time = truncate_to_minute(data.appointment_time)
        result = self.validate_appointment(data.doctor_id, appointment_time)
        if result is ValidationResult.DOCTOR_INVALID:
            raise NotFoundError("Doctor does not exist.")
        if result is ValidationResult.SLOT_UNAVAILABLE:
            raise ConflictError("Selected time slot is not available.")

        try:
            appointment = self.repo.create(
                self.db,
                doctor_id=data.doctor_id,
                patient_id=patient_id,
                appointment_time=appointment_time,
                status=AppointmentStatus.SCHEDULED,
                notes=data.notes,
            )
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(
                f"Double booking rejected for doctor {data.doctor_id} at {appointment_time.isoformat()}"
            )
            raise ConflictError(SLOT_TAKEN_MESSAGE) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to book appointment")
            raise InternalError("Failed to book appointment. Please try again.") from exc

        logger.info(
            f"Appointment {appointment.id} booked: doctor {appointment.doctor_id}, "
            f"patient {appointment.patient_id}, {appointment.appointment_time.isoformat()}"
        )
        return appointment

    def update_appointment(
        self, appointment_id: int, data: AppointmentUpdate, patient_id: int
    ) -> Appointment:
        """Move or edit an appointment owned by ``patient_id``.

        The appointment's own current slot does not count as booked while the
        new doctor/time is re-validated.
        """
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found.")
        if appointment.patient_id != patient_id:
            raise AuthorizationError("You are not authorized to update this appointment.")
        if data.patient_id is not None and data.patient_id != patient_id:
            raise AuthorizationError("Appointments cannot be reassigned to another patient.")

        appointment_time = truncate_to_minute(data.appointment_time)
        result = self.validate_appointment(
            data.doctor_id, appointment_time, exclude_appointment_id=appointment.id
        )
        if result is ValidationResult.DOCTOR_INVALID:
            raise InvalidInputError("Doctor not found or invalid appointment details.")
        if result is ValidationResult.SLOT_UNAVAILABLE:
            raise ConflictError("Doctor is not available at the selected time.")

        try:
            appointment = self.repo.update(
                self.db,
                appointment,
                doctor_id=data.doctor_id,
                appointment_time=appointment_time,
                notes=data.notes,
            )
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(SLOT_TAKEN_MESSAGE) from exc
        except StaleDataError as exc:
            self.db.rollback()
            logger.warning(f"Stale update rejected for appointment {appointment_id}")
            raise ConflictError(STALE_WRITE_MESSAGE) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"Failed to update appointment {appointment_id}")
            raise InternalError("Error updating appointment.") from exc

        logger.info(f"Appointment {appointment.id} updated")
        return appointment

    def cancel_appointment(self, appointment_id: int, token: str) -> None:
        """Hard-delete an appointment; only its own patient may cancel it."""
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found.")

        patient_id = self.tokens.patient_id_from_token(token)
        if patient_id is None or appointment.patient_id != patient_id:
            raise AuthorizationError("You are not authorized to cancel this appointment.")

        try:
            self.repo.delete(self.db, appointment)
        except StaleDataError as exc:
            self.db.rollback()
            raise ConflictError(STALE_WRITE_MESSAGE) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"Failed to cancel appointment {appointment_id}")
            raise InternalError("Error cancelling appointment.") from exc

        logger.info(f"Appointment {appointment_id} cancelled")

    def change_status(self, appointment_id: int, status: AppointmentStatus, commit: bool = True) -> None:
        """Set only the status column of an appointment.

        With ``commit=False`` the update joins the caller's open transaction.
        """
        try:
            updated = self.repo.update_status(
                self.db, appointment_id, AppointmentStatus(status), commit=commit
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"Failed to change status of appointment {appointment_id}")
            raise InternalError("Error updating appointment status.") from exc

        if not updated:
            raise NotFoundError("Appointment not found.")
        logger.info(f"Appointment {appointment_id} status set to {AppointmentStatus(status).name}")

    def get_appointments_for_doctor(
        self,
        token: str,
        patient_name: Optional[str],
        day: date,
    ) -> Tuple[List[Appointment], Optional[str]]:
        """A doctor's appointments on ``day``, optionally by patient name.

        Returns an empty list and a message instead of raising when the
        token does not belong to a doctor.
        """
        doctor_id = self.tokens.doctor_id_from_token(token)
        if doctor_id is None:
            return [], "Invalid doctor token."

        start, end = day_bounds(day)
        name = (patient_name or "").strip()
        if name and name.lower() != "null":
            appointments = self.repo.find_by_doctor_patient_name_and_range(
                self.db, doctor_id, name, start, end
            )
        else:
            appointments = self.repo.find_by_doctor_and_range(self.db, doctor_id, start, end)

        if not appointments:
            return [], "No appointments found for this date."
        return appointments, None
