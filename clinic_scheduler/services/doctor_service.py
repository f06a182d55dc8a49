"""Doctor directory - profiles, availability labels and search filters"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError, InternalError, InvalidInputError, NotFoundError
from ..core.security import get_password_hash
from ..models.doctor import Doctor
from ..repositories.appointment_repository import AppointmentRepository
from ..schemas.doctor import DoctorCreate, DoctorUpdate
from ..utils.time_labels import has_period, normalize_period

logger = logging.getLogger(__name__)


def _has_value(value: Optional[str]) -> bool:
    # Clients send the literal string "null" for an unset path/query filter
    return bool(value and value.strip() and value.strip().lower() != "null")


class DoctorService:
    def __init__(self, db: Session):
        self.db = db

    def find_doctor(self, doctor_id: Optional[int]) -> Optional[Doctor]:
        if doctor_id is None:
            return None
        return self.db.query(Doctor).filter(Doctor.id == doctor_id).first()

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.find_doctor(doctor_id)
        if not doctor:
            raise NotFoundError("Doctor not found.")
        return doctor

    def find_by_email(self, email: str) -> Optional[Doctor]:
        return self.db.query(Doctor).filter(Doctor.email == email.strip().lower()).first()

    def availability_labels(self, doctor_id: int) -> List[str]:
        doctor = self.get_doctor(doctor_id)
        return list(doctor.available_times or [])

    def list_doctors(self) -> List[Doctor]:
        return self.db.query(Doctor).order_by(Doctor.name.asc()).all()

    def find_by_name(self, name: str) -> List[Doctor]:
        return (
            self.db.query(Doctor)
            .filter(Doctor.name.ilike(f"%{name.strip()}%"))
            .order_by(Doctor.name.asc())
            .all()
        )

    def filter_doctors(
        self,
        name: Optional[str] = None,
        specialty: Optional[str] = None,
        time_of_day: Optional[str] = None,
    ) -> List[Doctor]:
        """Filter by name substring, exact specialty and AM/PM availability.

        Every filter is optional and case-insensitive; no match yields an
        empty list.
        """
        query = self.db.query(Doctor)
        if _has_value(name):
            query = query.filter(Doctor.name.ilike(f"%{name.strip()}%"))
        if _has_value(specialty):
            query = query.filter(func.lower(Doctor.specialty) == specialty.strip().lower())

        doctors = query.order_by(Doctor.name.asc()).all()

        if _has_value(time_of_day):
            period = normalize_period(time_of_day)
            if period is None:
                raise InvalidInputError("Time filter must be 'AM' or 'PM'.")
            doctors = [doctor for doctor in doctors if has_period(doctor.available_times, period)]

        return doctors

    def create_doctor(self, data: DoctorCreate) -> Doctor:
        if self.find_by_email(data.email):
            raise ConflictError("Doctor with this email already exists.")

        doctor = Doctor(
            name=data.name,
            email=data.email,
            password_hash=get_password_hash(data.password),
            specialty=data.specialty,
            phone=data.phone,
            is_active=data.is_active,
            available_times=list(data.available_times),
        )
        try:
            self.db.add(doctor)
            self.db.commit()
            self.db.refresh(doctor)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"Failed to save doctor {data.email}")
            raise InternalError("Error saving doctor.") from exc

        logger.info(f"Doctor {doctor.id} created")
        return doctor

    def update_doctor(self, doctor_id: int, data: DoctorUpdate) -> Doctor:
        doctor = self.get_doctor(doctor_id)

        if data.email and data.email != doctor.email:
            other = self.find_by_email(data.email)
            if other and other.id != doctor.id:
                raise ConflictError("Doctor with this email already exists.")
            doctor.email = data.email

        if data.name is not None:
            doctor.name = data.name.strip()
        if data.specialty is not None:
            doctor.specialty = data.specialty.strip()
        if data.phone is not None:
            doctor.phone = data.phone
        if data.is_active is not None:
            doctor.is_active = data.is_active
        if data.available_times is not None:
            doctor.available_times = list(data.available_times)
        # Only replace the password if a new one was provided
        if data.password:
            doctor.password_hash = get_password_hash(data.password)

        try:
            self.db.commit()
            self.db.refresh(doctor)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"Failed to update doctor {doctor_id}")
            raise InternalError("Error updating doctor.") from exc

        return doctor

    def delete_doctor(self, doctor_id: int) -> None:
        """Delete a doctor together with all of their appointments."""
        doctor = self.get_doctor(doctor_id)
        try:
            removed = AppointmentRepository.delete_by_doctor(self.db, doctor.id)
            self.db.delete(doctor)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"Failed to delete doctor {doctor_id}")
            raise InternalError("Error deleting doctor.") from exc

        logger.info(f"Doctor {doctor_id} deleted with {removed} appointment(s)")
