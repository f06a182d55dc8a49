import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError, InternalError, InvalidInputError
from ..core.security import get_password_hash
from ..models.appointment import Appointment, AppointmentStatus
from ..models.patient import Patient
from ..repositories.appointment_repository import AppointmentRepository
from ..schemas.patient import PatientCreate

logger = logging.getLogger(__name__)

CONDITION_STATUS = {
    "future": AppointmentStatus.SCHEDULED,
    "past": AppointmentStatus.COMPLETED,
}


class PatientService:
    def __init__(self, db: Session):
        self.db = db
        self.appointments = AppointmentRepository()

    def find_patient(self, patient_id: int) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.id == patient_id).first()

    def find_by_email(self, email: str) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.email == email.strip().lower()).first()

    def find_by_name(self, name: str) -> List[Patient]:
        return self.db.query(Patient).filter(Patient.name.ilike(f"%{name.strip()}%")).all()

    def create_patient(self, data: PatientCreate) -> Patient:
        """Sign up a patient. Email and phone must both be unused."""
        clauses = [Patient.email == data.email]
        if data.phone:
            clauses.append(Patient.phone == data.phone)
        if self.db.query(Patient).filter(or_(*clauses)).first():
            raise ConflictError("Patient with email id or phone no already exist")

        patient = Patient(
            name=data.name,
            email=data.email,
            password_hash=get_password_hash(data.password),
            phone=data.phone,
            address=data.address,
            date_of_birth=data.date_of_birth,
        )
        try:
            self.db.add(patient)
            self.db.commit()
            self.db.refresh(patient)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Patient signup failed")
            raise InternalError() from exc

        logger.info(f"Patient {patient.id} signed up")
        return patient

    def get_appointments(
        self,
        patient: Patient,
        condition: Optional[str] = None,
        doctor_name: Optional[str] = None,
    ) -> List[Appointment]:
        """Appointments of a patient, optionally narrowed by past/future and doctor name."""
        status = None
        if condition and condition.strip().lower() != "null":
            status = CONDITION_STATUS.get(condition.strip().lower())
            if status is None:
                raise InvalidInputError("Invalid condition. Use 'past' or 'future'.")

        has_name = bool(doctor_name and doctor_name.strip() and doctor_name.strip().lower() != "null")

        if has_name:
            return self.appointments.find_by_doctor_name_and_patient(
                self.db, doctor_name.strip(), patient.id, status
            )
        if status is not None:
            return self.appointments.find_by_patient_and_status(self.db, patient.id, status)
        return self.appointments.find_by_patient(self.db, patient.id)
