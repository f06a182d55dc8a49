import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictError, InternalError, NotFoundError
from ..models.appointment import AppointmentStatus
from ..models.prescription import Prescription
from ..repositories.appointment_repository import AppointmentRepository
from ..schemas.prescription import PrescriptionCreate
from .scheduling_service import SchedulingService

logger = logging.getLogger(__name__)


class PrescriptionService:
    """Prescriptions keyed by appointment; issuing one completes the appointment."""

    def __init__(self, db: Session):
        self.db = db
        self.scheduling = SchedulingService(db)

    def find_by_appointment(self, appointment_id: int) -> Optional[Prescription]:
        return (
            self.db.query(Prescription)
            .filter(Prescription.appointment_id == appointment_id)
            .first()
        )

    def get_by_appointment(self, appointment_id: int) -> Prescription:
        prescription = self.find_by_appointment(appointment_id)
        if not prescription:
            raise NotFoundError("No prescription found for this appointment.")
        return prescription

    def save_prescription(self, data: PrescriptionCreate, doctor_id: int) -> Prescription:
        if AppointmentRepository.get_by_id(self.db, data.appointment_id) is None:
            raise NotFoundError("Appointment not found.")
        if self.find_by_appointment(data.appointment_id):
            raise ConflictError("Prescription already exists for this appointment.")

        prescription = Prescription(
            appointment_id=data.appointment_id,
            doctor_id=doctor_id,
            patient_name=data.patient_name.strip(),
            diagnosis=data.diagnosis,
            medications=[item.model_dump() for item in data.medications],
            doctor_notes=data.doctor_notes,
        )
        # Prescription and COMPLETED status commit together or not at all
        try:
            self.db.add(prescription)
            self.db.flush()
            self.scheduling.change_status(
                data.appointment_id, AppointmentStatus.COMPLETED, commit=False
            )
            self.db.commit()
        except NotFoundError:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Prescription already exists for this appointment.") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(f"Failed to save prescription for appointment {data.appointment_id}")
            raise InternalError("Error saving prescription.") from exc

        self.db.refresh(prescription)
        logger.info(f"Prescription {prescription.id} issued for appointment {data.appointment_id}")
        return prescription
