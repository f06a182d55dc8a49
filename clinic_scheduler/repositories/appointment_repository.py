"""Appointment repository - database operations for appointments"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open ``[start_of_day, start_of_next_day)`` window for a date."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


class AppointmentRepository:
    """Repository for appointment database operations.

    Writes flush and commit; callers own rollback on failure.
    """

    @staticmethod
    def _with_parties(db: Session):
        return db.query(Appointment).options(
            joinedload(Appointment.doctor),
            joinedload(Appointment.patient),
        )

    @staticmethod
    def get_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return (
            AppointmentRepository._with_parties(db)
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def create(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update(db: Session, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)

        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()

    @staticmethod
    def delete_by_doctor(db: Session, doctor_id: int) -> int:
        """Remove every appointment of a doctor; commit is left to the caller."""
        return (
            db.query(Appointment)
            .filter(Appointment.doctor_id == doctor_id)
            .delete(synchronize_session=False)
        )

    @staticmethod
    def update_status(
        db: Session, appointment_id: int, status: AppointmentStatus, commit: bool = True
    ) -> int:
        """Change only the status column. Returns the number of rows touched."""
        updated = (
            db.query(Appointment)
            .filter(Appointment.id == appointment_id)
            .update(
                {
                    Appointment.status: status,
                    Appointment.version: Appointment.version + 1,
                },
                synchronize_session=False,
            )
        )
        if commit:
            db.commit()
        return updated

    @staticmethod
    def find_by_doctor_and_range(
        db: Session,
        doctor_id: int,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> list[Appointment]:
        query = AppointmentRepository._with_parties(db).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time >= start,
            Appointment.appointment_time < end,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.order_by(Appointment.appointment_time.asc()).all()

    @staticmethod
    def find_by_doctor_patient_name_and_range(
        db: Session,
        doctor_id: int,
        patient_name: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        return (
            AppointmentRepository._with_parties(db)
            .join(Appointment.patient)
            .filter(
                Appointment.doctor_id == doctor_id,
                Patient.name.ilike(f"%{patient_name}%"),
                Appointment.appointment_time >= start,
                Appointment.appointment_time < end,
            )
            .order_by(Appointment.appointment_time.asc())
            .all()
        )

    @staticmethod
    def find_by_patient(db: Session, patient_id: int) -> list[Appointment]:
        return (
            AppointmentRepository._with_parties(db)
            .filter(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_time.asc())
            .all()
        )

    @staticmethod
    def find_by_patient_and_status(
        db: Session, patient_id: int, status: AppointmentStatus
    ) -> list[Appointment]:
        return (
            AppointmentRepository._with_parties(db)
            .filter(
                Appointment.patient_id == patient_id,
                Appointment.status == status,
            )
            .order_by(Appointment.appointment_time.asc())
            .all()
        )

    @staticmethod
    def find_by_doctor_name_and_patient(
        db: Session,
        doctor_name: str,
        patient_id: int,
        status: Optional[AppointmentStatus] = None,
    ) -> list[Appointment]:
        query = (
            AppointmentRepository._with_parties(db)
            .join(Appointment.doctor)
            .filter(
                Doctor.name.ilike(f"%{doctor_name}%"),
                Appointment.patient_id == patient_id,
            )
        )
        if status is not None:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.appointment_time.asc()).all()
