from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class AppointmentStatus(enum.IntEnum):
    """Lifecycle of a stored appointment.

    Cancellation deletes the row, so it has no status value.
    """
    SCHEDULED = 0
    COMPLETED = 1

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # One booking per doctor per instant
        UniqueConstraint("doctor_id", "appointment_time", name="uq_appointments_doctor_time"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)

    # Appointment details
    appointment_time = Column(DateTime, nullable=False, index=True)
    status = Column(SQLEnum(AppointmentStatus), nullable=False, default=AppointmentStatus.SCHEDULED)
    notes = Column(Text, nullable=True)

    # Tracking
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    doctor = relationship("Doctor", back_populates="appointments")
    patient = relationship("Patient", back_populates="appointments")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, time='{self.appointment_time}')>"
