from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, JSON
from sqlalchemy.sql import func

from ..core.database import Base

class Prescription(Base):
    """Prescription document, one per appointment."""
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    doctor_id = Column(Integer, nullable=True, index=True)
    patient_name = Column(String(100), nullable=False)

    diagnosis = Column(Text, nullable=True)
    # [{"name": ..., "dosage": ..., "frequency": ..., "duration": ...}]
    medications = Column(JSON, nullable=False, default=list)
    doctor_notes = Column(String(200), nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Prescription(id={self.id}, appointment_id={self.appointment_id})>"
