from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MedicationItem(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    dosage: str = Field(min_length=1)
    frequency: Optional[str] = None
    duration: Optional[str] = None


class PrescriptionCreate(BaseModel):
    appointment_id: int
    patient_name: str = Field(min_length=3, max_length=100)
    diagnosis: Optional[str] = None
    medications: List[MedicationItem] = Field(min_length=1)
    doctor_notes: Optional[str] = Field(default=None, max_length=200)


class PrescriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    appointment_id: int
    doctor_id: Optional[int] = None
    patient_name: str
    diagnosis: Optional[str] = None
    medications: List[MedicationItem]
    doctor_notes: Optional[str] = None
    created_at: Optional[datetime] = None


class PrescriptionMessageResponse(BaseModel):
    message: str
    prescription: Optional[PrescriptionResponse] = None


class PrescriptionListResponse(BaseModel):
    prescriptions: List[PrescriptionResponse]
