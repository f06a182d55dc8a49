from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_doctor
from ...models.doctor import Doctor
from ...services.prescription_service import PrescriptionService
from ...schemas.prescription import (
    PrescriptionCreate, PrescriptionListResponse, PrescriptionMessageResponse, PrescriptionResponse
)

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

@router.post("", response_model=PrescriptionMessageResponse, status_code=status.HTTP_201_CREATED)
async def save_prescription(
    prescription_data: PrescriptionCreate,
    db: Session = Depends(get_db),
    current_doctor: Doctor = Depends(get_current_doctor)
):
    """Issue a prescription and mark its appointment completed."""
    prescription = PrescriptionService(db).save_prescription(prescription_data, current_doctor.id)
    return PrescriptionMessageResponse(
        message="Prescription saved.",
        prescription=PrescriptionResponse.model_validate(prescription)
    )

@router.get("/{appointment_id}", response_model=PrescriptionListResponse)
async def get_prescription(
    appointment_id: int,
    db: Session = Depends(get_db),
    _: Doctor = Depends(get_current_doctor)
):
    prescription = PrescriptionService(db).get_by_appointment(appointment_id)
    return PrescriptionListResponse(prescriptions=[PrescriptionResponse.model_validate(prescription)])
