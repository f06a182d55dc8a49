from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_patient, rate_limit_check
from ...models.patient import Patient
from ...services.patient_service import PatientService
from ...schemas.appointment import AppointmentListResponse, AppointmentResponse
from ...schemas.patient import PatientCreate, PatientResponse

router = APIRouter(prefix="/patients", tags=["Patients"])

@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    patient_data: PatientCreate,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Register a new patient."""
    patient = PatientService(db).create_patient(patient_data)
    return PatientResponse.model_validate(patient)

@router.get("/me", response_model=PatientResponse)
async def get_patient_details(current_patient: Patient = Depends(get_current_patient)):
    return PatientResponse.model_validate(current_patient)

@router.get("/me/appointments", response_model=AppointmentListResponse)
async def get_patient_appointments(
    condition: Optional[str] = None,
    doctor_name: Optional[str] = None,
    db: Session = Depends(get_db),
    current_patient: Patient = Depends(get_current_patient)
):
    """Appointments of the current patient, filtered by past/future and doctor name."""
    appointments = PatientService(db).get_appointments(
        current_patient, condition=condition, doctor_name=doctor_name
    )
    return AppointmentListResponse(
        appointments=[AppointmentResponse.from_appointment(a) for a in appointments],
        message=None if appointments else "No appointments found."
    )
