from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_doctor, get_current_patient, get_token
from ...models.doctor import Doctor
from ...models.patient import Patient
from ...services.scheduling_service import SchedulingService
from ...schemas.appointment import (
    AppointmentCreate, AppointmentListResponse, AppointmentMessageResponse,
    AppointmentResponse, AppointmentStatusUpdate, AppointmentUpdate
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post("", response_model=AppointmentMessageResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    current_patient: Patient = Depends(get_current_patient)
):
    """Book an appointment for the current patient."""
    appointment = SchedulingService(db).book_appointment(appointment_data, current_patient.id)
    return AppointmentMessageResponse(
        message="Appointment booked successfully.",
        appointment=AppointmentResponse.from_appointment(appointment)
    )

@router.put("/{appointment_id}", response_model=AppointmentMessageResponse)
async def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    db: Session = Depends(get_db),
    current_patient: Patient = Depends(get_current_patient)
):
    """Move or edit one of the current patient's appointments."""
    appointment = SchedulingService(db).update_appointment(
        appointment_id, appointment_data, current_patient.id
    )
    return AppointmentMessageResponse(
        message="Appointment updated successfully.",
        appointment=AppointmentResponse.from_appointment(appointment)
    )

@router.delete("/{appointment_id}", response_model=AppointmentMessageResponse)
async def cancel_appointment(
    appointment_id: int,
    token: str = Depends(get_token),
    db: Session = Depends(get_db),
    _: Patient = Depends(get_current_patient)
):
    """Cancel one of the current patient's appointments."""
    SchedulingService(db).cancel_appointment(appointment_id, token)
    return AppointmentMessageResponse(message="Appointment cancelled successfully.")

@router.get("", response_model=AppointmentListResponse)
async def get_doctor_appointments(
    date: date_type,
    patient_name: Optional[str] = Query(default=None),
    token: str = Depends(get_token),
    db: Session = Depends(get_db),
    _: Doctor = Depends(get_current_doctor)
):
    """The current doctor's appointments on a date."""
    appointments, message = SchedulingService(db).get_appointments_for_doctor(token, patient_name, date)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.from_appointment(a) for a in appointments],
        message=message
    )

@router.patch("/{appointment_id}/status", response_model=AppointmentMessageResponse)
async def change_status(
    appointment_id: int,
    status_data: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    _: Doctor = Depends(get_current_doctor)
):
    """Set the status of an appointment."""
    SchedulingService(db).change_status(appointment_id, status_data.status)
    return AppointmentMessageResponse(message="Appointment status updated successfully.")
