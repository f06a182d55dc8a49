from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_admin
from ...models.admin import Admin
from ...services.doctor_service import DoctorService
from ...services.scheduling_service import SchedulingService
from ...schemas.doctor import (
    AvailabilityResponse, DoctorCreate, DoctorListResponse,
    DoctorMessageResponse, DoctorResponse, DoctorUpdate
)

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.get("", response_model=DoctorListResponse)
async def list_doctors(db: Session = Depends(get_db)):
    """List every doctor."""
    doctors = DoctorService(db).list_doctors()
    return DoctorListResponse(doctors=[DoctorResponse.model_validate(d) for d in doctors])

@router.get("/filter", response_model=DoctorListResponse)
async def filter_doctors(
    name: Optional[str] = None,
    specialty: Optional[str] = None,
    time: Optional[str] = Query(default=None, description="AM or PM"),
    db: Session = Depends(get_db)
):
    """Filter doctors by name, specialty and AM/PM availability."""
    doctors = DoctorService(db).filter_doctors(name=name, specialty=specialty, time_of_day=time)
    return DoctorListResponse(doctors=[DoctorResponse.model_validate(d) for d in doctors])

@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    return DoctorResponse.model_validate(DoctorService(db).get_doctor(doctor_id))

@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
async def get_availability(
    doctor_id: int,
    date: date_type,
    db: Session = Depends(get_db)
):
    """Free time labels of a doctor on a calendar date."""
    available = SchedulingService(db).get_availability(doctor_id, date)
    return AvailabilityResponse(doctor_id=doctor_id, date=date, available_times=available)

@router.post("", response_model=DoctorMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    doctor_data: DoctorCreate,
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin)
):
    """Add a doctor (admin only)."""
    doctor = DoctorService(db).create_doctor(doctor_data)
    return DoctorMessageResponse(message="Doctor added successfully.", doctor=DoctorResponse.model_validate(doctor))

@router.put("/{doctor_id}", response_model=DoctorMessageResponse)
async def update_doctor(
    doctor_id: int,
    doctor_data: DoctorUpdate,
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin)
):
    """Update a doctor (admin only)."""
    doctor = DoctorService(db).update_doctor(doctor_id, doctor_data)
    return DoctorMessageResponse(message="Doctor updated successfully.", doctor=DoctorResponse.model_validate(doctor))

@router.delete("/{doctor_id}", response_model=DoctorMessageResponse)
async def delete_doctor(
    doctor_id: int,
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin)
):
    """Delete a doctor and their appointments (admin only)."""
    DoctorService(db).delete_doctor(doctor_id)
    return DoctorMessageResponse(message="Doctor deleted successfully.")
