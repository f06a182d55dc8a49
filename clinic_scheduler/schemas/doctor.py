from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from ..utils.time_labels import parse_time_label
from .auth import validate_password_strength


def validate_available_times(values: List[str]) -> List[str]:
    """Reject labels that are not HH:MM times and drop duplicates, keeping order."""
    cleaned: List[str] = []
    for value in values:
        label = (value or "").strip()
        if parse_time_label(label) is None:
            raise ValueError(f"Invalid time label '{value}', expected HH:MM")
        if label not in cleaned:
            cleaned.append(label)
    return cleaned


class DoctorCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    specialty: str
    phone: Optional[str] = None
    is_active: bool = True
    available_times: List[str] = []

    @field_validator("name", "specialty")
    @classmethod
    def strip_required(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Field cannot be blank")
        return normalized

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return validate_password_strength(value)

    @field_validator("available_times")
    @classmethod
    def validate_times(cls, value: List[str]) -> List[str]:
        return validate_available_times(value)


class DoctorUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    specialty: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None
    available_times: Optional[List[str]] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().lower() if value else value

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return validate_password_strength(value)

    @field_validator("available_times")
    @classmethod
    def validate_times(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return validate_available_times(value)


class DoctorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    specialty: str
    phone: Optional[str] = None
    is_active: bool
    available_times: List[str] = []


class DoctorListResponse(BaseModel):
    doctors: List[DoctorResponse]


class DoctorMessageResponse(BaseModel):
    message: str
    doctor: Optional[DoctorResponse] = None


class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: date
    available_times: List[str]
