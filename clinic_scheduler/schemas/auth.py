from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from ..core.security import UserRole


def validate_password_strength(value: str) -> str:
    """Shared password rule for patient signup and doctor accounts."""
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not any(char.isdigit() for char in value):
        raise ValueError("Password must contain at least one digit")
    if not any(char.isalpha() for char in value):
        raise ValueError("Password must contain at least one letter")
    return value


class AdminLogin(BaseModel):
    username: str
    password: str


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginResponse(BaseModel):
    message: str
    token: str
    role: UserRole


class TokenVerifyResponse(BaseModel):
    valid: bool
    subject: str
    role: UserRole
    expires: Optional[int] = None


class AccountResponse(BaseModel):
    id: int
    role: UserRole
    identifier: str
    name: Optional[str] = None
