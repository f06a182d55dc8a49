from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Tuple

from ...core.database import get_db
from ...core.security import UserRole
from ...api.deps import get_current_account, get_token, rate_limit_check
from ...services.auth_service import AuthService
from ...services.token_service import Account, TokenService
from ...schemas.auth import (
    AccountResponse, AdminLogin, LoginResponse, TokenVerifyResponse, UserLogin
)

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/admin/login", response_model=LoginResponse)
async def admin_login(
    login_data: AdminLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate an admin by username and return a session token."""
    return AuthService(db).authenticate_admin(login_data)

@router.post("/doctor/login", response_model=LoginResponse)
async def doctor_login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a doctor by email and return a session token."""
    return AuthService(db).authenticate_doctor(login_data)

@router.post("/patient/login", response_model=LoginResponse)
async def patient_login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a patient by email and return a session token."""
    return AuthService(db).authenticate_patient(login_data)

@router.post("/verify-token", response_model=TokenVerifyResponse)
async def verify_token_endpoint(
    role: UserRole,
    token: str = Depends(get_token),
    db: Session = Depends(get_db)
):
    """Verify that a token is valid for the given role."""
    payload = TokenService(db).validate_token(token, role)
    return TokenVerifyResponse(
        valid=True,
        subject=payload.sub,
        role=role,
        expires=payload.exp
    )

@router.get("/me", response_model=AccountResponse)
async def get_current_account_info(
    db: Session = Depends(get_db),
    current: Tuple[Account, UserRole] = Depends(get_current_account)
):
    """Get the account behind the current token."""
    account, role = current
    return AuthService(db).describe_account(account, role)

@router.post("/logout")
async def logout():
    """Tokens are not revoked server-side; the client discards its token."""
    return {"message": "Logged out. Discard the token on the client."}
