from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Tuple

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.security import security, verify_token, AuthenticationError, UserRole
from ..models.admin import Admin
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..services.token_service import Account, TokenService

async def get_token(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> str:
    """Raw bearer token from the Authorization header."""
    return credentials.credentials

async def get_current_account(
    token: str = Depends(get_token),
    db: Session = Depends(get_db)
) -> Tuple[Account, UserRole]:
    """Resolve any valid token to its account, using the role claim."""
    payload = verify_token(token)
    if not payload or not payload.role:
        raise AuthenticationError("Invalid or expired token")

    try:
        role = UserRole(payload.role)
    except ValueError:
        raise AuthenticationError("Invalid or expired token")

    token_service = TokenService(db)
    token_service.validate_token(token, role)
    return token_service.find_account(payload.sub, role), role

# Role-based access control dependencies
def require_role(role: UserRole):
    """Create a dependency that validates the token against one role."""
    async def role_checker(
        token: str = Depends(get_token),
        db: Session = Depends(get_db)
    ) -> Account:
        token_service = TokenService(db)
        payload = token_service.validate_token(token, role)
        return token_service.find_account(payload.sub, role)

    return role_checker

# Specific role dependencies
async def get_current_admin(
    admin: Admin = Depends(require_role(UserRole.ADMIN))
) -> Admin:
    return admin

async def get_current_doctor(
    doctor: Doctor = Depends(require_role(UserRole.DOCTOR))
) -> Doctor:
    return doctor

async def get_current_patient(
    patient: Patient = Depends(require_role(UserRole.PATIENT))
) -> Patient:
    return patient

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Per-IP rate limit for login and signup endpoints, one-hour window."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{request.url.path}:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, 3600, 1)
    else:
        if int(current_requests) >= settings.RATE_LIMIT_PER_HOUR:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
