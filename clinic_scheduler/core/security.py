from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi.security import HTTPBearer
from pydantic import BaseModel
from enum import Enum

from .config import settings
from .exceptions import AuthenticationError, AuthorizationError  # noqa: F401

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT Security
security = HTTPBearer()

class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"

class TokenPayload(BaseModel):
    sub: Optional[str] = None
    role: Optional[str] = None
    iat: Optional[int] = None
    exp: Optional[int] = None

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

# JWT utilities
def create_access_token(
    subject: str,
    role: Optional[UserRole] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed session token for ``subject``.

    The role is embedded as a claim when given. Tokens are valid for
    ``TOKEN_EXPIRE_DAYS`` unless ``expires_delta`` overrides it.
    """
    issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.TOKEN_EXPIRE_DAYS)

    to_encode = {
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    if role:
        to_encode["role"] = UserRole(role).value

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt

def verify_token(token: str) -> Optional[TokenPayload]:
    """Verify signature and expiry and decode the JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )

        return TokenPayload(**payload)

    except JWTError:
        return None

def get_token_subject(token: str) -> Optional[str]:
    """Extract the subject of a signed token without checking expiry or role."""
    try:
        claims = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": False}
        )
    except JWTError:
        return None
    return claims.get("sub")
