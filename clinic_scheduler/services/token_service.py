import logging
from typing import Optional, Union

from jose import JWTError
from sqlalchemy.orm import Session

from ..core.exceptions import AuthenticationError, InternalError
from ..core.security import (
    TokenPayload, UserRole, create_access_token, get_token_subject, verify_token
)
from ..models.admin import Admin
from ..models.doctor import Doctor
from ..models.patient import Patient

logger = logging.getLogger(__name__)

Account = Union[Admin, Doctor, Patient]


class TokenService:
    """Issues session tokens and maps them back to directory accounts.

    Tokens are stateless; an account that has been deleted implicitly
    invalidates every token issued for it because validation looks the
    subject up again.
    """

    def __init__(self, db: Session):
        self.db = db

    def issue_token(self, subject: str, role: Optional[UserRole] = None) -> str:
        """Sign a token for ``subject`` valid for the configured window."""
        try:
            return create_access_token(subject, role)
        except JWTError as exc:
            logger.exception("Token signing failed")
            raise InternalError() from exc

    def validate_token(self, token: str, expected_role: UserRole) -> TokenPayload:
        """Check signature, expiry, role claim and that the account still exists.

        Doctors must also still be active.
        """
        payload = verify_token(token)
        if not payload or not payload.sub:
            raise AuthenticationError("Invalid or expired token")

        if payload.role and payload.role != UserRole(expected_role).value:
            raise AuthenticationError("Invalid or expired token")

        account = self.find_account(payload.sub, expected_role)
        if account is None:
            raise AuthenticationError("Invalid or expired token")

        # Deactivation revokes outstanding doctor tokens, not only new logins
        if isinstance(account, Doctor) and not account.is_active:
            raise AuthenticationError("Invalid or expired token")

        return payload

    def resolve_identity(self, token: str) -> Optional[str]:
        return get_token_subject(token)

    def find_account(self, subject: str, role: UserRole) -> Optional[Account]:
        role = UserRole(role)
        if role == UserRole.ADMIN:
            return self.db.query(Admin).filter(Admin.username == subject).first()
        if role == UserRole.DOCTOR:
            return self.db.query(Doctor).filter(Doctor.email == subject).first()
        return self.db.query(Patient).filter(Patient.email == subject).first()

    def doctor_id_from_token(self, token: str) -> Optional[int]:
        """Doctor id for the token's subject, or None when nothing matches."""
        subject = self.resolve_identity(token)
        if not subject:
            return None
        doctor = self.find_account(subject, UserRole.DOCTOR)
        return doctor.id if doctor else None

    def patient_id_from_token(self, token: str) -> Optional[int]:
        """Patient id for the token's subject, or None when nothing matches."""
        subject = self.resolve_identity(token)
        if not subject:
            return None
        patient = self.find_account(subject, UserRole.PATIENT)
        return patient.id if patient else None
