import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import AuthenticationError, InternalError
from ..core.security import UserRole, get_password_hash, verify_password
from ..models.admin import Admin
from ..schemas.auth import AccountResponse, AdminLogin, LoginResponse, UserLogin
from .token_service import Account, TokenService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.tokens = TokenService(db)

    def _login(self, account: Optional[Account], password: str, subject: str, role: UserRole) -> LoginResponse:
        if not account or not account.password_hash or not verify_password(password, account.password_hash):
            logger.warning(f"Failed {role.value} login for {subject}")
            raise AuthenticationError("Invalid credentials.")

        token = self.tokens.issue_token(subject, role)
        logger.info(f"{role.value.capitalize()} {subject} logged in")
        return LoginResponse(message="Login successful.", token=token, role=role)

    def authenticate_admin(self, login_data: AdminLogin) -> LoginResponse:
        username = login_data.username.strip()
        admin = self.tokens.find_account(username, UserRole.ADMIN)
        return self._login(admin, login_data.password, username, UserRole.ADMIN)

    def authenticate_doctor(self, login_data: UserLogin) -> LoginResponse:
        doctor = self.tokens.find_account(login_data.email, UserRole.DOCTOR)
        if doctor is not None and not doctor.is_active:
            raise AuthenticationError("Invalid credentials.")
        return self._login(doctor, login_data.password, login_data.email, UserRole.DOCTOR)

    def authenticate_patient(self, login_data: UserLogin) -> LoginResponse:
        patient = self.tokens.find_account(login_data.email, UserRole.PATIENT)
        return self._login(patient, login_data.password, login_data.email, UserRole.PATIENT)

    def describe_account(self, account: Account, role: UserRole) -> AccountResponse:
        identifier = account.username if role == UserRole.ADMIN else account.email
        return AccountResponse(
            id=account.id,
            role=role,
            identifier=identifier,
            name=getattr(account, "name", None),
        )

    def ensure_default_admin(self) -> Optional[Admin]:
        """Create the configured bootstrap admin if it does not exist yet."""
        username = settings.DEFAULT_ADMIN_USERNAME
        password = settings.DEFAULT_ADMIN_PASSWORD
        if not username or not password:
            return None

        admin = self.db.query(Admin).filter(Admin.username == username).first()
        if admin:
            return admin

        admin = Admin(username=username, password_hash=get_password_hash(password))
        try:
            self.db.add(admin)
            self.db.commit()
            self.db.refresh(admin)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to create default admin")
            raise InternalError() from exc

        logger.info(f"Default admin '{username}' created")
        return admin
