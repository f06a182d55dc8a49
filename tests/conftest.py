import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set testing environment before the app reads its settings
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

from clinic_scheduler.main import app  # noqa: E402
from clinic_scheduler.core.database import Base, get_db, get_redis  # noqa: E402
from clinic_scheduler.core.security import UserRole, create_access_token, get_password_hash  # noqa: E402
from clinic_scheduler.models import Admin, Doctor, Patient  # noqa: E402

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False, "timeout": 30}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "Password123"


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


class RedisMock:
    """In-memory stand-in for the rate limiter's redis commands."""

    def __init__(self):
        self.data = {}

    def setex(self, key, time, value):
        self.data[key] = str(value)
        return True

    def get(self, key):
        return self.data.get(key)

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, "0")) + 1)
        return int(self.data[key])


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def redis_mock():
    mock = RedisMock()
    app.dependency_overrides[get_redis] = lambda: mock
    yield mock
    app.dependency_overrides.pop(get_redis, None)


@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(test_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def session_factory(test_db):
    return TestingSessionLocal


def make_doctor(db, **overrides):
    data = {
        "name": "Dr. A",
        "email": "dr.a@clinic.example.com",
        "password_hash": get_password_hash(DEFAULT_PASSWORD),
        "specialty": "Cardiology",
        "phone": "5550000001",
        "is_active": True,
        "available_times": ["09:00", "09:30", "10:00"],
    }
    data.update(overrides)
    doctor = Doctor(**data)
    db.add(doctor)
    db.commit()
    db.refresh(doctor)
    return doctor


def make_patient(db, **overrides):
    data = {
        "name": "Patient P",
        "email": "patient.p@clinic.example.com",
        "password_hash": get_password_hash(DEFAULT_PASSWORD),
        "phone": "5551112222",
        "address": "1 Main Street",
    }
    data.update(overrides)
    patient = Patient(**data)
    db.add(patient)
    db.commit()
    db.refresh(patient)
    return patient


def make_admin(db, username="admin", password=DEFAULT_PASSWORD):
    admin = Admin(username=username, password_hash=get_password_hash(password))
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def auth_headers(subject, role):
    token = create_access_token(subject, UserRole(role))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def doctor(db_session):
    return make_doctor(db_session)


@pytest.fixture
def patient(db_session):
    return make_patient(db_session)


@pytest.fixture
def other_patient(db_session):
    return make_patient(db_session, name="Patient Q", email="patient.q@clinic.example.com", phone="5553334444")


@pytest.fixture
def admin(db_session):
    return make_admin(db_session)


@pytest.fixture
def doctor_headers(doctor):
    return auth_headers(doctor.email, UserRole.DOCTOR)


@pytest.fixture
def patient_headers(patient):
    return auth_headers(patient.email, UserRole.PATIENT)


@pytest.fixture
def other_patient_headers(other_patient):
    return auth_headers(other_patient.email, UserRole.PATIENT)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin.username, UserRole.ADMIN)
