"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time; give the test run a self-contained config
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-ems-directory-tests")
os.environ.setdefault("APP_ENV", "local")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine

from ems.main import app
from ems.db.base import Base
from ems.core.deps import get_db
from ems.core.security import hash_password, create_access_token
from ems.models import Department, Employee, UserAccount, AccountRole  # noqa: F401  registers all tables


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def department(db: Session):
    dept = Department(name="Engineering", code="ENG", active=True)
    db.add(dept)
    db.commit()
    db.refresh(dept)
    return dept


@pytest.fixture
def make_employee(db: Session, department):
    """Factory for employee records"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "department_id": department.id,
            "matricule": f"EMP{counter['n']:03d}",
            "last_name": "Martin",
            "first_name": "Alice",
            "job_title": "Developer",
            "email": f"alice{counter['n']}@company.com",
            "phone": "0600000000",
            "photo_url": None,
            "active": True,
        }
        values.update(overrides)
        employee = Employee(**values)
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    return _make


@pytest.fixture
def make_account(db: Session):
    """Factory for login accounts linked to an employee"""
    def _make(employee, email, role=AccountRole.EMPLOYE, password="testpass123", active=True):
        account = UserAccount(
            employee_id=employee.id,
            email=email,
            password_hash=hash_password(password),
            role=role.value,
            active=active,
        )
        db.add(account)
        db.commit()
        db.refresh(account)
        return account

    return _make


@pytest.fixture
def employee(make_employee):
    return make_employee()


@pytest.fixture
def employee_account(employee, make_account):
    return make_account(employee, "alice@login.com")


@pytest.fixture
def admin_account(make_employee, make_account):
    hr = make_employee(last_name="Durand", first_name="Claire", job_title="HR Manager", email="claire@company.com")
    return make_account(hr, "hr@company.com", role=AccountRole.ADMIN_RH, password="adminpass123")


@pytest.fixture
def second_admin_account(make_employee, make_account):
    hr = make_employee(last_name="Petit", first_name="Louis", job_title="HR Officer", email="louis@company.com")
    return make_account(hr, "hr2@company.com", role=AccountRole.ADMIN_RH, password="adminpass123")


def auth_headers_for(account) -> dict:
    token = create_access_token({"sub": str(account.id), "role": account.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_account):
    return auth_headers_for(admin_account)


@pytest.fixture
def employee_headers(employee_account):
    return auth_headers_for(employee_account)


@pytest.fixture
def headers_for():
    return auth_headers_for
