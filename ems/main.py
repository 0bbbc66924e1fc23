"""
EMS Directory Backend - Main Application Entry Point
"""
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from ems.api.router import api_router
from ems.core.config import settings
from ems.core.errors import (
    http_exception_handler,
    ems_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from ems.core.exceptions import EMSError
from ems.core.logging import setup_logging, get_logger
from ems.core.security import hash_password
from ems.db.session import SessionLocal
from ems.models.department import Department
from ems.models.employee import Employee
from ems.models.user_account import UserAccount, AccountRole

# Setup logging first
setup_logging()
logger = get_logger(__name__)

INITIAL_DEPARTMENT_NAME = "Ressources Humaines"
INITIAL_ADMIN_MATRICULE = "ADM-001"


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
        if parsed.scheme == "sqlite":
            return url
        if parsed.password:
            netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
    except ValueError:
        return "***"
    return url


# Create FastAPI app
app = FastAPI(
    title="EMS Directory Backend",
    description="Employee directory: modification requests, public QR profiles, HR notifications",
    version=settings.VERSION or "1.0.0"
)

# Configure CORS - must be before other middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(EMSError, ems_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL at startup so it can be verified against Alembic."""
    masked = _mask_database_url(settings.DATABASE_URL)
    logger.info("DATABASE_URL (app): %s", masked)


@app.on_event("startup")
def bootstrap_initial_admin() -> None:
    """
    Create the initial HR admin account (with its department and employee
    record) when no ADMIN_RH account exists yet.
    """
    db = SessionLocal()
    try:
        admin_exists = db.query(UserAccount).filter(
            UserAccount.role == AccountRole.ADMIN_RH.value
        ).first()
        if admin_exists:
            logger.info("Admin account already exists, skipping initial bootstrap")
            return

        logger.info("No admin account found, creating initial admin setup...")

        department = db.query(Department).filter(Department.name == INITIAL_DEPARTMENT_NAME).first()
        if not department:
            department = Department(name=INITIAL_DEPARTMENT_NAME, code="RH", active=True)
            db.add(department)
            db.flush()
            logger.info("Created department: %s", INITIAL_DEPARTMENT_NAME)

        employee = db.query(Employee).filter(Employee.matricule == INITIAL_ADMIN_MATRICULE).first()
        if not employee:
            employee = Employee(
                department_id=department.id,
                matricule=INITIAL_ADMIN_MATRICULE,
                last_name="Administrateur",
                first_name="RH",
                job_title="HR Administrator",
                active=True,
            )
            db.add(employee)
            db.flush()

        db.add(UserAccount(
            employee_id=employee.id,
            email=settings.INITIAL_ADMIN_EMAIL.strip().lower(),
            password_hash=hash_password(settings.INITIAL_ADMIN_PASSWORD),
            role=AccountRole.ADMIN_RH.value,
            active=True,
        ))
        db.commit()

        logger.info("Initial admin account created successfully")
        logger.info("Login: %s", settings.INITIAL_ADMIN_EMAIL)
        logger.info("Password: [set via INITIAL_ADMIN_PASSWORD environment variable]")

    except OperationalError as e:
        db.rollback()
        # Tables might not exist yet when running against an unmigrated database
        if "no such table" in str(e).lower():
            logger.warning("Database tables not ready yet, skipping initial bootstrap")
        else:
            logger.error("Database error during admin bootstrap: %s", e)
    except Exception as e:
        logger.error("Error during initial admin bootstrap: %s", e)
        db.rollback()
    finally:
        db.close()


async def _handle_operational_error(request, exc: Exception) -> JSONResponse:
    if "no such table" in str(exc).lower():
        return JSONResponse(
            status_code=500,
            content={"detail": "Run alembic upgrade head"},
        )
    return await generic_exception_handler(request, exc)


app.add_exception_handler(OperationalError, _handle_operational_error)
