"""
Tests for field visibility and the public QR profile
"""
from datetime import timedelta

from sqlalchemy.orm import Session

from ems.models.audit_log import AuditLog, AuditAction
from ems.models.visibility import EmployeeVisibility, VisibilityField
from ems.services import token_service
from ems.services.employee_service import deactivate_employee
from ems.services.public_profile_service import render_public_profile, PROFILE_ACTIVE, PROFILE_EXPIRED
from ems.services.visibility_service import get_visibility, set_visibility, public_field_keys
from ems.utils.datetime_utils import now_utc


def test_no_rows_means_nothing_is_public(db: Session, employee):
    token = token_service.generate_or_regenerate(db, employee.id)

    profile = render_public_profile(db, token.token)

    assert profile.status == PROFILE_ACTIVE
    assert profile.fields == {}


def test_only_public_fields_are_rendered(db: Session, employee, department):
    set_visibility(db, employee.id, VisibilityField.NOM, True)
    set_visibility(db, employee.id, VisibilityField.POSTE, True)
    set_visibility(db, employee.id, VisibilityField.DEPARTEMENT, True)
    set_visibility(db, employee.id, VisibilityField.TELEPHONE, False)
    token = token_service.generate_or_regenerate(db, employee.id)

    profile = render_public_profile(db, token.token)

    assert profile.fields == {
        "nom": "Martin",
        "poste": "Developer",
        "departement": department.name,
    }


def test_set_visibility_is_an_idempotent_upsert(db: Session, employee):
    set_visibility(db, employee.id, "email", True)
    set_visibility(db, employee.id, "email", True)
    set_visibility(db, employee.id, "email", False)

    rows = get_visibility(db, employee.id)
    assert len(rows) == 1
    assert rows[0].is_public is False
    assert public_field_keys(db, employee.id) == set()


def test_revoked_and_unknown_tokens_render_nothing(db: Session, employee):
    token = token_service.generate_or_regenerate(db, employee.id)
    token_service.generate_or_regenerate(db, employee.id)

    assert render_public_profile(db, token.token) is None
    assert render_public_profile(db, "does-not-exist") is None
    assert render_public_profile(db, "   ") is None


def test_deactivated_employee_renders_nothing(db: Session, employee, admin_account):
    set_visibility(db, employee.id, VisibilityField.NOM, True)
    token = token_service.generate_or_regenerate(db, employee.id)

    deactivate_employee(db, employee.id, admin_account.id)

    assert render_public_profile(db, token.token) is None


def test_expired_token_reports_expired_without_fields(db: Session, employee):
    set_visibility(db, employee.id, VisibilityField.NOM, True)
    token = token_service.generate_or_regenerate(db, employee.id)
    token.expires_at = now_utc() - timedelta(minutes=1)
    db.commit()

    profile = render_public_profile(db, token.token)

    assert profile.status == PROFILE_EXPIRED
    assert profile.fields == {}


def test_public_profile_endpoint(client, db: Session, employee):
    set_visibility(db, employee.id, VisibilityField.PRENOM, True)
    token = token_service.generate_or_regenerate(db, employee.id)

    response = client.get(f"/api/v1/public/profile/{token.token}")

    assert response.status_code == 200
    assert response.json() == {"status": "ACTIVE", "fields": {"prenom": "Alice"}}


def test_public_profile_endpoint_unknown_token(client, db: Session):
    response = client.get("/api/v1/public/profile/nope")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_visibility_endpoints(client, db: Session, employee, admin_account, admin_headers):
    response = client.put(
        f"/api/v1/employees/{employee.id}/visibility/email",
        json={"is_public": True},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"employee_id": employee.id, "field_key": "email", "is_public": True}

    response = client.get(f"/api/v1/employees/{employee.id}/visibility", headers=admin_headers)
    assert response.status_code == 200
    flags = {item["field_key"]: item["is_public"] for item in response.json()}
    assert len(flags) == len(VisibilityField)
    assert flags["email"] is True
    assert flags["nom"] is False

    entry = db.query(AuditLog).filter(AuditLog.action == AuditAction.VISIBILITY_UPDATED.value).one()
    assert entry.actor_id == admin_account.id
    assert entry.details == {"field_key": "email", "old": False, "new": True}


def test_visibility_rejects_unknown_field_key(client, db: Session, employee, admin_headers):
    response = client.put(
        f"/api/v1/employees/{employee.id}/visibility/salary",
        json={"is_public": True},
        headers=admin_headers,
    )

    assert response.status_code == 422
    assert db.query(EmployeeVisibility).count() == 0


def test_visibility_requires_admin(client, employee, employee_headers):
    response = client.put(
        f"/api/v1/employees/{employee.id}/visibility/email",
        json={"is_public": True},
        headers=employee_headers,
    )

    assert response.status_code == 403
