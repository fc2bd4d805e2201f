from datetime import date, datetime, timezone
from uuid import uuid4

import pytest
from fastapi import HTTPException

from fittrack_api.core.security import AuthenticatedPrincipal
from fittrack_api.models.account import Account
from fittrack_api.services.access_policy import (
    PUBLIC_ACCOUNT_FIELDS,
    account_detail_view,
    ensure_admin,
    ensure_owner_or_admin,
    ensure_role_change_allowed,
    ensure_status_change_allowed,
    ensure_workout_create_allowed,
    ensure_workout_reassignment_allowed,
    is_owner,
    public_account_view,
    workout_owner_scope,
)


def _principal(role: str = "user") -> AuthenticatedPrincipal:
    return AuthenticatedPrincipal(user_id=uuid4(), email="p@ex.com", role=role)


def _account() -> Account:
    now = datetime.now(timezone.utc)
    return Account(
        id=uuid4(),
        email="ann@ex.com",
        password_hash="pbkdf2_sha256$1$x$y",
        first_name="Ann",
        last_name="Lee",
        date_of_birth=date(1990, 1, 1),
        gender="F",
        height=165.0,
        weight=60.0,
        role="user",
        is_active=True,
        email_verified=False,
        is_test_user=False,
        created_at=now,
        updated_at=now,
    )


def test_owner_or_admin():
    user = _principal()
    admin = _principal("admin")
    other_id = uuid4()

    assert is_owner(user, user.user_id)
    assert not is_owner(user, other_id)
    assert not is_owner(user, None)

    ensure_owner_or_admin(user, user.user_id)
    ensure_owner_or_admin(admin, other_id)
    ensure_owner_or_admin(admin, None)
    with pytest.raises(HTTPException) as exc:
        ensure_owner_or_admin(user, other_id, message="nope")
    assert exc.value.status_code == 403
    assert exc.value.detail["message"] == "nope"


def test_missing_resource_is_denied_for_non_admin():
    with pytest.raises(HTTPException) as exc:
        ensure_owner_or_admin(_principal(), None)
    assert exc.value.status_code == 403


def test_ensure_admin():
    ensure_admin(_principal("admin"))
    with pytest.raises(HTTPException) as exc:
        ensure_admin(_principal())
    assert exc.value.detail["message"] == "Access denied. Admin privileges required."


def test_role_change_rules():
    admin = _principal("admin")
    ensure_role_change_allowed(admin, uuid4(), "user")
    ensure_role_change_allowed(admin, admin.user_id, "admin")

    with pytest.raises(HTTPException) as exc:
        ensure_role_change_allowed(admin, admin.user_id, "user")
    assert exc.value.status_code == 403

    user = _principal()
    with pytest.raises(HTTPException):
        ensure_role_change_allowed(user, user.user_id, "admin")


def test_status_change_rules():
    admin = _principal("admin")
    ensure_status_change_allowed(admin, uuid4(), False)
    ensure_status_change_allowed(admin, admin.user_id, True)
    with pytest.raises(HTTPException):
        ensure_status_change_allowed(admin, admin.user_id, False)
    with pytest.raises(HTTPException):
        ensure_status_change_allowed(_principal(), uuid4(), True)


def test_workout_create_rules():
    user = _principal()
    ensure_workout_create_allowed(user, user.user_id)
    ensure_workout_create_allowed(_principal("admin"), uuid4())
    with pytest.raises(HTTPException) as exc:
        ensure_workout_create_allowed(user, uuid4())
    assert exc.value.detail["message"] == "Access denied. You can only create workouts for yourself."


def test_workout_reassignment_rules():
    user = _principal()
    ensure_workout_reassignment_allowed(user, user.user_id, None)
    ensure_workout_reassignment_allowed(user, user.user_id, user.user_id)
    ensure_workout_reassignment_allowed(_principal("admin"), uuid4(), uuid4())
    with pytest.raises(HTTPException) as exc:
        ensure_workout_reassignment_allowed(user, user.user_id, uuid4())
    assert exc.value.detail["message"] == "Only admins can reassign workouts to other users."


def test_workout_owner_scope():
    user = _principal()
    admin = _principal("admin")
    requested = uuid4()

    assert workout_owner_scope(user, requested) == user.user_id
    assert workout_owner_scope(user, None) == user.user_id
    assert workout_owner_scope(admin, requested) == requested
    assert workout_owner_scope(admin, None) is None


def test_public_view_hides_private_fields():
    view = public_account_view(_account())
    assert set(view) == set(PUBLIC_ACCOUNT_FIELDS)
    for hidden in ("email", "dateOfBirth", "height", "weight", "emailVerified", "isActive", "role", "passwordHash"):
        assert hidden not in view


def test_detail_view_never_contains_password_hash():
    account = _account()
    view = account_detail_view(account)
    assert view["email"] == "ann@ex.com"
    assert view["dateOfBirth"] == "1990-01-01"
    assert view["role"] == "user"
    assert "passwordHash" not in view
    assert "password_hash" not in view
    assert account.password_hash not in view.values()
