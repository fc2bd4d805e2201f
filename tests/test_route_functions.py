from datetime import date, timedelta
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest
from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from fittrack_api.api import health as health_api
from fittrack_api.api import users as users_api
from fittrack_api.api import workouts as workouts_api
from fittrack_api.core.security import AuthContext, AuthenticatedPrincipal, PasswordHasher, TokenIssuer
from fittrack_api.db.base import Base
from fittrack_api.models.account import Account
from fittrack_api.models.workout import Workout
from fittrack_api.schemas.user import AccountCreateRequest, AccountUpdateRequest, LoginRequest, RoleUpdateRequest
from fittrack_api.schemas.workout import WorkoutCreateRequest, WorkoutUpdateRequest

CTX = AuthContext(signing_secret="route-test-secret-key-at-least-32-bytes", password_hash_iterations=1000)


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    session_local = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)
    db = session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


def _principal(account: Account) -> AuthenticatedPrincipal:
    return AuthenticatedPrincipal(user_id=account.id, email=account.email, role=account.role)


def _create_account(db: Session, email: str, *, role: str = "user") -> Account:
    created = users_api.create_user(
        AccountCreateRequest(
            firstName="Test",
            lastName="User",
            email=email,
            password="Secret123!",
            passwordConfirm="Secret123!",
            dateOfBirth="1990-01-01",
            gender="m",
        ),
        db=db,
        hasher=PasswordHasher(CTX.password_hash_iterations),
    )
    account = db.get(Account, UUID(created["userId"]))
    account.role = role
    db.commit()
    return account


def _list(db: Session, principal: AuthenticatedPrincipal, **params):
    defaults = {
        "page": 1,
        "limit": 10,
        "user_id": None,
        "start_date": None,
        "end_date": None,
        "exercise_type": None,
    }
    defaults.update(params)
    return workouts_api.list_workouts(**defaults, principal=principal, db=db)


def test_create_user_stores_upper_gender_and_login_returns_token(db_session: Session):
    account = _create_account(db_session, "Route@Ex.com")
    assert account.email == "route@ex.com"
    assert account.gender == "M"

    result = users_api.login(
        LoginRequest(email="route@ex.com", password="Secret123!"),
        db=db_session,
        hasher=PasswordHasher(CTX.password_hash_iterations),
        issuer=TokenIssuer(CTX),
    )
    assert result["message"] == "Login successful"
    assert result["user"]["role"] == "user"
    assert result["token"]


def test_update_user_rejects_empty_payload(db_session: Session):
    account = _create_account(db_session, "a@ex.com")
    with pytest.raises(HTTPException) as exc:
        users_api.update_user(AccountUpdateRequest(), user_id=str(account.id), principal=_principal(account), db=db_session)
    assert exc.value.status_code == 400


def test_role_change_for_missing_account_is_404(db_session: Session):
    admin = _create_account(db_session, "admin@ex.com", role="admin")
    with pytest.raises(HTTPException) as exc:
        users_api.update_user_role(
            RoleUpdateRequest(role="admin"), user_id=str(uuid4()), principal=_principal(admin), db=db_session
        )
    assert exc.value.status_code == 404


def test_malformed_identifier_is_400(db_session: Session):
    account = _create_account(db_session, "a@ex.com")
    with pytest.raises(HTTPException) as exc:
        workouts_api.get_workout(workout_id="not-a-uuid", principal=_principal(account), db=db_session)
    assert exc.value.status_code == 400
    assert exc.value.detail["code"] == "MALFORMED_IDENTIFIER"


def test_admin_creates_workout_for_user_and_records_creator(db_session: Session):
    admin = _create_account(db_session, "admin@ex.com", role="admin")
    owner = _create_account(db_session, "owner@ex.com")

    created = workouts_api.create_workout(
        WorkoutCreateRequest(
            userId=str(owner.id),
            workoutName="Leg Day",
            date=date.today().isoformat(),
            duration=50,
            caloriesBurned=400,
            exerciseType="Strength",
        ),
        principal=_principal(admin),
        db=db_session,
    )
    workout = db_session.get(Workout, UUID(created["workoutId"]))
    assert workout.user_id == owner.id
    assert workout.created_by == admin.id
    assert workout.exercise_type == "STRENGTH"
    assert workout.notes == ""

    view = workouts_api.get_workout(workout_id=str(workout.id), principal=_principal(owner), db=db_session)
    assert view["workoutName"] == "Leg Day"


def test_reassignment_to_missing_owner_is_400(db_session: Session):
    admin = _create_account(db_session, "admin@ex.com", role="admin")
    owner = _create_account(db_session, "owner@ex.com")
    workout = Workout(
        user_id=owner.id,
        workout_name="Swim",
        workout_date=date.today(),
        duration=30,
        calories_burned=300,
        exercise_type="SWIMMING",
        created_by=owner.id,
    )
    db_session.add(workout)
    db_session.commit()

    with pytest.raises(HTTPException) as exc:
        workouts_api.update_workout(
            WorkoutUpdateRequest(userId=str(uuid4())),
            workout_id=str(workout.id),
            principal=_principal(admin),
            db=db_session,
        )
    assert exc.value.status_code == 400
    assert exc.value.detail["message"] == "Target user does not exist"


def test_listing_pagination_arithmetic(db_session: Session):
    owner = _create_account(db_session, "owner@ex.com")
    for offset in range(25):
        db_session.add(
            Workout(
                user_id=owner.id,
                workout_name=f"Walk {offset}",
                workout_date=date.today() - timedelta(days=offset),
                duration=20,
                calories_burned=100,
                exercise_type="WALKING",
                created_by=owner.id,
            )
        )
    db_session.commit()

    last_page = _list(db_session, _principal(owner), page=3)
    assert len(last_page["workouts"]) == 5
    assert last_page["pagination"] == {
        "currentPage": 3,
        "totalPages": 3,
        "totalWorkouts": 25,
        "hasNextPage": False,
        "hasPrevPage": True,
    }

    beyond = _list(db_session, _principal(owner), page=9)
    assert beyond["workouts"] == []
    assert beyond["pagination"]["hasNextPage"] is False

    empty = _list(db_session, _principal(owner), exercise_type="boxing")
    assert empty["pagination"]["totalPages"] == 0
    assert empty["pagination"]["hasPrevPage"] is False


def test_listing_rejects_malformed_admin_filter(db_session: Session):
    admin = _create_account(db_session, "admin@ex.com", role="admin")
    with pytest.raises(HTTPException) as exc:
        _list(db_session, _principal(admin), user_id="abc")
    assert exc.value.status_code == 400
    # 普通用户的 userId 参数直接忽略
    user = _create_account(db_session, "u@ex.com")
    assert _list(db_session, _principal(user), user_id="abc")["workouts"] == []


def test_listing_rejects_page_beyond_limit(db_session: Session):
    owner = _create_account(db_session, "owner@ex.com")
    with pytest.raises(HTTPException) as exc:
        _list(db_session, _principal(owner), page=10**19)
    assert exc.value.status_code == 400
    assert exc.value.detail["details"] == ["Page cannot exceed 100000"]


def test_readiness_reports_unavailable_database():
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("select 1", {}, Exception("connection refused"))
    with pytest.raises(HTTPException) as exc:
        health_api.ready(db=broken)
    assert exc.value.status_code == 503
    assert health_api.live() == {"status": "ok"}


def test_readiness_with_working_database(db_session: Session):
    assert health_api.ready(db=db_session) == {"status": "ready"}
