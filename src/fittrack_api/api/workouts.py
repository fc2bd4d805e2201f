"""训练记录接口。"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from fittrack_api.core.errors import bad_request, not_found, validation_failed
from fittrack_api.core.security import AuthenticatedPrincipal
from fittrack_api.db.session import get_db
from fittrack_api.dependencies import get_current_principal
from fittrack_api.models.account import Account
from fittrack_api.models.workout import Workout
from fittrack_api.schemas.common import ErrorResponse, MessageData
from fittrack_api.schemas.workout import (
    WorkoutCreateRequest,
    WorkoutCreatedData,
    WorkoutData,
    WorkoutListData,
    WorkoutStatsData,
    WorkoutUpdateRequest,
    check_date_range,
    check_list_window,
)
from fittrack_api.services import (
    account_exists,
    ensure_admin,
    ensure_owner_or_admin,
    ensure_workout_create_allowed,
    ensure_workout_reassignment_allowed,
    summarize_workouts,
    workout_owner_scope,
    workout_view,
)
from fittrack_api.utils.identifiers import parse_identifier
from fittrack_api.utils.response import message_payload, pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workouts", tags=["workouts"])

_INVALID_WORKOUT_ID = "Invalid workout ID format"
_WORKOUT_NOT_FOUND = "Workout not found"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _load_for(db: Session, principal: AuthenticatedPrincipal, workout_id: UUID, *, message: str) -> Workout:
    """先做权限判断，再判断存在性；记录不存在时非管理员同样得到 403。"""
    workout = db.get(Workout, workout_id)
    ensure_owner_or_admin(principal, workout.user_id if workout else None, message=message)
    if workout is None:
        raise not_found(_WORKOUT_NOT_FOUND)
    return workout


@router.get(
    "",
    summary="分页查询训练记录",
    description="普通用户只能看到自己的记录；管理员可查看全部或按 userId 过滤。按日期倒序。",
    status_code=status.HTTP_200_OK,
    response_model=WorkoutListData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def list_workouts(
    page: int = Query(1, description="页码，从 1 开始。"),
    limit: int = Query(10, description="每页条数，最大 100。"),
    user_id: str | None = Query(None, alias="userId", description="按归属用户过滤（仅管理员生效）。"),
    start_date: date | None = Query(None, alias="startDate", description="起始日期（含）。"),
    end_date: date | None = Query(None, alias="endDate", description="结束日期（含）。"),
    exercise_type: str | None = Query(None, alias="exerciseType", description="运动类型，模糊匹配且不区分大小写。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    errors = check_list_window(page, limit)
    if errors:
        raise validation_failed(errors, message="Invalid pagination parameters")
    errors = check_date_range(start_date, end_date)
    if errors:
        raise validation_failed(errors, message="Date validation failed")

    requested_owner = None
    if principal.is_admin and user_id:
        requested_owner = parse_identifier(user_id, "Invalid userId format")
    owner_scope = workout_owner_scope(principal, requested_owner)

    conditions = []
    if owner_scope is not None:
        conditions.append(Workout.user_id == owner_scope)
    if start_date is not None:
        conditions.append(Workout.workout_date >= start_date)
    if end_date is not None:
        conditions.append(Workout.workout_date <= end_date)
    if exercise_type and exercise_type.strip():
        conditions.append(Workout.exercise_type.ilike(f"%{_escape_like(exercise_type.strip())}%", escape="\\"))

    total = db.execute(select(func.count()).select_from(Workout).where(*conditions)).scalar_one()
    workouts = (
        db.execute(
            select(Workout)
            .where(*conditions)
            .order_by(Workout.workout_date.desc(), Workout.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return {
        "workouts": [workout_view(workout) for workout in workouts],
        "pagination": pagination_meta(page, limit, total),
    }


@router.get(
    "/stats/me",
    summary="我的训练统计",
    description="返回当前用户的训练总量、平均值、运动类型与近 7 天次数。",
    status_code=status.HTTP_200_OK,
    response_model=WorkoutStatsData,
    response_model_exclude_none=True,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def my_workout_stats(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return summarize_workouts(db, principal.user_id)


@router.get(
    "/stats/{user_id}",
    summary="指定用户训练统计",
    description="仅管理员可调用。",
    status_code=status.HTTP_200_OK,
    response_model=WorkoutStatsData,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def user_workout_stats(
    user_id: str = Path(..., description="目标用户 ID。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_admin(principal)
    target_id = parse_identifier(user_id, "Invalid user ID format")
    account = db.get(Account, target_id)
    if account is None:
        raise not_found("User not found")
    stats = summarize_workouts(db, target_id)
    return {"userName": f"{account.first_name} {account.last_name}".strip(), **stats}


@router.get(
    "/{workout_id}",
    summary="查询训练记录详情",
    description="本人或管理员可查看。",
    status_code=status.HTTP_200_OK,
    response_model=WorkoutData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_workout(
    workout_id: str = Path(..., description="训练记录 ID。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    target_id = parse_identifier(workout_id, _INVALID_WORKOUT_ID)
    workout = _load_for(db, principal, target_id, message="Access denied. You can only view your own workouts.")
    return workout_view(workout)


@router.post(
    "",
    summary="新建训练记录",
    description="普通用户只能为自己创建；管理员可为任意已存在用户创建。",
    status_code=status.HTTP_201_CREATED,
    response_model=WorkoutCreatedData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def create_workout(
    payload: WorkoutCreateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_workout_create_allowed(principal, payload.user_id)
    if not account_exists(db, payload.user_id):
        raise bad_request("Target user does not exist")

    workout = Workout(
        user_id=payload.user_id,
        workout_name=payload.workout_name,
        workout_date=payload.workout_date,
        duration=payload.duration,
        calories_burned=payload.calories_burned,
        exercise_type=payload.exercise_type.value,
        notes=payload.notes,
        created_by=principal.user_id,
    )
    db.add(workout)
    db.commit()
    db.refresh(workout)
    logger.info("workout created: workout_id=%s owner=%s by=%s", workout.id, workout.user_id, principal.user_id)
    return message_payload("Workout created successfully", workoutId=str(workout.id))


@router.put(
    "/{workout_id}",
    summary="更新训练记录",
    description="本人或管理员可更新；变更归属用户仅限管理员。",
    status_code=status.HTTP_200_OK,
    response_model=MessageData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_workout(
    payload: WorkoutUpdateRequest,
    workout_id: str = Path(..., description="训练记录 ID。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    target_id = parse_identifier(workout_id, _INVALID_WORKOUT_ID)
    workout = _load_for(db, principal, target_id, message="Access denied. You can only update your own workouts.")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise validation_failed(["No valid fields provided for update"])

    new_owner = changes.get("user_id")
    ensure_workout_reassignment_allowed(principal, workout.user_id, new_owner)
    if new_owner is not None and new_owner != workout.user_id and not account_exists(db, new_owner):
        raise bad_request("Target user does not exist")

    if "exercise_type" in changes:
        changes["exercise_type"] = changes["exercise_type"].value
    for field_name, value in changes.items():
        setattr(workout, field_name, value)
    db.commit()
    logger.info("workout updated: workout_id=%s by=%s", workout.id, principal.user_id)
    return message_payload("Workout updated successfully")


@router.delete(
    "/{workout_id}",
    summary="删除训练记录",
    description="本人或管理员可删除。",
    status_code=status.HTTP_200_OK,
    response_model=MessageData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_workout(
    workout_id: str = Path(..., description="训练记录 ID。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    target_id = parse_identifier(workout_id, _INVALID_WORKOUT_ID)
    workout = _load_for(db, principal, target_id, message="Access denied. You can only delete your own workouts.")
    db.delete(workout)
    db.commit()
    logger.info("workout deleted: workout_id=%s by=%s", target_id, principal.user_id)
    return message_payload("Workout deleted successfully")
