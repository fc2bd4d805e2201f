"""训练记录请求与响应结构。"""

import re
from datetime import date, datetime, timedelta
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator

from fittrack_api.models.enums import ExerciseType
from fittrack_api.schemas.common import BaseSchema, PaginationData

WORKOUT_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_.(),!&]+$")
_WHITESPACE = re.compile(r"\s+")
# 页码上限，保证偏移量落在数据库整数范围内。
MAX_PAGE = 100000


def check_owner_id(value: Any) -> UUID:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError("User ID is required")
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except ValueError as exc:
        raise ValueError("Invalid user ID format") from exc


def check_workout_name(value: str | None) -> str:
    if value is None:
        raise ValueError("Workout name is required")
    value = value.strip()
    if not value:
        raise ValueError("Workout name cannot be empty")
    if len(value) > 100:
        raise ValueError("Workout name must be 100 characters or less")
    if not WORKOUT_NAME_PATTERN.match(value):
        raise ValueError("Workout name contains invalid characters")
    return value


def _one_year_from(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # 2 月 29 日回退到 28 日
        return day.replace(year=day.year + years, day=28)


def check_workout_date(value: date | None) -> date:
    if value is None:
        raise ValueError("Date is required")
    today = date.today()
    if not _one_year_from(today, -1) <= value <= _one_year_from(today, 1):
        raise ValueError("Date must be within one year of today")
    return value


def check_duration(value: int | None) -> int:
    if value is None:
        raise ValueError("Duration is required")
    if value <= 0:
        raise ValueError("Duration must be greater than 0")
    if value > 1440:
        raise ValueError("Duration cannot exceed 24 hours (1440 minutes)")
    return value


def check_calories(value: int | None) -> int:
    if value is None:
        raise ValueError("Calories burned is required")
    if value < 0:
        raise ValueError("Calories burned cannot be negative")
    if value > 10000:
        raise ValueError("Calories burned cannot exceed 10000")
    return value


def normalize_exercise_type(value: Any) -> ExerciseType:
    """去空白、转大写、空白替换为下划线后再匹配枚举。"""
    if value is None:
        raise ValueError("Exercise type is required")
    if not isinstance(value, str):
        raise ValueError("Exercise type must be a string")
    normalized = _WHITESPACE.sub("_", value.strip().upper())
    if not normalized:
        raise ValueError("Exercise type cannot be empty")
    try:
        return ExerciseType(normalized)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in ExerciseType)
        raise ValueError(f"Exercise type must be one of: {allowed}") from exc


def check_notes(value: str | None) -> str:
    if value is None:
        return ""
    value = value.strip()
    if len(value) > 1000:
        raise ValueError("Notes must be 1000 characters or less")
    return value


class WorkoutCreateRequest(BaseSchema):
    """新建训练记录请求体。"""

    user_id: UUID = Field(description="归属用户 ID。")
    workout_name: str = Field(description="训练名称。", examples=["Morning Run"])
    workout_date: date = Field(alias="date", description="训练日期，需在今天前后一年内。", examples=["2026-10-01"])
    duration: int = Field(description="时长（分钟）。", examples=[45])
    calories_burned: int = Field(description="消耗热量（千卡）。", examples=[320])
    exercise_type: ExerciseType = Field(description="运动类型，大小写与空白不敏感。", examples=["RUNNING"])
    notes: str = Field(default="", description="备注。")

    @field_validator("user_id", mode="before")
    @classmethod
    def _user_id(cls, value: Any) -> UUID:
        return check_owner_id(value)

    @field_validator("workout_name")
    @classmethod
    def _workout_name(cls, value: str) -> str:
        return check_workout_name(value)

    @field_validator("workout_date")
    @classmethod
    def _workout_date(cls, value: date) -> date:
        return check_workout_date(value)

    @field_validator("duration")
    @classmethod
    def _duration(cls, value: int) -> int:
        return check_duration(value)

    @field_validator("calories_burned")
    @classmethod
    def _calories(cls, value: int) -> int:
        return check_calories(value)

    @field_validator("exercise_type", mode="before")
    @classmethod
    def _exercise_type(cls, value: Any) -> ExerciseType:
        return normalize_exercise_type(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, value: str | None) -> str:
        return check_notes(value)


class WorkoutUpdateRequest(BaseSchema):
    """训练记录更新请求体，仅处理显式提交字段。"""

    user_id: UUID | None = None
    workout_name: str | None = None
    workout_date: date | None = Field(default=None, alias="date")
    duration: int | None = None
    calories_burned: int | None = None
    exercise_type: ExerciseType | None = None
    notes: str | None = None

    @field_validator("user_id", mode="before")
    @classmethod
    def _user_id(cls, value: Any) -> UUID:
        return check_owner_id(value)

    @field_validator("workout_name")
    @classmethod
    def _workout_name(cls, value: str | None) -> str:
        return check_workout_name(value)

    @field_validator("workout_date")
    @classmethod
    def _workout_date(cls, value: date | None) -> date:
        return check_workout_date(value)

    @field_validator("duration")
    @classmethod
    def _duration(cls, value: int | None) -> int:
        return check_duration(value)

    @field_validator("calories_burned")
    @classmethod
    def _calories(cls, value: int | None) -> int:
        return check_calories(value)

    @field_validator("exercise_type", mode="before")
    @classmethod
    def _exercise_type(cls, value: Any) -> ExerciseType:
        return normalize_exercise_type(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, value: str | None) -> str:
        return check_notes(value)


def check_list_window(page: int, limit: int) -> list[str]:
    """分页参数校验，返回错误列表。"""
    errors: list[str] = []
    if page < 1:
        errors.append("Page must be 1 or greater")
    elif page > MAX_PAGE:
        errors.append(f"Page cannot exceed {MAX_PAGE}")
    if limit < 1:
        errors.append("Limit must be 1 or greater")
    elif limit > 100:
        errors.append("Limit cannot exceed 100")
    return errors


def check_date_range(start_date: date | None, end_date: date | None) -> list[str]:
    if start_date and end_date and start_date > end_date:
        return ["Start date cannot be after end date"]
    return []


def recent_window_start(today: date | None = None, days: int = 7) -> date:
    """近 N 天统计窗口起点（含当天）。"""
    return (today or date.today()) - timedelta(days=days)


class WorkoutData(BaseSchema):
    """训练记录详情。"""

    id: str
    user_id: str
    workout_name: str
    workout_date: date = Field(alias="date")
    duration: int
    calories_burned: int
    exercise_type: str
    notes: str
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class WorkoutCreatedData(BaseSchema):
    message: str
    workout_id: str


class WorkoutListData(BaseSchema):
    workouts: list[WorkoutData]
    pagination: PaginationData


class WorkoutStatsData(BaseSchema):
    """训练汇总统计。"""

    user_name: str | None = None
    total_workouts: int
    total_duration: int
    total_calories: int
    average_duration: int
    average_calories: int
    exercise_types: list[str]
    recent_workouts: int
