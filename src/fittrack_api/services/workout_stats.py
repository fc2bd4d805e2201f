"""训练汇总统计。"""

from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from fittrack_api.models.workout import Workout
from fittrack_api.schemas.workout import recent_window_start


def round_half_up(total: int, count: int) -> int:
    """非负整数平均值，.5 向上取整；无记录时为 0。"""
    if count <= 0:
        return 0
    return (2 * total + count) // (2 * count)


def summarize_workouts(db: Session, user_id: UUID, *, today: date | None = None) -> dict[str, Any]:
    """统计某用户的训练总量、平均值、运动类型与近 7 天次数。"""
    totals = db.execute(
        select(
            func.count(Workout.id),
            func.coalesce(func.sum(Workout.duration), 0),
            func.coalesce(func.sum(Workout.calories_burned), 0),
        ).where(Workout.user_id == user_id)
    ).one()
    total_workouts, total_duration, total_calories = int(totals[0]), int(totals[1]), int(totals[2])

    exercise_types = (
        db.execute(
            select(Workout.exercise_type)
            .where(Workout.user_id == user_id)
            .distinct()
            .order_by(Workout.exercise_type.asc())
        )
        .scalars()
        .all()
    )
    recent_workouts = db.execute(
        select(func.count(Workout.id))
        .where(Workout.user_id == user_id)
        .where(Workout.workout_date >= recent_window_start(today))
    ).scalar_one()

    return {
        "totalWorkouts": total_workouts,
        "totalDuration": total_duration,
        "totalCalories": total_calories,
        "averageDuration": round_half_up(total_duration, total_workouts),
        "averageCalories": round_half_up(total_calories, total_workouts),
        "exerciseTypes": list(exercise_types),
        "recentWorkouts": int(recent_workouts),
    }
