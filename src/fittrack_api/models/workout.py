"""训练记录模型。"""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fittrack_api.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Workout(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """单次训练记录。"""

    __tablename__ = "workouts"

    # 归属账号 ID（逻辑关联 users.id，不声明数据库外键）。
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    workout_name: Mapped[str] = mapped_column(String(100), nullable=False)
    workout_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    # 时长（分钟）。
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    calories_burned: Mapped[int] = mapped_column(Integer, nullable=False)
    exercise_type: Mapped[str] = mapped_column(String(50), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # 创建人，管理员代建时与归属人不同。
    created_by: Mapped[UUID] = mapped_column(nullable=False)
