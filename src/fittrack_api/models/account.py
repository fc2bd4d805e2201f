"""账号模型。"""

from datetime import date

from sqlalchemy import Boolean, Date, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from fittrack_api.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from fittrack_api.models.enums import AccountRole


class Account(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """注册账号，可通过密码或 GitHub 身份登录，两者可并存。"""

    __tablename__ = "users"

    # 登录邮箱，统一小写存储，唯一约束是去重的最终依据。
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    # 口令哈希，仅密码账号存在。
    password_hash: Mapped[str | None] = mapped_column(String(256))
    # GitHub 用户 ID，仅关联过 GitHub 的账号存在。
    github_id: Mapped[str | None] = mapped_column(String(64), unique=True)
    # GitHub 用户名。
    github_username: Mapped[str | None] = mapped_column(String(128))

    first_name: Mapped[str] = mapped_column(String(64), nullable=False)
    last_name: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    # M / F，第三方登录创建时为 NOT_SPECIFIED。
    gender: Mapped[str] = mapped_column(String(16), nullable=False)
    # 身高（厘米）。
    height: Mapped[float | None] = mapped_column(Float)
    # 体重（千克）。
    weight: Mapped[float | None] = mapped_column(Float)

    role: Mapped[str] = mapped_column(String(16), nullable=False, default=AccountRole.USER)
    # 停用账号不可登录，已签发令牌不受影响。
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 测试夹具标记，用于批量清理，不参与权限判断。
    is_test_user: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
