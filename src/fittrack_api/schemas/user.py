"""账号相关请求与响应结构。"""

import re
from datetime import date, datetime

from pydantic import Field, field_validator, model_validator

from fittrack_api.models.enums import AccountRole
from fittrack_api.schemas.common import BaseSchema

NAME_PATTERN = re.compile(r"^[a-zA-ZÀ-ÿ\s\-'.]+$")
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9._-]*[a-zA-Z0-9])?@[a-zA-Z0-9]([a-zA-Z0-9.-]*[a-zA-Z0-9])?\.([a-zA-Z]{2,})$"
)
# 第三方登录占位邮箱的域名后缀。
RESERVED_EMAIL_SUFFIX = ".local"


def check_name(value: str | None, label: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{label} is required")
    value = value.strip()
    if not NAME_PATTERN.match(value):
        raise ValueError(f"{label} contains invalid characters")
    if len(value) > 50:
        raise ValueError(f"{label} must be 50 characters or less")
    return value


def check_email(value: str | None, *, allow_reserved: bool = False) -> str:
    """校验邮箱格式，大小写归一化由服务层负责。

    `<provider>.local` 域名保留给第三方登录的占位邮箱，注册与改邮箱时不可使用。
    """
    if not value or not value.strip():
        raise ValueError("Email is required")
    value = value.strip()
    if len(value) > 254:
        raise ValueError("Email is too long (max 254 characters)")
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    if ".." in value or ".-" in value or "-." in value:
        raise ValueError("Email contains invalid consecutive special characters")
    if not allow_reserved and value.rsplit("@", 1)[-1].lower().endswith(RESERVED_EMAIL_SUFFIX):
        raise ValueError("Email domain is reserved")
    return value


def check_date_of_birth(value: date | None) -> date:
    if value is None:
        raise ValueError("Date of birth is required")
    today = date.today()
    age = today.year - value.year
    if value > today or age > 120 or age < 13:
        raise ValueError("Date of birth must be between 13 and 120 years ago")
    return value


def check_gender(value: str | None) -> str:
    if not value:
        raise ValueError("Gender is required")
    normalized = value.strip().upper()
    if normalized not in {"M", "F"}:
        raise ValueError("Gender must be M or F")
    return normalized


def check_height(value: float | None) -> float | None:
    if value is not None and not 50 <= value <= 300:
        raise ValueError("Height must be between 50 and 300 cm")
    return value


def check_weight(value: float | None) -> float | None:
    if value is not None and not 20 <= value <= 500:
        raise ValueError("Weight must be between 20 and 500 kg")
    return value


class AccountCreateRequest(BaseSchema):
    """注册请求体。"""

    first_name: str = Field(description="名。", examples=["Ann"])
    last_name: str = Field(description="姓。", examples=["Lee"])
    email: str = Field(description="登录邮箱，大小写不敏感。", examples=["ann@example.com"])
    password: str = Field(min_length=1, max_length=128, description="登录密码。")
    password_confirm: str = Field(min_length=1, max_length=128, description="确认密码。")
    date_of_birth: date = Field(description="出生日期。", examples=["1990-01-01"])
    gender: str = Field(description="性别 M/F。", examples=["F"])
    height: float | None = Field(default=None, description="身高（厘米）。")
    weight: float | None = Field(default=None, description="体重（千克）。")
    is_test_user: bool = Field(default=False, description="测试夹具标记。")

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, value: str) -> str:
        return check_name(value, "First name")

    @field_validator("last_name")
    @classmethod
    def _last_name(cls, value: str) -> str:
        return check_name(value, "Last name")

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return check_email(value)

    @field_validator("date_of_birth")
    @classmethod
    def _date_of_birth(cls, value: date) -> date:
        return check_date_of_birth(value)

    @field_validator("gender")
    @classmethod
    def _gender(cls, value: str) -> str:
        return check_gender(value)

    @field_validator("height")
    @classmethod
    def _height(cls, value: float | None) -> float | None:
        return check_height(value)

    @field_validator("weight")
    @classmethod
    def _weight(cls, value: float | None) -> float | None:
        return check_weight(value)

    @model_validator(mode="after")
    def _passwords_match(self) -> "AccountCreateRequest":
        if self.password != self.password_confirm:
            raise ValueError("Passwords do not match")
        return self


class AccountUpdateRequest(BaseSchema):
    """资料更新请求体，仅校验显式提交的字段。

    role / isActive / emailVerified 等字段不在此结构中，提交后会被忽略。
    """

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    height: float | None = None
    weight: float | None = None

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, value: str | None) -> str:
        return check_name(value, "First name")

    @field_validator("last_name")
    @classmethod
    def _last_name(cls, value: str | None) -> str:
        return check_name(value, "Last name")

    @field_validator("email")
    @classmethod
    def _email(cls, value: str | None) -> str:
        return check_email(value)

    @field_validator("date_of_birth")
    @classmethod
    def _date_of_birth(cls, value: date | None) -> date:
        return check_date_of_birth(value)

    @field_validator("gender")
    @classmethod
    def _gender(cls, value: str | None) -> str:
        return check_gender(value)

    @field_validator("height")
    @classmethod
    def _height(cls, value: float | None) -> float | None:
        return check_height(value)

    @field_validator("weight")
    @classmethod
    def _weight(cls, value: float | None) -> float | None:
        return check_weight(value)


class LoginRequest(BaseSchema):
    """密码登录请求体。"""

    email: str = Field(description="登录邮箱。", examples=["ann@example.com"])
    password: str = Field(min_length=1, max_length=128, description="登录密码。")

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return check_email(value, allow_reserved=True)


class RoleUpdateRequest(BaseSchema):
    """角色变更请求体（仅管理员）。"""

    role: AccountRole = Field(description="目标角色 user/admin。", examples=["admin"])


class StatusUpdateRequest(BaseSchema):
    """启停用请求体（仅管理员）。"""

    is_active: bool = Field(description="是否启用。", examples=[False])


class UserPublicData(BaseSchema):
    """用户列表中的公开字段。"""

    id: str
    first_name: str
    last_name: str
    gender: str
    created_at: datetime
    is_test_user: bool


class UserDetailData(BaseSchema):
    """单个用户详情，除口令哈希外全部可见。"""

    id: str
    first_name: str
    last_name: str
    email: str
    date_of_birth: date
    gender: str
    height: float | None = None
    weight: float | None = None
    role: str
    is_active: bool
    email_verified: bool
    is_test_user: bool
    github_id: str | None = None
    github_username: str | None = None
    created_at: datetime
    updated_at: datetime


class UserCreatedData(BaseSchema):
    message: str
    user_id: str


class LoginUserData(BaseSchema):
    id: str
    first_name: str
    last_name: str
    email: str
    role: str


class LoginData(BaseSchema):
    """登录成功返回结构。"""

    message: str
    token: str = Field(description="Bearer 访问令牌，有效期 2 小时。")
    user: LoginUserData
