"""第三方身份解析：查找、关联或创建本地账号。"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from fittrack_api.core.errors import federated_login_failed
from fittrack_api.models.account import Account
from fittrack_api.models.enums import AccountRole, Gender
from fittrack_api.schemas.user import RESERVED_EMAIL_SUFFIX
from fittrack_api.services.accounts import get_account_by_email, get_account_by_github_id, normalize_email

logger = logging.getLogger(__name__)

# 自动创建账号时的资料默认值。
DEFAULT_DATE_OF_BIRTH = date(1990, 1, 1)
DEFAULT_HEIGHT_CM = 170.0
DEFAULT_WEIGHT_KG = 70.0

_NAME_MAX_LENGTH = 64


@dataclass
class ProviderProfile:
    """身份提供方返回的用户资料。"""

    # 提供方内的稳定用户 ID。
    provider_user_id: str
    # 提供方用户名。
    username: str
    display_name: str | None = None
    # 已验证邮箱，主邮箱在前。
    emails: list[str] = field(default_factory=list)
    provider: str = "github"


def effective_email(profile: ProviderProfile) -> str:
    """取第一个邮箱；没有邮箱时合成 `<username>@<provider>.local`。"""
    for email in profile.emails:
        if email and email.strip():
            return normalize_email(email)
    return normalize_email(f"{profile.username}@{profile.provider}{RESERVED_EMAIL_SUFFIX}")


def split_display_name(profile: ProviderProfile) -> tuple[str, str]:
    """按第一个空格拆分展示名，缺失时用户名作为名。"""
    display_name = (profile.display_name or "").strip()
    if not display_name:
        return profile.username[:_NAME_MAX_LENGTH], ""
    first_name, _, last_name = display_name.partition(" ")
    return first_name[:_NAME_MAX_LENGTH], last_name.strip()[:_NAME_MAX_LENGTH]


class FederatedIdentityResolver:
    """把外部身份解析为唯一的本地账号。

    查找顺序：
    1. 按提供方用户 ID 精确匹配。
    2. 按有效邮箱匹配已有账号，并把外部身份关联上去。
    3. 两者都不存在时创建新账号。
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def resolve_or_create(self, profile: ProviderProfile) -> Account:
        try:
            return self._resolve_or_create(profile)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("federated identity resolution failed: provider_user_id=%s", profile.provider_user_id)
            raise federated_login_failed() from exc

    def _resolve_or_create(self, profile: ProviderProfile) -> Account:
        account = get_account_by_github_id(self.db, profile.provider_user_id)
        if account is not None:
            logger.info("federated login matched by provider id: account_id=%s", account.id)
            return account

        email = effective_email(profile)
        account = get_account_by_email(self.db, email)
        if account is not None:
            return self._link(account, profile)

        account = Account(
            email=email,
            password_hash=None,
            github_id=profile.provider_user_id,
            github_username=profile.username,
            first_name="",
            last_name="",
            date_of_birth=DEFAULT_DATE_OF_BIRTH,
            gender=Gender.NOT_SPECIFIED,
            height=DEFAULT_HEIGHT_CM,
            weight=DEFAULT_WEIGHT_KG,
            role=AccountRole.USER,
            is_active=True,
            email_verified=True,
            is_test_user=False,
        )
        account.first_name, account.last_name = split_display_name(profile)
        self.db.add(account)
        try:
            self.db.commit()
        except IntegrityError:
            # 并发首次登录时另一请求已落库，回滚后按同样顺序重新查找。
            self.db.rollback()
            existing = get_account_by_github_id(self.db, profile.provider_user_id) or get_account_by_email(
                self.db, email
            )
            if existing is None:
                raise
            if existing.github_id != profile.provider_user_id:
                return self._link(existing, profile)
            return existing

        self.db.refresh(account)
        logger.info("federated login created account: account_id=%s", account.id)
        return account

    def _link(self, account: Account, profile: ProviderProfile) -> Account:
        account.github_id = profile.provider_user_id
        account.github_username = profile.username
        self.db.commit()
        self.db.refresh(account)
        logger.info("federated identity linked to existing account: account_id=%s", account.id)
        return account
