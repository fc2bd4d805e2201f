"""启动时管理员账号初始化。"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from fittrack_api.core.config import Settings
from fittrack_api.core.security import PasswordHasher
from fittrack_api.models.account import Account
from fittrack_api.models.enums import AccountRole, Gender
from fittrack_api.services.accounts import get_account_by_email, normalize_email

logger = logging.getLogger(__name__)


def ensure_bootstrap_admin(db: Session, settings: Settings, hasher: PasswordHasher) -> Account | None:
    """确保配置中的管理员账号存在。

    - 未配置邮箱或密码时跳过。
    - 账号已存在时只提升为启用状态的管理员，不覆盖密码。
    """
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        return None

    email = normalize_email(settings.bootstrap_admin_email)
    account = get_account_by_email(db, email)
    if account is None:
        account = Account(
            email=email,
            password_hash=hasher.hash(settings.bootstrap_admin_password),
            first_name="Admin",
            last_name="",
            date_of_birth=date(1990, 1, 1),
            gender=Gender.NOT_SPECIFIED,
            role=AccountRole.ADMIN,
            is_active=True,
            email_verified=True,
        )
        db.add(account)
        db.commit()
        db.refresh(account)
        logger.info("bootstrap admin created: account_id=%s", account.id)
        return account

    if account.role != AccountRole.ADMIN or not account.is_active:
        account.role = AccountRole.ADMIN
        account.is_active = True
        db.commit()
        db.refresh(account)
        logger.info("bootstrap admin promoted: account_id=%s", account.id)
    return account
