"""账号存取与注册服务。"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fittrack_api.core.errors import conflict
from fittrack_api.core.security import PasswordHasher
from fittrack_api.models.account import Account
from fittrack_api.models.enums import AccountRole
from fittrack_api.schemas.user import AccountCreateRequest

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """规范化邮箱，账号表内的邮箱始终为小写。"""
    return email.strip().lower()


def get_account_by_email(db: Session, email: str) -> Account | None:
    return db.execute(select(Account).where(Account.email == normalize_email(email))).scalar_one_or_none()


def get_account_by_github_id(db: Session, github_id: str) -> Account | None:
    return db.execute(select(Account).where(Account.github_id == github_id)).scalar_one_or_none()


def account_exists(db: Session, account_id: UUID) -> bool:
    return db.execute(select(func.count()).select_from(Account).where(Account.id == account_id)).scalar_one() > 0


def email_taken(db: Session, email: str, *, exclude_id: UUID | None = None) -> bool:
    """判断邮箱是否已被其他账号占用。"""
    stmt = select(Account.id).where(Account.email == normalize_email(email))
    if exclude_id is not None:
        stmt = stmt.where(Account.id != exclude_id)
    return db.execute(stmt.limit(1)).scalar_one_or_none() is not None


def commit_or_conflict(db: Session) -> None:
    """提交事务；唯一约束冲突统一转为 409。"""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise conflict() from exc


def register_account(db: Session, hasher: PasswordHasher, payload: AccountCreateRequest) -> Account:
    """注册本地账号，新账号固定为启用状态的普通用户。"""
    email = normalize_email(payload.email)
    if email_taken(db, email):
        raise conflict()

    account = Account(
        email=email,
        password_hash=hasher.hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        date_of_birth=payload.date_of_birth,
        gender=payload.gender,
        height=payload.height,
        weight=payload.weight,
        role=AccountRole.USER,
        is_active=True,
        email_verified=False,
        is_test_user=payload.is_test_user,
    )
    db.add(account)
    commit_or_conflict(db)
    db.refresh(account)
    logger.info("account registered: account_id=%s", account.id)
    return account


def apply_account_changes(db: Session, account: Account, changes: dict[str, Any]) -> Account:
    """写入资料变更，邮箱变更需重新做唯一性检查。"""
    if "email" in changes:
        changes["email"] = normalize_email(changes["email"])
        if email_taken(db, changes["email"], exclude_id=account.id):
            raise conflict()

    for field_name, value in changes.items():
        setattr(account, field_name, value)
    commit_or_conflict(db)
    db.refresh(account)
    return account
