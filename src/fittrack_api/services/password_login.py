"""邮箱密码登录。"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from fittrack_api.core.errors import account_deactivated, invalid_login_credentials
from fittrack_api.core.security import PasswordHasher, TokenIssuer
from fittrack_api.models.account import Account
from fittrack_api.services.accounts import get_account_by_email

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    account: Account
    token: str


class PasswordLogin:
    """校验邮箱密码并签发访问令牌。

    账号不存在与密码错误返回同一错误，不区分原因；
    仅在密码正确时才提示账号已停用。
    """

    def __init__(self, db: Session, hasher: PasswordHasher, issuer: TokenIssuer) -> None:
        self.db = db
        self.hasher = hasher
        self.issuer = issuer

    def login(self, email: str, password: str) -> LoginResult:
        account = get_account_by_email(self.db, email)
        # 仅 GitHub 账号没有口令哈希，verify 直接返回 False
        if account is None or not self.hasher.verify(password, account.password_hash):
            logger.info("password login rejected")
            raise invalid_login_credentials()
        if not account.is_active:
            logger.info("password login for deactivated account: account_id=%s", account.id)
            raise account_deactivated()

        token = self.issuer.issue(account.id, account.email, account.role)
        logger.info("password login succeeded: account_id=%s", account.id)
        return LoginResult(account=account, token=token)
