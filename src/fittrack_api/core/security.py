"""认证上下文、口令哈希与令牌签发/校验。

组件均通过显式构造的 AuthContext 获取密钥与参数，
不在调用时读取全局配置，便于测试与多实例部署。
"""

import base64
import binascii
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt
from jwt import InvalidTokenError

from fittrack_api.core.config import Settings
from fittrack_api.core.errors import invalid_credential, missing_credential, server_misconfiguration
from fittrack_api.models.enums import AccountRole

logger = logging.getLogger(__name__)

_PASSWORD_SCHEME = "pbkdf2_sha256"
_OAUTH_STATE_PURPOSE = "github_oauth_state"


@dataclass(frozen=True)
class AuthContext:
    """认证相关的只读运行参数，进程启动后不再变化。"""

    # 对称签名密钥，None 表示未配置。
    signing_secret: str | None
    # 签名算法。
    algorithm: str = "HS256"
    # 固定签发方标识，签发写入、校验强制比对。
    issuer: str = "fittrack-api"
    # 访问令牌有效期（秒）。
    access_token_ttl_seconds: int = 7200
    # 口令哈希工作因子。
    password_hash_iterations: int = 390000
    # OAuth state 有效期（秒）。
    oauth_state_ttl_seconds: int = 600

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthContext":
        return cls(
            signing_secret=settings.auth_jwt_secret,
            algorithm=settings.auth_jwt_algorithm,
            issuer=settings.auth_jwt_issuer,
            access_token_ttl_seconds=settings.auth_access_token_ttl_seconds,
            password_hash_iterations=settings.auth_password_hash_iterations,
            oauth_state_ttl_seconds=settings.oauth_state_ttl_seconds,
        )

    def require_secret(self) -> str:
        """返回签名密钥；缺失时记录日志并抛出 500。"""
        if not self.signing_secret:
            logger.error("token signing secret is not configured (FT_AUTH_JWT_SECRET)")
            raise server_misconfiguration()
        return self.signing_secret


@dataclass
class AuthenticatedPrincipal:
    """令牌中还原出的调用方身份，不回查数据库。"""

    # 账号 ID（userId 声明）。
    user_id: UUID
    # 签发时的邮箱快照。
    email: str | None
    # 签发时的角色快照。
    role: str
    # 原始声明集。
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN


class PasswordHasher:
    """PBKDF2-SHA256 口令哈希，迭代次数即工作因子。"""

    def __init__(self, iterations: int) -> None:
        self.iterations = iterations

    def hash(self, password: str) -> str:
        salt = secrets.token_bytes(16)
        digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, self.iterations)
        salt_b64 = base64.b64encode(salt).decode("ascii")
        digest_b64 = base64.b64encode(digest).decode("ascii")
        return f"{_PASSWORD_SCHEME}${self.iterations}${salt_b64}${digest_b64}"

    def verify(self, password: str, password_hash: str | None) -> bool:
        """校验口令；哈希缺失或格式异常一律视为不匹配。"""
        if not password_hash:
            return False
        try:
            algorithm, iterations_text, salt_b64, expected_digest_b64 = password_hash.split("$", 3)
            if algorithm != _PASSWORD_SCHEME:
                return False
            # 使用哈希中记录的迭代次数，调整工作因子后旧哈希仍可校验。
            iterations = int(iterations_text)
            salt = base64.b64decode(salt_b64.encode("ascii"))
            expected_digest = base64.b64decode(expected_digest_b64.encode("ascii"))
        except (ValueError, TypeError, binascii.Error):
            return False

        actual_digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
        return hmac.compare_digest(actual_digest, expected_digest)


class TokenIssuer:
    """访问令牌签发器。"""

    def __init__(self, ctx: AuthContext) -> None:
        self.ctx = ctx

    def issue(self, account_id: UUID | str, email: str, role: str | None) -> str:
        """签发包含 userId/email/role 的 2 小时访问令牌。"""
        secret = self.ctx.require_secret()
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(seconds=self.ctx.access_token_ttl_seconds)
        claims: dict[str, object] = {
            "userId": str(account_id),
            "email": email,
            # 历史数据可能缺少角色，按普通用户处理。
            "role": role or AccountRole.USER.value,
            "iss": self.ctx.issuer,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims, secret, algorithm=self.ctx.algorithm)

    def issue_oauth_state(self) -> str:
        """签发无状态的 OAuth state，防止回调被跨站伪造。"""
        secret = self.ctx.require_secret()
        now = datetime.now(timezone.utc)
        claims = {
            "purpose": _OAUTH_STATE_PURPOSE,
            "nonce": secrets.token_urlsafe(16),
            "iss": self.ctx.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self.ctx.oauth_state_ttl_seconds)).timestamp()),
        }
        return jwt.encode(claims, secret, algorithm=self.ctx.algorithm)


def extract_bearer_token(authorization: str | None) -> str:
    """从 `Authorization: Bearer <token>` 中提取令牌，缺失即 401。"""
    if not authorization:
        raise missing_credential()
    parts = authorization.strip().split()
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise missing_credential()
    return parts[1]


class TokenVerifier:
    """访问令牌校验器，只信任签名与有效期，不回查账号状态。"""

    def __init__(self, ctx: AuthContext) -> None:
        self.ctx = ctx

    def _decode(self, token: str) -> dict[str, Any]:
        secret = self.ctx.require_secret()
        return jwt.decode(
            token,
            key=secret,
            algorithms=[self.ctx.algorithm],
            issuer=self.ctx.issuer,
            options={"require": ["exp", "iat", "iss"]},
        )

    def verify(self, authorization: str | None) -> AuthenticatedPrincipal:
        """校验原始认证头并还原身份声明。

        - 缺少头或缺少令牌：401。
        - 签名错误、过期、格式异常：403。
        """
        token = extract_bearer_token(authorization)
        try:
            claims = self._decode(token)
        except InvalidTokenError as exc:
            raise invalid_credential() from exc

        raw_user_id = claims.get("userId")
        if not isinstance(raw_user_id, str):
            raise invalid_credential()
        try:
            user_id = UUID(raw_user_id)
        except ValueError as exc:
            raise invalid_credential() from exc

        email = claims.get("email")
        role = claims.get("role")
        return AuthenticatedPrincipal(
            user_id=user_id,
            email=email if isinstance(email, str) else None,
            role=role if isinstance(role, str) and role else AccountRole.USER.value,
            claims=claims,
        )

    def verify_oauth_state(self, state: str | None) -> bool:
        """校验 OAuth state 是否由本服务签发且未过期。"""
        if not state:
            return False
        try:
            claims = self._decode(state)
        except InvalidTokenError:
            return False
        return claims.get("purpose") == _OAUTH_STATE_PURPOSE
