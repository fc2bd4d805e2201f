"""请求级依赖。

职责:
1. 由配置构造认证上下文及签发、校验组件。
2. 解析并校验访问令牌，得到调用方身份。
3. 提供 GitHub OAuth 客户端。
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fittrack_api.core.config import get_settings
from fittrack_api.core.security import (
    AuthContext,
    AuthenticatedPrincipal,
    PasswordHasher,
    TokenIssuer,
    TokenVerifier,
)
from fittrack_api.services.github_oauth import GitHubOAuthClient

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_context() -> AuthContext:
    return AuthContext.from_settings(get_settings())


def get_password_hasher(ctx: AuthContext = Depends(get_auth_context)) -> PasswordHasher:
    return PasswordHasher(ctx.password_hash_iterations)


def get_token_issuer(ctx: AuthContext = Depends(get_auth_context)) -> TokenIssuer:
    return TokenIssuer(ctx)


def get_token_verifier(ctx: AuthContext = Depends(get_auth_context)) -> TokenVerifier:
    return TokenVerifier(ctx)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> AuthenticatedPrincipal:
    """提取并校验当前请求的访问令牌。"""
    authorization = None
    if credentials is not None and credentials.credentials:
        authorization = f"{credentials.scheme} {credentials.credentials}"
    return verifier.verify(authorization)


def get_github_client() -> GitHubOAuthClient:
    return GitHubOAuthClient.from_settings(get_settings())
