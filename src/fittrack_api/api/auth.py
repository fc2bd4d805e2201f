"""GitHub 第三方登录接口。"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from fittrack_api.core.errors import account_deactivated, federated_login_failed, server_misconfiguration
from fittrack_api.core.security import TokenIssuer, TokenVerifier
from fittrack_api.db.session import get_db
from fittrack_api.dependencies import get_github_client, get_token_issuer, get_token_verifier
from fittrack_api.schemas.auth import GitHubLoginData
from fittrack_api.schemas.common import ErrorResponse
from fittrack_api.services import FederatedIdentityResolver, GitHubOAuthClient, GitHubOAuthError
from fittrack_api.utils.response import message_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get(
    "/github",
    summary="跳转 GitHub 授权",
    description="生成带签名 state 的 GitHub 授权地址并重定向。",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    responses={500: {"model": ErrorResponse}},
)
def github_login(
    client: GitHubOAuthClient = Depends(get_github_client),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    if not client.is_configured:
        logger.error("github oauth requested but FT_GITHUB_* settings are missing")
        raise server_misconfiguration()
    state = issuer.issue_oauth_state()
    return RedirectResponse(client.authorize_url(state), status_code=status.HTTP_302_FOUND)


@router.get(
    "/github/callback",
    summary="GitHub 授权回调",
    description="校验 state、换取 GitHub 资料，解析或创建本地账号后签发访问令牌。",
    status_code=status.HTTP_200_OK,
    response_model=GitHubLoginData,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def github_callback(
    code: str | None = Query(None, description="GitHub 授权码。"),
    state: str | None = Query(None, description="授权跳转时签发的 state。"),
    error: str | None = Query(None, description="用户拒绝授权时 GitHub 返回的错误码。"),
    client: GitHubOAuthClient = Depends(get_github_client),
    issuer: TokenIssuer = Depends(get_token_issuer),
    verifier: TokenVerifier = Depends(get_token_verifier),
    db: Session = Depends(get_db),
):
    if not client.is_configured:
        logger.error("github oauth callback received but FT_GITHUB_* settings are missing")
        raise server_misconfiguration()
    if error or not code:
        logger.info("github oauth callback without code: error=%s", error)
        raise federated_login_failed()
    if not verifier.verify_oauth_state(state):
        logger.warning("github oauth callback with invalid state")
        raise federated_login_failed()

    try:
        profile = client.authenticate(code)
    except GitHubOAuthError as exc:
        logger.warning("github oauth exchange failed: %s", exc)
        raise federated_login_failed() from exc

    account = FederatedIdentityResolver(db).resolve_or_create(profile)
    if not account.is_active:
        raise account_deactivated()

    token = issuer.issue(account.id, account.email, account.role)
    return message_payload(
        "GitHub OAuth login successful",
        token=token,
        user={
            "id": str(account.id),
            "firstName": account.first_name,
            "lastName": account.last_name,
            "email": account.email,
            "role": account.role,
            "githubUsername": account.github_username,
        },
    )
