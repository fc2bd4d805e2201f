"""GitHub OAuth 授权码流程客户端。"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from fittrack_api.core.config import Settings
from fittrack_api.services.federated_identity import ProviderProfile

logger = logging.getLogger(__name__)


class GitHubOAuthError(Exception):
    """GitHub 授权码交换或资料拉取失败。"""


class GitHubOAuthClient:
    """GitHub OAuth 客户端，只负责与 GitHub 通信，不接触本地账号。"""

    AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
    TOKEN_URL = "https://github.com/login/oauth/access_token"
    API_BASE_URL = "https://api.github.com"
    SCOPE = "user:email"

    def __init__(
        self,
        *,
        client_id: str | None,
        client_secret: str | None,
        callback_url: str | None,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        # 测试时注入 MockTransport。
        self.transport = transport
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubOAuthClient":
        return cls(
            client_id=settings.github_client_id,
            client_secret=settings.github_client_secret,
            callback_url=settings.github_callback_url,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.callback_url)

    def _client(self) -> httpx.Client:
        return httpx.Client(
            transport=self.transport,
            timeout=self.timeout,
            headers={"Accept": "application/json"},
        )

    def authorize_url(self, state: str) -> str:
        """构造 GitHub 授权页跳转地址。"""
        if not self.is_configured:
            raise GitHubOAuthError("GitHub OAuth not configured")
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "scope": self.SCOPE,
            "state": state,
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> str:
        """用授权码换取 GitHub 访问令牌。"""
        if not self.is_configured:
            raise GitHubOAuthError("GitHub OAuth not configured")
        try:
            with self._client() as client:
                response = client.post(
                    self.TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": self.callback_url,
                    },
                )
        except httpx.HTTPError as exc:
            raise GitHubOAuthError(f"token exchange request failed: {exc}") from exc

        if response.status_code != 200:
            logger.error("github token exchange failed: status=%s", response.status_code)
            raise GitHubOAuthError(f"token exchange failed: {response.status_code}")

        payload = _json_object(response, "token exchange")
        # GitHub 对无效授权码同样返回 200，错误写在 body 中。
        access_token = payload.get("access_token")
        if not access_token:
            logger.warning("github token exchange rejected: error=%s", payload.get("error"))
            raise GitHubOAuthError(payload.get("error_description") or "token exchange rejected")
        return access_token

    def _get(self, client: httpx.Client, path: str, access_token: str) -> httpx.Response:
        return client.get(
            f"{self.API_BASE_URL}{path}",
            headers={"Authorization": f"Bearer {access_token}", "Accept": "application/vnd.github+json"},
        )

    def fetch_profile(self, access_token: str) -> ProviderProfile:
        """拉取 GitHub 用户资料与已验证邮箱（主邮箱在前）。"""
        try:
            with self._client() as client:
                user_response = self._get(client, "/user", access_token)
                if user_response.status_code != 200:
                    raise GitHubOAuthError(f"user lookup failed: {user_response.status_code}")
                user = _json_object(user_response, "user lookup")

                emails_response = self._get(client, "/user/emails", access_token)
                emails = _verified_emails(emails_response)
        except httpx.HTTPError as exc:
            raise GitHubOAuthError(f"profile request failed: {exc}") from exc

        if user.get("id") is None or not user.get("login"):
            raise GitHubOAuthError("incomplete GitHub profile")

        # 邮箱接口不可用时退回资料中的公开邮箱。
        if not emails and user.get("email"):
            emails = [user["email"]]

        return ProviderProfile(
            provider_user_id=str(user["id"]),
            username=user["login"],
            display_name=user.get("name"),
            emails=emails,
        )

    def authenticate(self, code: str) -> ProviderProfile:
        """完整回调流程：换取令牌后拉取资料。"""
        return self.fetch_profile(self.exchange_code(code))


def _json_object(response: httpx.Response, step: str) -> dict[str, Any]:
    """解析 JSON 对象响应，非 JSON 或结构不符统一视为 GitHub 调用失败。"""
    try:
        payload = response.json()
    except ValueError as exc:
        logger.warning("github %s returned a non-JSON body", step)
        raise GitHubOAuthError(f"{step} returned an invalid body") from exc
    if not isinstance(payload, dict):
        raise GitHubOAuthError(f"{step} returned an unexpected body")
    return payload


def _verified_emails(response: httpx.Response) -> list[str]:
    if response.status_code != 200:
        logger.info("github email lookup unavailable: status=%s", response.status_code)
        return []
    try:
        entries = response.json()
    except ValueError:
        logger.info("github email lookup returned a non-JSON body")
        return []
    if not isinstance(entries, list):
        return []
    verified = [entry for entry in entries if isinstance(entry, dict) and entry.get("verified") and entry.get("email")]
    verified.sort(key=lambda entry: not entry.get("primary", False))
    return [entry["email"] for entry in verified]
