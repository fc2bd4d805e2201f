from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest
from fastapi import HTTPException

from fittrack_api.core.config import get_settings
from fittrack_api.core.security import AuthContext, PasswordHasher, TokenIssuer, TokenVerifier, extract_bearer_token
from fittrack_api.dependencies import get_auth_context

SECRET = "unit-test-secret-key-at-least-32-bytes"


def _ctx(secret: str | None = SECRET, **kwargs) -> AuthContext:
    return AuthContext(signing_secret=secret, password_hash_iterations=1000, **kwargs)


def test_issue_and_verify_round_trip():
    ctx = _ctx()
    account_id = uuid4()
    token = TokenIssuer(ctx).issue(account_id, "ann@ex.com", "admin")

    principal = TokenVerifier(ctx).verify(f"Bearer {token}")

    assert principal.user_id == account_id
    assert principal.email == "ann@ex.com"
    assert principal.role == "admin"
    assert principal.is_admin
    assert principal.claims["iss"] == "fittrack-api"
    assert principal.claims["exp"] - principal.claims["iat"] == 7200


def test_issue_defaults_missing_role_to_user():
    ctx = _ctx()
    token = TokenIssuer(ctx).issue(uuid4(), "u@ex.com", None)
    principal = TokenVerifier(ctx).verify(f"Bearer {token}")
    assert principal.role == "user"
    assert not principal.is_admin


def test_missing_header_is_401_even_without_secret():
    with pytest.raises(HTTPException) as exc:
        TokenVerifier(_ctx(secret=None)).verify(None)
    assert exc.value.status_code == 401
    assert exc.value.detail["message"] == "Access token required"


@pytest.mark.parametrize("header", ["", "Bearer", "Basic abc", "Token abc", "Bearer a b"])
def test_malformed_header_is_401(header):
    with pytest.raises(HTTPException) as exc:
        extract_bearer_token(header)
    assert exc.value.status_code == 401


def test_bearer_scheme_is_case_insensitive():
    assert extract_bearer_token("bearer abc") == "abc"


def test_missing_secret_with_token_is_500():
    token = jwt.encode({"userId": str(uuid4())}, "whatever", algorithm="HS256")
    with pytest.raises(HTTPException) as exc:
        TokenVerifier(_ctx(secret=None)).verify(f"Bearer {token}")
    assert exc.value.status_code == 500
    assert exc.value.detail["message"] == "Server configuration error"


def test_issue_without_secret_is_500():
    with pytest.raises(HTTPException) as exc:
        TokenIssuer(_ctx(secret=None)).issue(uuid4(), "u@ex.com", "user")
    assert exc.value.status_code == 500


def test_expired_token_is_403():
    ctx = _ctx()
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {
            "userId": str(uuid4()),
            "email": "u@ex.com",
            "role": "user",
            "iss": ctx.issuer,
            "iat": int((now - timedelta(hours=3)).timestamp()),
            "exp": int((now - timedelta(hours=1)).timestamp()),
        },
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(HTTPException) as exc:
        TokenVerifier(ctx).verify(f"Bearer {token}")
    assert exc.value.status_code == 403
    assert exc.value.detail["message"] == "Invalid or expired token"


def test_token_signed_with_other_secret_is_403():
    token = TokenIssuer(_ctx(secret="another-secret-key-at-least-32-bytes")).issue(uuid4(), "u@ex.com", "user")
    with pytest.raises(HTTPException) as exc:
        TokenVerifier(_ctx()).verify(f"Bearer {token}")
    assert exc.value.status_code == 403


def test_token_from_other_issuer_is_403():
    token = TokenIssuer(_ctx(issuer="someone-else")).issue(uuid4(), "u@ex.com", "user")
    with pytest.raises(HTTPException) as exc:
        TokenVerifier(_ctx()).verify(f"Bearer {token}")
    assert exc.value.status_code == 403


def test_garbage_token_is_403():
    with pytest.raises(HTTPException) as exc:
        TokenVerifier(_ctx()).verify("Bearer not-a-jwt")
    assert exc.value.status_code == 403


def test_token_with_non_uuid_subject_is_403():
    ctx = _ctx()
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"userId": "abc", "iss": ctx.issuer, "iat": int(now.timestamp()), "exp": int(now.timestamp()) + 60},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(HTTPException) as exc:
        TokenVerifier(ctx).verify(f"Bearer {token}")
    assert exc.value.status_code == 403


def test_oauth_state_round_trip():
    ctx = _ctx()
    state = TokenIssuer(ctx).issue_oauth_state()
    verifier = TokenVerifier(ctx)

    assert verifier.verify_oauth_state(state)
    assert not verifier.verify_oauth_state(None)
    assert not verifier.verify_oauth_state("forged")
    # 访问令牌不能当作 state 使用
    assert not verifier.verify_oauth_state(TokenIssuer(ctx).issue(uuid4(), "u@ex.com", "user"))


def test_password_hash_and_verify():
    hasher = PasswordHasher(1000)
    password_hash = hasher.hash("Secret123!")

    assert password_hash.startswith("pbkdf2_sha256$1000$")
    assert hasher.verify("Secret123!", password_hash)
    assert not hasher.verify("wrong-password", password_hash)
    assert not hasher.verify("Secret123!", None)
    assert not hasher.verify("Secret123!", "broken")
    # 工作因子调整后旧哈希依然可校验
    assert PasswordHasher(2000).verify("Secret123!", password_hash)


def test_auth_context_reads_settings(monkeypatch):
    monkeypatch.setenv("FT_AUTH_JWT_SECRET", "  ")
    get_settings.cache_clear()
    assert get_auth_context().signing_secret is None

    monkeypatch.setenv("FT_AUTH_JWT_SECRET", SECRET)
    monkeypatch.setenv("FT_AUTH_PASSWORD_HASH_ITERATIONS", "1234")
    get_settings.cache_clear()
    ctx = get_auth_context()
    assert ctx.signing_secret == SECRET
    assert ctx.password_hash_iterations == 1234
    assert ctx.access_token_ttl_seconds == 7200
    get_settings.cache_clear()
