"""业务错误分类。

每个构造函数对应一类对外错误，统一返回 HTTPException，
`detail` 固定为 `{code, message[, details]}`，由异常处理器渲染为
`{"error": message[, "details": [...]]}`。
"""

from fastapi import HTTPException, status


def _error(status_code: int, code: str, message: str, details: list[str] | None = None) -> HTTPException:
    detail: dict[str, object] = {"code": code, "message": message}
    if details:
        detail["details"] = details
    return HTTPException(status_code=status_code, detail=detail)


def missing_credential() -> HTTPException:
    """请求未携带 Bearer 令牌。"""
    return _error(status.HTTP_401_UNAUTHORIZED, "MISSING_CREDENTIAL", "Access token required")


def invalid_credential() -> HTTPException:
    """令牌签名、过期或格式校验失败。"""
    return _error(status.HTTP_403_FORBIDDEN, "INVALID_CREDENTIAL", "Invalid or expired token")


def invalid_login_credentials() -> HTTPException:
    """邮箱不存在与密码错误共用同一提示，避免暴露账号是否存在。"""
    return _error(status.HTTP_401_UNAUTHORIZED, "INVALID_LOGIN_CREDENTIALS", "Invalid email or password")


def account_deactivated() -> HTTPException:
    return _error(status.HTTP_401_UNAUTHORIZED, "ACCOUNT_DEACTIVATED", "Account is deactivated")


def access_denied(message: str = "Access denied") -> HTTPException:
    return _error(status.HTTP_403_FORBIDDEN, "ACCESS_DENIED", message)


def not_found(message: str) -> HTTPException:
    return _error(status.HTTP_404_NOT_FOUND, "NOT_FOUND", message)


def conflict(message: str = "Email already exists") -> HTTPException:
    return _error(status.HTTP_409_CONFLICT, "CONFLICT", message)


def validation_failed(details: list[str], message: str = "Validation failed") -> HTTPException:
    return _error(status.HTTP_400_BAD_REQUEST, "VALIDATION_FAILED", message, details)


def bad_request(message: str) -> HTTPException:
    """单条业务校验失败（例如目标用户不存在）。"""
    return _error(status.HTTP_400_BAD_REQUEST, "BAD_REQUEST", message)


def malformed_identifier(message: str) -> HTTPException:
    return _error(status.HTTP_400_BAD_REQUEST, "MALFORMED_IDENTIFIER", message)


def server_misconfiguration() -> HTTPException:
    """服务端缺少必需配置，具体原因只写日志，不返回给调用方。"""
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "SERVER_MISCONFIGURATION", "Server configuration error")


def federated_login_failed() -> HTTPException:
    return _error(status.HTTP_401_UNAUTHORIZED, "FEDERATED_LOGIN_FAILED", "GitHub authentication failed")


def service_unavailable(message: str = "Database unavailable") -> HTTPException:
    """依赖的外部服务（如数据库）暂不可用。"""
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "SERVICE_UNAVAILABLE", message)
