"""应用异常处理注册。

错误统一渲染为 `{"error": message[, "details": [...]]}`。
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fittrack_api.utils.response import DEFAULT_ERROR_MESSAGE, error_payload

logger = logging.getLogger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "


def _parse_http_detail(detail: object) -> tuple[str, list[str] | None]:
    if isinstance(detail, dict):
        message = str(detail.get("message") or detail.get("detail") or "Request failed")
        raw_details = detail.get("details")
        details = [str(item) for item in raw_details] if isinstance(raw_details, list) else None
        return message, details
    if isinstance(detail, str):
        return detail, None
    return "Request failed", None


def _format_validation_error(err: dict) -> str:
    """自定义校验器的报错已包含字段名，其余错误补上字段路径。"""
    message = str(err.get("msg", "Invalid value"))
    if message.startswith(_VALUE_ERROR_PREFIX):
        return message[len(_VALUE_ERROR_PREFIX) :]
    field = ".".join(str(item) for item in err.get("loc", []) if item not in {"body", "query", "path"})
    return f"{field}: {message}" if field else message


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message, details = _parse_http_detail(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(message, details),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """请求参数校验失败统一返回 400。"""
    details = [_format_validation_error(err) for err in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload("Validation failed", details),
    )


async def unexpected_exception_handler(request: Request, exc: Exception):
    """处理未捕获异常，避免内部细节泄露。"""
    logger.exception(
        "unhandled error: request_id=%s method=%s path=%s",
        getattr(request.state, "request_id", None),
        request.method,
        request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload(DEFAULT_ERROR_MESSAGE),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """集中注册异常处理器。"""
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(Exception)(unexpected_exception_handler)
