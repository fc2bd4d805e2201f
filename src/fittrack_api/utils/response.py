"""统一响应结构工具。"""

from math import ceil
from typing import Any

DEFAULT_ERROR_MESSAGE = "Internal server error"


def message_payload(message: str, **extra: Any) -> dict[str, Any]:
    """写操作成功响应，例如 `{"message": ..., "userId": ...}`。"""
    return {"message": message, **extra}


def error_payload(message: str, details: list[str] | None = None) -> dict[str, Any]:
    """构造统一错误响应结构。"""
    payload: dict[str, Any] = {"error": message}
    if details:
        payload["details"] = details
    return payload


def pagination_meta(page: int, limit: int, total: int) -> dict[str, Any]:
    """分页元信息；无数据时总页数为 0。"""
    total_pages = ceil(total / limit) if limit > 0 else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalWorkouts": total,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }
