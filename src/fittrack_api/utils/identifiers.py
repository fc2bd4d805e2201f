"""路径与查询参数中的资源 ID 解析。"""

from uuid import UUID

from fittrack_api.core.errors import malformed_identifier


def parse_identifier(raw: str | None, message: str = "Invalid ID format") -> UUID:
    """解析 UUID 形式的资源 ID，格式错误返回 400。"""
    if raw is None:
        raise malformed_identifier(message)
    try:
        return UUID(raw.strip())
    except ValueError as exc:
        raise malformed_identifier(message) from exc
