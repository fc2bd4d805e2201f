"""全局通用结构。

对外 JSON 使用 camelCase，Python 侧使用 snake_case，
两种写法在入参中均可识别。
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """基础结构，开启驼峰别名与对象映射能力，忽略未声明字段。"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


class ErrorResponse(BaseSchema):
    """统一错误响应。"""

    error: str = Field(description="人类可读错误信息。")
    details: list[str] | None = Field(default=None, description="字段级校验错误列表，仅校验失败时返回。")


class MessageData(BaseSchema):
    """写操作通用返回结构。"""

    message: str = Field(description="操作结果说明。")


class PaginationData(BaseSchema):
    """分页元信息。"""

    current_page: int = Field(description="当前页码（从 1 开始）。")
    total_pages: int = Field(description="总页数。")
    total_workouts: int = Field(description="满足条件的总记录数。")
    has_next_page: bool = Field(description="是否存在下一页。")
    has_prev_page: bool = Field(description="是否存在上一页。")
