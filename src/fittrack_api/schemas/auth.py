"""第三方登录与探针响应结构。"""

from pydantic import Field

from fittrack_api.schemas.common import BaseSchema


class GitHubLoginUserData(BaseSchema):
    id: str
    first_name: str
    last_name: str
    email: str
    role: str
    github_username: str | None = None


class GitHubLoginData(BaseSchema):
    """GitHub 登录成功返回结构。"""

    message: str
    token: str = Field(description="Bearer 访问令牌，有效期 2 小时。")
    user: GitHubLoginUserData


class HealthStatusData(BaseSchema):
    status: str = Field(description="探针状态。")
