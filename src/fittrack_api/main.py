"""FastAPI 应用入口点。"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from fittrack_api.api.router import api_router
from fittrack_api.core.config import get_settings
from fittrack_api.core.logging import setup_logging
from fittrack_api.core.security import AuthContext, PasswordHasher
from fittrack_api.db.session import get_session_factory
from fittrack_api.exceptions import register_exception_handlers
from fittrack_api.middlewares import register_middlewares
from fittrack_api.services import ensure_bootstrap_admin

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """启动时检查密钥配置并按需初始化管理员账号。"""
    settings = get_settings()
    if not settings.auth_jwt_secret:
        # 不阻止启动，签发与校验时返回 500。
        logger.error("FT_AUTH_JWT_SECRET is not set; authentication endpoints will fail")
    if settings.bootstrap_admin_email and settings.bootstrap_admin_password:
        hasher = PasswordHasher(AuthContext.from_settings(settings).password_hash_iterations)
        with get_session_factory()() as db:
            ensure_bootstrap_admin(db, settings, hasher)
    yield


def create_app() -> FastAPI:
    """创建并配置 FastAPI 应用实例。"""
    settings = get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        debug=settings.app_debug,
        lifespan=lifespan,
        description=(
            "健身训练记录接口。\n\n"
            "通过 `Authorization: Bearer <token>` 认证，令牌有效期 2 小时。\n"
            "错误统一返回：`{error, details?}`。"
        ),
        openapi_tags=[
            {"name": "health", "description": "服务存活与就绪探针。"},
            {"name": "auth", "description": "GitHub 第三方登录。"},
            {"name": "users", "description": "注册、登录与用户资料管理。"},
            {"name": "workouts", "description": "训练记录管理与统计。"},
        ],
    )

    register_middlewares(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
