"""数据库引擎与会话管理。"""

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from fittrack_api.core.config import get_settings


@lru_cache
def get_engine() -> Engine:
    """按配置懒加载数据库引擎，首次使用时才建立连接池。"""
    settings = get_settings()
    return create_engine(settings.database_url, future=True, pool_pre_ping=True)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """为每个请求提供独立数据库会话。"""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
