"""数据库基础模型导出。

仅提供 Base 定义并注册全部模型，不执行自动建表。
"""

import fittrack_api.models  # noqa: F401
from fittrack_api.models.base import Base

__all__ = ["Base"]
