"""路由模块导出集合。"""

from . import auth, health, users, workouts

__all__ = ["auth", "health", "users", "workouts"]
