"""ORM 模型导出集合。"""

from fittrack_api.models.account import Account
from fittrack_api.models.workout import Workout

__all__ = [
    "Account",
    "Workout",
]
