"""领域枚举定义。"""

from enum import StrEnum


class AccountRole(StrEnum):
    """账号角色。"""

    USER = "user"  # 普通用户，只能访问自己的资源。
    ADMIN = "admin"  # 管理员，可访问与管理全部资源。


class Gender(StrEnum):
    """性别取值。"""

    MALE = "M"
    FEMALE = "F"
    NOT_SPECIFIED = "NOT_SPECIFIED"  # 第三方登录自动创建的账号默认值。


class ExerciseType(StrEnum):
    """训练类型（封闭枚举，存储为大写下划线形式）。"""

    CARDIO = "CARDIO"
    STRENGTH = "STRENGTH"
    FLEXIBILITY = "FLEXIBILITY"
    BALANCE = "BALANCE"
    SPORTS = "SPORTS"
    RUNNING = "RUNNING"
    CYCLING = "CYCLING"
    SWIMMING = "SWIMMING"
    WALKING = "WALKING"
    WEIGHTLIFTING = "WEIGHTLIFTING"
    YOGA = "YOGA"
    PILATES = "PILATES"
    CROSSFIT = "CROSSFIT"
    BASKETBALL = "BASKETBALL"
    FOOTBALL = "FOOTBALL"
    TENNIS = "TENNIS"
    BOXING = "BOXING"
    MARTIAL_ARTS = "MARTIAL_ARTS"
    DANCING = "DANCING"
    HIKING = "HIKING"
    CLIMBING = "CLIMBING"
    ROWING = "ROWING"
    OTHER = "OTHER"
