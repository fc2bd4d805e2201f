"""访问控制与字段可见性策略。

所有判断只依赖令牌中的身份声明（userId / role）与资源归属，
不回查数据库中的当前角色。
"""

from typing import Any
from uuid import UUID

from fittrack_api.core.errors import access_denied
from fittrack_api.core.security import AuthenticatedPrincipal
from fittrack_api.models.account import Account
from fittrack_api.models.enums import AccountRole
from fittrack_api.models.workout import Workout

ADMIN_REQUIRED_MESSAGE = "Access denied. Admin privileges required."

# 用户列表对所有已认证调用方公开的字段。
PUBLIC_ACCOUNT_FIELDS = ("id", "firstName", "lastName", "gender", "createdAt", "isTestUser")


def is_owner(principal: AuthenticatedPrincipal, owner_id: UUID | None) -> bool:
    """资源归属 ID 为空（资源不存在）时视为非本人。"""
    return owner_id is not None and principal.user_id == owner_id


def ensure_owner_or_admin(
    principal: AuthenticatedPrincipal,
    owner_id: UUID | None,
    *,
    message: str = "Access denied",
) -> None:
    if principal.is_admin or is_owner(principal, owner_id):
        return
    raise access_denied(message)


def ensure_admin(principal: AuthenticatedPrincipal, message: str = ADMIN_REQUIRED_MESSAGE) -> None:
    if not principal.is_admin:
        raise access_denied(message)


def ensure_role_change_allowed(principal: AuthenticatedPrincipal, target_id: UUID, new_role: str) -> None:
    """仅管理员可改角色，且不能撤销自己的管理员角色。"""
    ensure_admin(principal)
    if target_id == principal.user_id and new_role != AccountRole.ADMIN:
        raise access_denied("Access denied. Admins cannot remove their own admin role.")


def ensure_status_change_allowed(principal: AuthenticatedPrincipal, target_id: UUID, is_active: bool) -> None:
    """仅管理员可启停账号，且不能停用自己。"""
    ensure_admin(principal)
    if target_id == principal.user_id and not is_active:
        raise access_denied("Access denied. Admins cannot deactivate their own account.")


def ensure_workout_create_allowed(principal: AuthenticatedPrincipal, declared_owner_id: UUID) -> None:
    if principal.is_admin or is_owner(principal, declared_owner_id):
        return
    raise access_denied("Access denied. You can only create workouts for yourself.")


def ensure_workout_reassignment_allowed(
    principal: AuthenticatedPrincipal,
    current_owner_id: UUID,
    new_owner_id: UUID | None,
) -> None:
    """修改训练记录归属人仅限管理员；归属人不变时放行。"""
    if new_owner_id is None or new_owner_id == current_owner_id:
        return
    if not principal.is_admin:
        raise access_denied("Only admins can reassign workouts to other users.")


def workout_owner_scope(principal: AuthenticatedPrincipal, requested_owner_id: UUID | None) -> UUID | None:
    """列表查询的归属人范围。

    普通用户固定为本人，忽略请求中的 userId；
    管理员可按 userId 过滤，未指定时返回 None 表示全部。
    """
    if principal.is_admin:
        return requested_owner_id
    return principal.user_id


def _timestamp(value: Any) -> Any:
    return value.isoformat() if value is not None else None


def public_account_view(account: Account) -> dict[str, Any]:
    """用户列表视图，不含邮箱、出生日期、身体数据与账号状态。"""
    return {
        "id": str(account.id),
        "firstName": account.first_name,
        "lastName": account.last_name,
        "gender": account.gender,
        "createdAt": _timestamp(account.created_at),
        "isTestUser": account.is_test_user,
    }


def account_detail_view(account: Account) -> dict[str, Any]:
    """单个用户详情视图，除口令哈希外全部返回；本人与管理员看到的内容一致。"""
    return {
        "id": str(account.id),
        "firstName": account.first_name,
        "lastName": account.last_name,
        "email": account.email,
        "dateOfBirth": account.date_of_birth.isoformat(),
        "gender": account.gender,
        "height": account.height,
        "weight": account.weight,
        "role": account.role,
        "isActive": account.is_active,
        "emailVerified": account.email_verified,
        "isTestUser": account.is_test_user,
        "githubId": account.github_id,
        "githubUsername": account.github_username,
        "createdAt": _timestamp(account.created_at),
        "updatedAt": _timestamp(account.updated_at),
    }


def workout_view(workout: Workout) -> dict[str, Any]:
    return {
        "id": str(workout.id),
        "userId": str(workout.user_id),
        "workoutName": workout.workout_name,
        "date": workout.workout_date.isoformat(),
        "duration": workout.duration,
        "caloriesBurned": workout.calories_burned,
        "exerciseType": workout.exercise_type,
        "notes": workout.notes,
        "createdBy": str(workout.created_by) if workout.created_by else None,
        "createdAt": _timestamp(workout.created_at),
        "updatedAt": _timestamp(workout.updated_at),
    }
