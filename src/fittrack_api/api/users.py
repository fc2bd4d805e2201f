"""用户注册、登录与资料管理接口。"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from fittrack_api.core.errors import not_found, validation_failed
from fittrack_api.core.security import AuthenticatedPrincipal, PasswordHasher, TokenIssuer
from fittrack_api.db.session import get_db
from fittrack_api.dependencies import get_current_principal, get_password_hasher, get_token_issuer
from fittrack_api.models.account import Account
from fittrack_api.schemas.common import ErrorResponse, MessageData
from fittrack_api.schemas.user import (
    AccountCreateRequest,
    AccountUpdateRequest,
    LoginData,
    LoginRequest,
    RoleUpdateRequest,
    StatusUpdateRequest,
    UserCreatedData,
    UserDetailData,
    UserPublicData,
)
from fittrack_api.services import (
    PasswordLogin,
    account_detail_view,
    apply_account_changes,
    ensure_owner_or_admin,
    ensure_role_change_allowed,
    ensure_status_change_allowed,
    public_account_view,
    register_account,
)
from fittrack_api.services.accounts import commit_or_conflict
from fittrack_api.utils.identifiers import parse_identifier
from fittrack_api.utils.response import message_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

_INVALID_USER_ID = "Invalid user ID format"
_USER_NOT_FOUND = "User not found"


def _load_account(db: Session, account_id: UUID) -> Account:
    account = db.get(Account, account_id)
    if account is None:
        raise not_found(_USER_NOT_FOUND)
    return account


@router.post(
    "",
    summary="注册账号",
    description="创建普通用户账号，邮箱大小写不敏感且全局唯一。",
    status_code=status.HTTP_201_CREATED,
    response_model=UserCreatedData,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_user(
    payload: AccountCreateRequest,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """公开注册，新账号角色固定为 user。"""
    account = register_account(db, hasher, payload)
    return message_payload("User created successfully", userId=str(account.id))


@router.post(
    "/login",
    summary="邮箱密码登录",
    description="校验邮箱与密码，成功后返回 2 小时有效的访问令牌。",
    status_code=status.HTTP_200_OK,
    response_model=LoginData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    result = PasswordLogin(db, hasher, issuer).login(payload.email, payload.password)
    account = result.account
    return message_payload(
        "Login successful",
        token=result.token,
        user={
            "id": str(account.id),
            "firstName": account.first_name,
            "lastName": account.last_name,
            "email": account.email,
            "role": account.role,
        },
    )


@router.get(
    "",
    summary="查询用户列表",
    description="任何已登录用户可查看，仅返回公开字段。",
    status_code=status.HTTP_200_OK,
    response_model=list[UserPublicData],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def list_users(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    accounts = db.execute(select(Account).order_by(Account.created_at.asc())).scalars().all()
    return [public_account_view(account) for account in accounts]


@router.get(
    "/{user_id}",
    summary="查询用户详情",
    description="本人或管理员可查看完整资料（不含口令哈希）。",
    status_code=status.HTTP_200_OK,
    response_model=UserDetailData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_user(
    user_id: str = Path(..., description="目标用户 ID。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    target_id = parse_identifier(user_id, _INVALID_USER_ID)
    ensure_owner_or_admin(principal, target_id, message="Access denied. You can only view your own profile.")
    return account_detail_view(_load_account(db, target_id))


@router.put(
    "/{user_id}",
    summary="更新用户资料",
    description="本人或管理员可更新资料；role、isActive、emailVerified 等字段会被忽略。",
    status_code=status.HTTP_200_OK,
    response_model=MessageData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_user(
    payload: AccountUpdateRequest,
    user_id: str = Path(..., description="目标用户 ID。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    target_id = parse_identifier(user_id, _INVALID_USER_ID)
    ensure_owner_or_admin(principal, target_id, message="Access denied. You can only update your own profile.")
    account = _load_account(db, target_id)

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise validation_failed(["No valid fields provided for update"])
    apply_account_changes(db, account, changes)
    return message_payload("User updated successfully")


@router.patch(
    "/{user_id}/role",
    summary="变更用户角色",
    description="仅管理员可调用；管理员不能撤销自己的管理员角色。已签发令牌中的角色在过期前不变。",
    status_code=status.HTTP_200_OK,
    response_model=MessageData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_user_role(
    payload: RoleUpdateRequest,
    user_id: str = Path(..., description="目标用户 ID。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    target_id = parse_identifier(user_id, _INVALID_USER_ID)
    ensure_role_change_allowed(principal, target_id, payload.role)
    account = _load_account(db, target_id)
    account.role = payload.role.value
    commit_or_conflict(db)
    logger.info("account role changed: account_id=%s role=%s by=%s", target_id, payload.role.value, principal.user_id)
    return message_payload("User role updated successfully")


@router.patch(
    "/{user_id}/status",
    summary="启用或停用账号",
    description="仅管理员可调用；停用后账号无法登录，已签发令牌不受影响。",
    status_code=status.HTTP_200_OK,
    response_model=MessageData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_user_status(
    payload: StatusUpdateRequest,
    user_id: str = Path(..., description="目标用户 ID。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    target_id = parse_identifier(user_id, _INVALID_USER_ID)
    ensure_status_change_allowed(principal, target_id, payload.is_active)
    account = _load_account(db, target_id)
    account.is_active = payload.is_active
    commit_or_conflict(db)
    logger.info("account status changed: account_id=%s active=%s by=%s", target_id, payload.is_active, principal.user_id)
    state = "activated" if payload.is_active else "deactivated"
    return message_payload(f"User {state} successfully")


@router.delete(
    "/{user_id}",
    summary="删除用户",
    description="本人或管理员可删除；权限校验先于存在性校验。",
    status_code=status.HTTP_200_OK,
    response_model=MessageData,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_user(
    user_id: str = Path(..., description="目标用户 ID。"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    target_id = parse_identifier(user_id, _INVALID_USER_ID)
    ensure_owner_or_admin(principal, target_id, message="Access denied. You can only delete your own account.")
    account = _load_account(db, target_id)
    db.delete(account)
    db.commit()
    logger.info("account deleted: account_id=%s by=%s", target_id, principal.user_id)
    return message_payload("User deleted successfully")
