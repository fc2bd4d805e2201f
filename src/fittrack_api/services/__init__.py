"""服务层能力导出集合。"""

from fittrack_api.services.access_policy import (
    account_detail_view,
    ensure_admin,
    ensure_owner_or_admin,
    ensure_role_change_allowed,
    ensure_status_change_allowed,
    ensure_workout_create_allowed,
    ensure_workout_reassignment_allowed,
    is_owner,
    public_account_view,
    workout_owner_scope,
    workout_view,
)
from fittrack_api.services.account_bootstrap import ensure_bootstrap_admin
from fittrack_api.services.accounts import (
    account_exists,
    apply_account_changes,
    get_account_by_email,
    get_account_by_github_id,
    normalize_email,
    register_account,
)
from fittrack_api.services.federated_identity import FederatedIdentityResolver, ProviderProfile
from fittrack_api.services.github_oauth import GitHubOAuthClient, GitHubOAuthError
from fittrack_api.services.password_login import LoginResult, PasswordLogin
from fittrack_api.services.workout_stats import summarize_workouts

__all__ = [
    "account_detail_view",
    "account_exists",
    "apply_account_changes",
    "ensure_admin",
    "ensure_bootstrap_admin",
    "ensure_owner_or_admin",
    "ensure_role_change_allowed",
    "ensure_status_change_allowed",
    "ensure_workout_create_allowed",
    "ensure_workout_reassignment_allowed",
    "get_account_by_email",
    "get_account_by_github_id",
    "is_owner",
    "normalize_email",
    "public_account_view",
    "register_account",
    "workout_owner_scope",
    "workout_view",
    "FederatedIdentityResolver",
    "ProviderProfile",
    "GitHubOAuthClient",
    "GitHubOAuthError",
    "LoginResult",
    "PasswordLogin",
    "summarize_workouts",
]
