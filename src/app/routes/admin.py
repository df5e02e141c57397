"""
Admin Routes (/api/v1/admin).

- GET  /users/stats              → 전체/활성/비활성 사용자 수
- POST /users/{id}/activate      → 활성화
- POST /users/{id}/deactivate    → 비활성화
"""

from fastapi import APIRouter

from src.core.flow import Flow, FlowContext, FlowResponse
from src.domain.errors import RepositoryError
from src.domain.schemas import ListUsersRequest, UserIdRequest
from src.repository import UserRepository

api_router = APIRouter()


def user_stats_action(ctx: FlowContext[ListUsersRequest]) -> FlowResponse:
    stats = UserRepository(ctx.database).count_users(ctx.tenant_id)
    return ctx.ok(stats)


def _set_active(ctx: FlowContext[UserIdRequest], active: bool) -> FlowResponse:
    user_id = ctx.params.id
    try:
        UserRepository(ctx.database).set_active(ctx.tenant_id, user_id, active)
    except RepositoryError:
        ctx.error_not_found(f"User not found with ID: {user_id}")

    status = "active" if active else "inactive"
    return ctx.ok(
        {"user_id": user_id, "status": status},
        message=f"User {'activated' if active else 'deactivated'} successfully",
    )


def activate_user_action(ctx: FlowContext[UserIdRequest]) -> FlowResponse:
    return _set_active(ctx, True)


def deactivate_user_action(ctx: FlowContext[UserIdRequest]) -> FlowResponse:
    return _set_active(ctx, False)


user_stats = (
    Flow("AdminUserStats", ListUsersRequest)
    .action("user_stats", user_stats_action)
    .as_handler()
)

activate_user = (
    Flow("AdminActivateUser", UserIdRequest)
    .validate_required("id")
    .action("activate_user", activate_user_action)
    .as_handler()
)

deactivate_user = (
    Flow("AdminDeactivateUser", UserIdRequest)
    .validate_required("id")
    .action("deactivate_user", deactivate_user_action)
    .as_handler()
)

api_router.add_api_route("/users/stats", user_stats, methods=["GET"])
api_router.add_api_route("/users/{id}/activate", activate_user, methods=["POST"])
api_router.add_api_route("/users/{id}/deactivate", deactivate_user, methods=["POST"])
