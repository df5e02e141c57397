"""
Users Routes: 사용자 관리 JSON API (/api/v1/users).

- POST   /                     → 사용자 생성 (JSON 또는 form)
- GET    /                     → 목록 (page, page_size, filter[field])
- GET    /by-name/{username}   → username으로 조회
- GET    /{id}                 → ID로 조회
- PUT    /{id}                 → 갱신 (값이 있는 필드만)
- DELETE /{id}                 → soft delete

모든 핸들러는 Flow 파이프라인으로 구성 (바인딩 → 검증 → 액션).
"""

import logging

from fastapi import APIRouter

from src.core.flow import FieldValidator, Flow, FlowContext, FlowResponse, email, min_length
from src.core.passwords import hash_password
from src.domain.errors import ErrorCodes, RepositoryError
from src.domain.schemas import (
    CreateUserRequest,
    GetUserByNameRequest,
    ListUsersRequest,
    UpdateUserRequest,
    User,
    UserIdRequest,
)
from src.repository import UserRepository

logger = logging.getLogger(__name__)

api_router = APIRouter()


def _repo(ctx: FlowContext) -> UserRepository:
    return UserRepository(ctx.database)


# =============================================================================
# Actions
# =============================================================================

def create_user_action(ctx: FlowContext[CreateUserRequest]) -> FlowResponse:
    """DTO → User 매핑 후 저장."""
    params = ctx.params
    user = User(
        username=params.username,
        email=params.email,
        full_name=params.full_name,
        metadata=params.metadata,
        is_active=bool(params.is_active),
        tenant_id=ctx.tenant_id,
    )
    user.password_hash = hash_password(params.password)

    try:
        created = _repo(ctx).create_user(user)
    except RepositoryError as e:
        if e.code == ErrorCodes.USER_EXISTS:
            ctx.error_conflict(e.message)
        if e.code in (ErrorCodes.USER_INVALID, ErrorCodes.TENANT_NOT_FOUND):
            ctx.error_bad_request(e.message)
        logger.error(f"Failed to create user {params.username}: {e}")
        ctx.error_internal("Failed to create user")

    return ctx.created(created)


def update_user_action(ctx: FlowContext[UpdateUserRequest]) -> FlowResponse:
    """기존 사용자를 읽고 값이 있는 필드만 덮어씀."""
    params = ctx.params
    repo = _repo(ctx)

    try:
        user = repo.get_user_by_id(ctx.tenant_id, params.id)
    except RepositoryError:
        ctx.error_not_found("User not found")

    if params.email:
        user.email = params.email
    if params.full_name:
        user.full_name = params.full_name
    if params.password:
        user.password_hash = hash_password(params.password)
    if params.is_active is not None:
        user.is_active = params.is_active
    if params.metadata is not None:
        user.metadata = params.metadata

    try:
        updated = repo.update_user(user)
    except RepositoryError as e:
        if e.code == ErrorCodes.USER_NOT_FOUND:
            ctx.error_not_found("User not found")
        logger.error(f"Failed to update user {params.id}: {e}")
        ctx.error_internal("Failed to update user")

    return ctx.ok(updated)


def delete_user_action(ctx: FlowContext[UserIdRequest]) -> FlowResponse:
    try:
        _repo(ctx).delete_user(ctx.tenant_id, ctx.params.id)
    except RepositoryError:
        ctx.error_not_found(f"User not found with ID: {ctx.params.id}")
    return ctx.ok(message="User deleted")


def list_users_action(ctx: FlowContext[ListUsersRequest]) -> FlowResponse:
    pagination = ctx.pagination
    if pagination is None:
        ctx.error_internal("Pagination context not found")

    try:
        users, total = _repo(ctx).list_users_with_pagination(
            ctx.tenant_id, pagination.page, pagination.page_size, pagination.filter
        )
    except RepositoryError as e:
        logger.error(f"Failed to list users: {e}")
        ctx.error_internal("Failed to retrieve users")

    return ctx.paginated_ok(users, total)


def get_user_by_name_action(ctx: FlowContext[GetUserByNameRequest]) -> FlowResponse:
    username = ctx.params.username
    try:
        user = _repo(ctx).get_user_by_name(ctx.tenant_id, username)
    except RepositoryError:
        ctx.error_not_found(f"User not found with username: {username}")
    return ctx.ok(user)


def get_user_by_id_action(ctx: FlowContext[UserIdRequest]) -> FlowResponse:
    user_id = ctx.params.id
    try:
        user = _repo(ctx).get_user_by_id(ctx.tenant_id, user_id)
    except RepositoryError:
        ctx.error_not_found(f"User not found with ID: {user_id}")
    return ctx.ok(user)


# =============================================================================
# Handlers
# =============================================================================

create_user = (
    Flow("CreateNewUser", CreateUserRequest)
    .validate_required("username", "email", "password")
    .validate_request([FieldValidator("email", [email()])])
    .action("create_user", create_user_action)
    .as_handler(smart=True)
)

update_user = (
    Flow("UpdateUser", UpdateUserRequest)
    .validate_required("id")
    .validate_request([
        FieldValidator("email", [email()]),
        FieldValidator("password", [min_length(8)]),
    ])
    .action("update_user", update_user_action)
    .as_handler(smart=True)
)

delete_user = (
    Flow("DeleteUser", UserIdRequest)
    .validate_required("id")
    .action("delete_user", delete_user_action)
    .as_handler(smart=True)
)

list_users = (
    Flow("ListUsers", ListUsersRequest)
    .pagination_query()
    .action("list_users", list_users_action)
    .as_handler()
)

get_user_by_name = (
    Flow("GetUserByName", GetUserByNameRequest)
    .validate_required("username")
    .action("get_user_by_name", get_user_by_name_action)
    .as_handler()
)

get_user_by_id = (
    Flow("GetUserByID", UserIdRequest)
    .validate_required("id")
    .action("get_user_by_id", get_user_by_id_action)
    .as_handler()
)

api_router.add_api_route("", create_user, methods=["POST"], status_code=201)
api_router.add_api_route("", list_users, methods=["GET"])
api_router.add_api_route("/by-name/{username}", get_user_by_name, methods=["GET"])
api_router.add_api_route("/{id}", get_user_by_id, methods=["GET"])
api_router.add_api_route("/{id}", update_user, methods=["PUT"])
api_router.add_api_route("/{id}", delete_user, methods=["DELETE"])
