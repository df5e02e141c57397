"""
Data schemas for the web examples.

규칙:
- 필드명 통일: JSON 키와 동일한 snake_case
- password_hash는 to_dict()에 절대 포함하지 않음
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator

# =============================================================================
# User Management
# =============================================================================


@dataclass
class User:
    """사용자 엔티티 (users 테이블 행)."""
    username: str
    email: str
    tenant_id: str = ""
    id: str = ""
    full_name: str = ""
    password_hash: str = ""
    is_active: bool = False
    metadata: dict[str, Any] | None = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용 (password_hash 제외)."""
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "is_active": self.is_active,
            "metadata": self.metadata,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class UserStats:
    """테넌트별 사용자 집계."""
    total_users: int = 0
    active_users: int = 0
    inactive_users: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_users": self.total_users,
            "active_users": self.active_users,
            "inactive_users": self.inactive_users,
        }


# =============================================================================
# Request DTOs (Flow 바인딩 대상, pydantic)
# =============================================================================


def _json_object(value: Any) -> Any:
    """form으로 들어온 JSON 문자열 → dict (나머지는 pydantic 검증에 맡김)."""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


JsonObject = Annotated[dict[str, Any] | None, BeforeValidator(_json_object)]


class CreateUserRequest(BaseModel):
    """POST /api/v1/users."""
    username: str = ""
    email: str = ""
    password: str = ""
    full_name: str = ""
    is_active: bool | None = None
    metadata: JsonObject = None


class UpdateUserRequest(BaseModel):
    """PUT /api/v1/users/{id}. 값이 있는 필드만 갱신."""
    id: str = ""
    email: str = ""
    password: str = ""
    full_name: str = ""
    is_active: bool | None = None
    metadata: JsonObject = None


class UserIdRequest(BaseModel):
    """path의 {id}만 받는 요청 (get/delete/activate/deactivate)."""
    id: str = ""


class GetUserByNameRequest(BaseModel):
    """GET /api/v1/users/by-name/{username}."""
    username: str = ""


class ListUsersRequest(BaseModel):
    """목록 조회. 페이지네이션은 query에서 별도 바인딩."""


# =============================================================================
# Dashboard
# =============================================================================


@dataclass
class DashboardUser:
    """대시보드 상단 사용자 정보."""
    name: str
    role: str
    avatar: str = ""


@dataclass
class Stat:
    """통계 카드."""
    title: str
    value: str
    change: str
    icon: str
    type: str  # positive, negative, neutral


@dataclass
class Activity:
    """최근 활동 항목."""
    title: str
    description: str
    time: datetime
    type: str
    icon: str


@dataclass
class BreadcrumbItem:
    """breadcrumb 네비게이션."""
    title: str
    url: str = ""
    active: bool = False


@dataclass
class Dashboard:
    """대시보드 페이지 데이터."""
    title: str
    subtitle: str
    user: DashboardUser
    stats: list[Stat] = field(default_factory=list)
    activities: list[Activity] = field(default_factory=list)
    breadcrumb: list[BreadcrumbItem] = field(default_factory=list)
