"""
User Repository: users 테이블 CRUD.

규칙:
- 모든 쿼리는 tenant_id 범위 안에서만 실행
- 삭제는 soft delete (is_active = 0)
- 목록 필터: username/email 부분 일치 (대소문자 무시), is_active 정확 일치
- 파라미터 바인딩만 사용 (문자열 결합은 컬럼/placeholder에 한정)
"""

import json
import logging
import sqlite3
from datetime import UTC, datetime
from typing import Any

from src.core.ids import generate_user_id
from src.domain.constants import USER_FILTER_FIELDS
from src.domain.errors import ErrorCodes, RepositoryError
from src.domain.schemas import User, UserStats
from src.repository.database import Database

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "id, tenant_id, username, email, full_name, password_hash, "
    "is_active, metadata, created_at, updated_at"
)


def _escape_like(value: str) -> str:
    """LIKE 와일드카드(%, _) 이스케이프."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_user(row: sqlite3.Row) -> User:
    metadata = json.loads(row["metadata"]) if row["metadata"] else None
    return User(
        id=row["id"],
        tenant_id=row["tenant_id"],
        username=row["username"],
        email=row["email"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        is_active=bool(row["is_active"]),
        metadata=metadata,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _dump_metadata(metadata: dict[str, Any] | None) -> str | None:
    return json.dumps(metadata, ensure_ascii=False) if metadata is not None else None


class UserRepository:
    """users 테이블 저장소."""

    def __init__(self, db: Database):
        self.db = db

    # =========================================================================
    # Create
    # =========================================================================

    def create_user(self, user: User) -> User:
        """
        사용자 생성.

        Args:
            user: 저장할 사용자 (id가 비어 있으면 UUID 발급)

        Returns:
            저장된 User

        Raises:
            RepositoryError: USER_INVALID, TENANT_NOT_FOUND, USER_EXISTS
        """
        with self.db.connection() as conn:
            self._validate_user(conn, user)

            now = datetime.now(UTC).isoformat()
            user.created_at = now
            user.updated_at = now

            try:
                conn.execute(
                    f"INSERT INTO users ({USER_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        user.id,
                        user.tenant_id,
                        user.username,
                        user.email,
                        user.full_name,
                        user.password_hash,
                        int(user.is_active),
                        _dump_metadata(user.metadata),
                        user.created_at,
                        user.updated_at,
                    ),
                )
            except sqlite3.IntegrityError as e:
                logger.error(f"Failed to create user {user.username} in tenant {user.tenant_id}: {e}")
                raise RepositoryError(
                    ErrorCodes.USER_EXISTS,
                    f"User '{user.username}' already exists",
                    tenant_id=user.tenant_id,
                    username=user.username,
                ) from e

        logger.info(f"Created user {user.username} ({user.id}) in tenant {user.tenant_id}")
        return user

    # =========================================================================
    # Read
    # =========================================================================

    def get_user_by_name(self, tenant_id: str, username: str) -> User:
        """
        Raises:
            RepositoryError: USER_NOT_FOUND
        """
        with self.db.connection() as conn:
            row = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE tenant_id = ? AND username = ?",
                (tenant_id, username),
            ).fetchone()

        if row is None:
            raise RepositoryError(
                ErrorCodes.USER_NOT_FOUND,
                f"User not found with username: {username}",
                tenant_id=tenant_id,
                username=username,
            )
        return _row_to_user(row)

    def get_user_by_id(self, tenant_id: str, user_id: str) -> User:
        """
        Raises:
            RepositoryError: USER_NOT_FOUND
        """
        with self.db.connection() as conn:
            row = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE tenant_id = ? AND id = ?",
                (tenant_id, user_id),
            ).fetchone()

        if row is None:
            raise RepositoryError(
                ErrorCodes.USER_NOT_FOUND,
                f"User not found with ID: {user_id}",
                tenant_id=tenant_id,
                user_id=user_id,
            )
        return _row_to_user(row)

    def list_users(self, tenant_id: str) -> list[User]:
        """tenant의 전체 사용자 (username 순)."""
        with self.db.connection() as conn:
            rows = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE tenant_id = ? ORDER BY username",
                (tenant_id,),
            ).fetchall()
        return [_row_to_user(row) for row in rows]

    def list_users_with_pagination(
        self,
        tenant_id: str,
        page: int,
        page_size: int,
        filters: dict[str, str] | None = None,
    ) -> tuple[list[User], int]:
        """
        페이지 단위 목록 + 전체 건수.

        Args:
            tenant_id: tenant ID
            page: 1부터 시작
            page_size: 페이지 크기
            filters: username, email (부분 일치), is_active ("true"/"false")
                     그 외 키나 값은 무시

        Returns:
            (users, total)
        """
        conditions = ["tenant_id = ?"]
        args: list[Any] = [tenant_id]

        for field, value in (filters or {}).items():
            if field not in USER_FILTER_FIELDS:
                continue
            if field == "is_active":
                if value in ("true", "false"):
                    conditions.append("is_active = ?")
                    args.append(1 if value == "true" else 0)
            else:
                conditions.append(f"{field} LIKE ? ESCAPE '\\'")
                args.append(f"%{_escape_like(value)}%")

        where_clause = " AND ".join(conditions)
        offset = (page - 1) * page_size

        with self.db.connection() as conn:
            total = conn.execute(
                f"SELECT COUNT(*) FROM users WHERE {where_clause}", args
            ).fetchone()[0]

            rows = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE {where_clause} "
                "ORDER BY username LIMIT ? OFFSET ?",
                [*args, page_size, offset],
            ).fetchall()

        return [_row_to_user(row) for row in rows], int(total)

    def count_users(self, tenant_id: str) -> UserStats:
        """전체/활성/비활성 사용자 수."""
        with self.db.connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS total, COALESCE(SUM(is_active), 0) AS active "
                "FROM users WHERE tenant_id = ?",
                (tenant_id,),
            ).fetchone()

        total = int(row["total"])
        active = int(row["active"])
        return UserStats(total_users=total, active_users=active, inactive_users=total - active)

    # =========================================================================
    # Update
    # =========================================================================

    def update_user(self, user: User) -> User:
        """
        사용자 갱신 (tenant_id + id 기준, username은 변경하지 않음).

        Raises:
            RepositoryError: USER_INVALID, TENANT_NOT_FOUND, USER_NOT_FOUND
        """
        with self.db.connection() as conn:
            self._validate_user(conn, user)
            user.updated_at = datetime.now(UTC).isoformat()

            cursor = conn.execute(
                "UPDATE users SET email = ?, full_name = ?, password_hash = ?, "
                "is_active = ?, metadata = ?, updated_at = ? "
                "WHERE tenant_id = ? AND id = ?",
                (
                    user.email,
                    user.full_name,
                    user.password_hash,
                    int(user.is_active),
                    _dump_metadata(user.metadata),
                    user.updated_at,
                    user.tenant_id,
                    user.id,
                ),
            )

        if cursor.rowcount == 0:
            raise RepositoryError(
                ErrorCodes.USER_NOT_FOUND,
                "user not found",
                tenant_id=user.tenant_id,
                user_id=user.id,
            )
        return user

    def set_active(self, tenant_id: str, user_id: str, active: bool) -> User:
        """
        활성/비활성 전환.

        Raises:
            RepositoryError: USER_NOT_FOUND
        """
        with self.db.connection() as conn:
            cursor = conn.execute(
                "UPDATE users SET is_active = ?, updated_at = ? WHERE tenant_id = ? AND id = ?",
                (int(active), datetime.now(UTC).isoformat(), tenant_id, user_id),
            )

        if cursor.rowcount == 0:
            raise RepositoryError(
                ErrorCodes.USER_NOT_FOUND,
                "user not found",
                tenant_id=tenant_id,
                user_id=user_id,
            )
        return self.get_user_by_id(tenant_id, user_id)

    # =========================================================================
    # Delete
    # =========================================================================

    def delete_user(self, tenant_id: str, user_id: str) -> None:
        """
        Soft delete (is_active = 0). 행은 남는다.

        Raises:
            RepositoryError: USER_NOT_FOUND
        """
        self.set_active(tenant_id, user_id, active=False)
        logger.info(f"Deactivated user {user_id} in tenant {tenant_id}")

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _validate_user(self, conn: sqlite3.Connection, user: User) -> None:
        """
        저장 전 검증. id가 비어 있으면 발급.

        Raises:
            RepositoryError: USER_INVALID, TENANT_NOT_FOUND
        """
        if not user.id:
            user.id = generate_user_id()

        if not user.tenant_id:
            raise RepositoryError(ErrorCodes.USER_INVALID, "tenant_id is required")

        exists = conn.execute(
            "SELECT 1 FROM tenants WHERE id = ?", (user.tenant_id,)
        ).fetchone()
        if exists is None:
            raise RepositoryError(
                ErrorCodes.TENANT_NOT_FOUND,
                "tenant_id does not exist",
                tenant_id=user.tenant_id,
            )

        for name in ("username", "email", "password_hash"):
            if not getattr(user, name):
                raise RepositoryError(ErrorCodes.USER_INVALID, f"{name} is required", field=name)
