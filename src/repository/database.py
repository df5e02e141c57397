"""
SQLite 연결 + 스키마 초기화.

규칙:
- 연결은 작업 단위로 열고 닫음 (요청 간 공유 상태 없음)
- 스키마 초기화는 파일 락으로 보호 (여러 worker 동시 기동)
"""

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from src.domain.constants import DEFAULT_TENANT_ID
from src.domain.errors import ErrorCodes, RepositoryError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS tenants (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    tenant_id TEXT NOT NULL REFERENCES tenants(id),
    username TEXT NOT NULL,
    email TEXT NOT NULL,
    full_name TEXT NOT NULL DEFAULT '',
    password_hash TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 0,
    metadata TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (tenant_id, username)
);

CREATE INDEX IF NOT EXISTS idx_users_tenant_username ON users (tenant_id, username);
"""


class Database:
    """
    SQLite 데이터베이스 핸들.

    Usage:
        db = Database(Path("data/app.db"))
        db.initialize()
        with db.connection() as conn:
            conn.execute("SELECT 1")
    """

    # 락 timeout (초)
    LOCK_TIMEOUT = 10.0

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock_path = self.path.with_name(self.path.name + ".lock")

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        작업 단위 연결: 정상 종료 시 commit, 예외 시 rollback.

        Yields:
            sqlite3.Connection (row_factory=sqlite3.Row)
        """
        conn = self.connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self, default_tenant: str = DEFAULT_TENANT_ID) -> None:
        """
        스키마 생성 + 기본 tenant seed (멱등).

        Raises:
            RepositoryError: DB_LOCK_TIMEOUT
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(self._lock_path, timeout=self.LOCK_TIMEOUT)

        try:
            with lock:
                with self.connection() as conn:
                    conn.executescript(SCHEMA)
                    conn.execute(
                        "INSERT OR IGNORE INTO tenants (id, name) VALUES (?, ?)",
                        (default_tenant, default_tenant.title()),
                    )
        except Timeout:
            raise RepositoryError(
                ErrorCodes.DB_LOCK_TIMEOUT,
                f"Failed to acquire schema lock for '{self.path}'",
                path=str(self.path),
                timeout=self.LOCK_TIMEOUT,
            ) from None

        logger.info(f"Database ready at {self.path}")

    def add_tenant(self, tenant_id: str, name: str = "") -> None:
        """tenant 추가 (이미 있으면 무시)."""
        with self.connection() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO tenants (id, name) VALUES (?, ?)",
                (tenant_id, name or tenant_id),
            )
