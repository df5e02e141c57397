#!/usr/bin/env python3
"""
seed_users.py - 데모 사용자 생성 스크립트

default.yaml의 database.path / tenant.default_id 설정에 따라:
1. 스키마 초기화 (없으면 생성)
2. 데모 사용자 생성 (이미 있는 username은 건너뜀)

사용법:
    # 기본 실행 (dry-run)
    uv run python scripts/seed_users.py

    # 실제 생성
    uv run python scripts/seed_users.py --execute

    # 다른 DB 파일
    uv run python scripts/seed_users.py --db data/demo.db --execute
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

# 프로젝트 루트를 path에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.app.config import load_config, resolve_path
from src.core.passwords import hash_password
from src.domain.errors import ErrorCodes, RepositoryError
from src.domain.schemas import User
from src.repository import Database, UserRepository

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

DEMO_PASSWORD = "changeme123"

# (username, email, full_name, is_active)
DEMO_USERS = [
    ("admin", "admin@example.com", "Administrator", True),
    ("john.doe", "john.doe@example.com", "John Doe", True),
    ("jane.smith", "jane.smith@example.com", "Jane Smith", True),
    ("bob.wilson", "bob.wilson@example.com", "Bob Wilson", False),
]


@dataclass
class SeedResult:
    """Seed 결과."""
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def seed_users(
    db: Database,
    tenant_id: str,
    execute: bool,
    password: str = DEMO_PASSWORD,
) -> SeedResult:
    """
    데모 사용자 생성.

    Args:
        db: 초기화된 Database
        tenant_id: 대상 tenant
        execute: False면 생성하지 않고 로그만 출력
        password: 모든 데모 사용자의 비밀번호

    Returns:
        SeedResult
    """
    repo = UserRepository(db)
    result = SeedResult()

    existing = {user.username for user in repo.list_users(tenant_id)}

    for username, email, full_name, is_active in DEMO_USERS:
        if username in existing:
            logger.info(f"건너뜀 (이미 존재): {username}")
            result.skipped.append(username)
            continue

        if not execute:
            logger.info(f"[DRY-RUN] 생성 예정: {username} <{email}>")
            result.created.append(username)
            continue

        user = User(
            username=username,
            email=email,
            full_name=full_name,
            is_active=is_active,
            tenant_id=tenant_id,
            password_hash=hash_password(password),
        )
        try:
            repo.create_user(user)
        except RepositoryError as e:
            if e.code != ErrorCodes.USER_EXISTS:
                raise
            result.skipped.append(username)
            continue

        logger.info(f"생성됨: {username} ({user.id})")
        result.created.append(username)

    return result


def main() -> int:
    parser = argparse.ArgumentParser(description="데모 사용자 생성")
    parser.add_argument("--config", type=Path, help="설정 파일 (기본: default.yaml)")
    parser.add_argument("--db", type=Path, help="DB 파일 (기본: database.path)")
    parser.add_argument("--execute", action="store_true", help="실제 생성 (기본: dry-run)")
    args = parser.parse_args()

    config = load_config(args.config)
    db_path = args.db or resolve_path(config["database"]["path"])
    tenant_id = config["tenant"]["default_id"]

    db = Database(db_path)
    db.initialize(tenant_id)

    result = seed_users(db, tenant_id, execute=args.execute)

    mode = "실행" if args.execute else "DRY-RUN"
    logger.info(f"[{mode}] 생성 {len(result.created)}명, 건너뜀 {len(result.skipped)}명")
    return 0


if __name__ == "__main__":
    sys.exit(main())
