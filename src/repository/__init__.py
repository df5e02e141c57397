"""
Repository layer: SQLite 저장소.

역할:
- 연결/스키마 초기화 (database.py)
- users CRUD + 페이지네이션 (user_repo.py)
"""

from .database import Database
from .user_repo import UserRepository

__all__ = [
    "Database",
    "UserRepository",
]
