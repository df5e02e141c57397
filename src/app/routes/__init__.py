"""
FastAPI Routes.

페이지 라우트 (HTML, 전체 문서/HTMX fragment) + JSON API 라우트 (/api/v1)
"""

from . import admin, auth, dashboard, users

__all__ = ["admin", "auth", "dashboard", "users"]
