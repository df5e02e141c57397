"""
Application Services.

역할:
- dashboard: 대시보드/활동/프로젝트 화면 데이터
"""

from .dashboard import build_dashboard, project_stats, recent_activities

__all__ = [
    "build_dashboard",
    "recent_activities",
    "project_stats",
]
