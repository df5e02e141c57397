"""
Dashboard Routes: 관리자 대시보드 화면.

페이지 (전체 문서, HX-Request면 fragment):
- GET /            → 대시보드
- GET /users       → 사용자 관리
- GET /analytics   → 분석
- GET /projects    → 프로젝트
- GET /settings    → 설정

Partial (항상 fragment, HTMX hx-get 대상):
- GET /api/users     → 사용자 테이블
- GET /api/activity  → 최근 활동
"""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from src.app.services.dashboard import (
    ADMIN_USER,
    build_dashboard,
    project_stats,
    recent_activities,
)
from src.domain.constants import DEFAULT_PAGE_SIZE
from src.render import MainLayoutPage, PageContent, PageOptions, RenderControl, page_handler
from src.repository import UserRepository

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # HTMX partials

FRAGMENT = RenderControl(full_layout=False)


def _main_layout(request: Request) -> MainLayoutPage:
    return request.app.state.main_layout


def _users(request: Request) -> UserRepository:
    return UserRepository(request.app.state.database)


def _page_options(title: str, current_page: str, **kwargs: Any) -> PageOptions:
    return PageOptions(
        title=title,
        current_page=current_page,
        sidebar_data={"user": ADMIN_USER},
        **kwargs,
    )


# =============================================================================
# Page Routes (HTML)
# =============================================================================

@router.get("/", response_class=HTMLResponse)
async def dashboard_page(request: Request) -> HTMLResponse:
    """대시보드 화면."""
    stats = _users(request).count_users(request.app.state.tenant_id)
    page = _main_layout(request).render_page(
        request,
        "dashboard",
        build_dashboard(stats),
        _page_options(
            "Dashboard",
            "dashboard",
            meta_tags={"description": "Lokstra admin dashboard overview"},
        ),
    )
    return HTMLResponse(content=page.html)


@router.get("/users", response_class=HTMLResponse)
async def users_page(request: Request) -> HTMLResponse:
    """사용자 관리 화면 (테이블은 /api/users로 지연 로드)."""
    page = _main_layout(request).render_page(
        request, "users", options=_page_options("Users", "users")
    )
    return HTMLResponse(content=page.html)


@router.get("/analytics", response_class=HTMLResponse)
async def analytics_page(request: Request) -> HTMLResponse:
    page = _main_layout(request).render_page(
        request, "analytics", options=_page_options("Analytics", "analytics")
    )
    return HTMLResponse(content=page.html)


@router.get("/projects", response_class=HTMLResponse)
async def projects_page(request: Request) -> HTMLResponse:
    page = _main_layout(request).render_page(
        request,
        "projects",
        {"stats": project_stats()},
        _page_options("Projects", "projects"),
    )
    return HTMLResponse(content=page.html)


def settings_content(request: Request) -> PageContent:
    """설정 화면 콘텐츠 (레이아웃 적용은 page_handler가 결정)."""
    config = request.app.state.config
    return _main_layout(request).render_page(
        request,
        "settings",
        {
            "app_name": config["app"]["name"],
            "admin_email": "admin@example.com",
        },
        _page_options("Settings", "settings", control=FRAGMENT),
    )


@router.get("/settings", response_class=HTMLResponse)
async def settings_page(request: Request) -> HTMLResponse:
    """설정 화면: 콘텐츠 함수 + 레이아웃 함수 조합."""
    endpoint = page_handler(settings_content, _main_layout(request).render_template)
    return await endpoint(request)


# =============================================================================
# Partial Routes (HTMX)
# =============================================================================

@api_router.get("/users", response_class=HTMLResponse)
async def users_table_partial(request: Request) -> HTMLResponse:
    """사용자 테이블 (첫 페이지)."""
    users, total = _users(request).list_users_with_pagination(
        request.app.state.tenant_id, 1, DEFAULT_PAGE_SIZE
    )
    page = _main_layout(request).render_page(
        request,
        "users_table",
        {"users": users, "total": total},
        PageOptions(control=FRAGMENT),
    )
    return HTMLResponse(content=page.html)


@api_router.get("/activity", response_class=HTMLResponse)
async def activity_partial(request: Request) -> HTMLResponse:
    """최근 활동 목록."""
    page = _main_layout(request).render_page(
        request,
        "activity_list",
        {"activities": recent_activities()},
        PageOptions(control=FRAGMENT),
    )
    return HTMLResponse(content=page.html)
