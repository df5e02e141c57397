"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.app.config import (
    DEFAULT_CONFIG,
    PROJECT_ROOT,
    configure_logging,
    load_config,
    merge_config,
    resolve_path,
)
from src.app.routes import admin, auth, dashboard, users
from src.render import MainLayoutPage, PageOptions, TemplateLoader, default_embedded
from src.repository import Database

logger = logging.getLogger(__name__)

NOT_FOUND_PAGE = "not_found"


def create_app(config: dict[str, Any] | None = None) -> FastAPI:
    """
    앱 생성.

    Args:
        config: 설정 dict (None이면 load_config(), 일부 키만 넘기면 기본값과 병합)
    """
    config = merge_config(DEFAULT_CONFIG, config) if config is not None else load_config()

    # =========================================================================
    # Lifespan
    # =========================================================================

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        애플리케이션 생명주기 관리.

        시작 시: 로깅, DB 스키마, 레이아웃 렌더러 초기화
        """
        configure_logging(config["logging"]["level"])

        tenant_id = config["tenant"]["default_id"]
        database = Database(resolve_path(config["database"]["path"]))
        database.initialize(tenant_id)

        render_config = config["render"]
        embedded = default_embedded() if render_config["use_embedded_fallback"] else None
        loader = TemplateLoader.from_root(
            resolve_path(render_config["templates_root"]), embedded=embedded
        )

        app.state.config = config
        app.state.tenant_id = tenant_id
        app.state.database = database
        app.state.main_layout = MainLayoutPage(name=render_config["main_layout"], loader=loader)

        logger.info(f"{config['app']['name']} started (templates: {loader.layout_dir.parent})")
        yield

    app = FastAPI(
        title="Lokstra Web Examples",
        description="관리자 대시보드 + 사용자 관리 API (서버 렌더 HTML + HTMX)",
        version=str(config["app"]["version"]),
        lifespan=lifespan,
    )

    # Static files (CSS, JS)
    static_dir = PROJECT_ROOT / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    # =========================================================================
    # Routes
    # =========================================================================

    # 페이지 라우트 (HTML)
    app.include_router(dashboard.router, prefix="", tags=["Dashboard"])
    app.include_router(dashboard.api_router, prefix="/api", tags=["Dashboard Partials"])

    # API 라우트 (JSON)
    app.include_router(users.api_router, prefix="/api/v1/users", tags=["Users API"])
    app.include_router(auth.api_router, prefix="/api/v1/auth", tags=["Auth API"])
    app.include_router(admin.api_router, prefix="/api/v1/admin", tags=["Admin API"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {
            "status": "ok",
            "service": config["app"]["name"],
            "timestamp": datetime.now(UTC).isoformat(),
            "version": str(config["app"]["version"]),
        }

    @app.exception_handler(StarletteHTTPException)
    async def not_found_page(request: Request, exc: StarletteHTTPException) -> Response:
        """화면 경로의 404는 레이아웃 포함 HTML, API 경로는 기본 JSON."""
        if exc.status_code != 404 or request.url.path.startswith("/api"):
            return await http_exception_handler(request, exc)

        page = request.app.state.main_layout.render_page(
            request,
            NOT_FOUND_PAGE,
            options=PageOptions(title="Page not found", current_page=""),
        )
        return HTMLResponse(content=page.html, status_code=404)

    return app


# =============================================================================
# App Instance
# =============================================================================

app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
