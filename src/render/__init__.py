"""
Render layer: 서버 렌더 HTML (Jinja2 + HTMX).

역할:
- 템플릿 해석: 프로젝트 → embedded fallback cascade (loader.py)
- 페이지 렌더: 전체 문서 vs HTMX fragment (layout.py)
- 렌더 결과/옵션, 페이지 핸들러 헬퍼 (page.py)

주의: 폴더 구분
- src/render/defaults/ → embedded 기본 템플릿 (패키지 데이터)
- templates/ (루트) → 프로젝트 템플릿 (override)
"""

from .layout import MainLayoutPage, error_marker, page_template_name
from .loader import CascadeLoader, TemplateLoader, default_embedded
from .page import (
    PageContent,
    PageOptions,
    RenderControl,
    is_htmx_request,
    page_handler,
    render_full_page,
    render_partial_content,
)

__all__ = [
    # loader
    "TemplateLoader",
    "CascadeLoader",
    "default_embedded",
    # layout
    "MainLayoutPage",
    "error_marker",
    "page_template_name",
    # page
    "PageContent",
    "PageOptions",
    "RenderControl",
    "is_htmx_request",
    "page_handler",
    "render_full_page",
    "render_partial_content",
]
