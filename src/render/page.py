"""
Page Content: 렌더 결과 envelope + 렌더 옵션 + 페이지 핸들러 헬퍼.

- PageContent: 요청 1회 렌더 결과 (생성 후 불변)
- PageOptions: 호출자가 넘기는 렌더 옵션 (렌더 1회 범위)
- RenderControl: 렌더 동작 스위치 (표시용 meta 태그와 분리)
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from fastapi import Request
from fastapi.responses import HTMLResponse
from markupsafe import escape

from src.domain.constants import (
    HTMX_REQUEST_HEADER,
    HTMX_REQUEST_TRUE,
    META_FULL_LAYOUT,
    META_MAIN_LAYOUT,
    RESERVED_META_KEYS,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Render Control
# =============================================================================

@dataclass(frozen=True)
class RenderControl:
    """
    렌더 동작 스위치.

    full_layout:
        False → header와 무관하게 fragment만 렌더
        True  → HX-Request여도 전체 문서 렌더
        None  → HX-Request header로 결정
    layout_override: 이번 렌더에만 쓸 레이아웃 이름
    """
    full_layout: bool | None = None
    layout_override: str | None = None

    @classmethod
    def from_meta_tags(cls, meta_tags: Mapping[str, str] | None) -> "RenderControl":
        """예약 meta 키("full_layout", "main_layout")를 RenderControl로 변환."""
        if not meta_tags:
            return cls()

        full_layout = None
        raw = meta_tags.get(META_FULL_LAYOUT)
        if raw == "false":
            full_layout = False
        elif raw == "true":
            full_layout = True

        return cls(
            full_layout=full_layout,
            layout_override=meta_tags.get(META_MAIN_LAYOUT) or None,
        )

    def merged_over(self, fallback: "RenderControl") -> "RenderControl":
        """self에 값이 없는 항목만 fallback으로 채움."""
        return RenderControl(
            full_layout=self.full_layout if self.full_layout is not None else fallback.full_layout,
            layout_override=self.layout_override or fallback.layout_override,
        )


# =============================================================================
# Page Options / Page Content
# =============================================================================

@dataclass
class PageOptions:
    """렌더 옵션 (렌더 호출 1회 범위)."""
    title: str = ""
    current_page: str = ""
    scripts: list[str] = field(default_factory=list)
    styles: list[str] = field(default_factory=list)
    custom_css: str = ""
    meta_tags: dict[str, str] = field(default_factory=dict)
    sidebar_data: Any = None
    control: RenderControl | None = None

    def render_control(self) -> RenderControl:
        """명시적 control 우선, 없으면 예약 meta 키에서 읽음."""
        from_meta = RenderControl.from_meta_tags(self.meta_tags)
        if self.control is None:
            return from_meta
        return self.control.merged_over(from_meta)

    def display_meta_tags(self) -> dict[str, str]:
        """<meta>로 출력할 태그 (예약 키 제외)."""
        return {k: v for k, v in self.meta_tags.items() if k not in RESERVED_META_KEYS}


@dataclass(frozen=True)
class PageContent:
    """
    렌더 결과 envelope.

    html은 해당 요청의 최종 응답이며 이후 변경되지 않는다.
    title/current_page/meta_tags/sidebar_data/scripts/styles/custom_css는
    PageOptions 값을 그대로 echo (page_handler에서 레이아웃을 다시 입힐 때 사용).
    """
    html: str
    title: str = ""
    description: str = ""
    meta_tags: Mapping[str, str] = field(default_factory=dict)
    current_page: str = ""
    sidebar_data: Any = None
    scripts: tuple[str, ...] = ()
    styles: tuple[str, ...] = ()
    custom_css: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "meta_tags", MappingProxyType(dict(self.meta_tags)))
        object.__setattr__(self, "scripts", tuple(self.scripts))
        object.__setattr__(self, "styles", tuple(self.styles))

    @classmethod
    def from_options(cls, html: str, options: PageOptions) -> "PageContent":
        return cls(
            html=html,
            title=options.title,
            description=options.meta_tags.get("description", ""),
            meta_tags=options.meta_tags,
            current_page=options.current_page,
            sidebar_data=options.sidebar_data,
            scripts=tuple(options.scripts),
            styles=tuple(options.styles),
            custom_css=options.custom_css,
        )


# =============================================================================
# Request Helpers
# =============================================================================

def is_htmx_request(request: Any) -> bool:
    """
    HTMX 부분 갱신 요청 여부.

    request는 headers 매핑을 가진 객체 (starlette Request 등). None이면 False.
    """
    if request is None:
        return False
    return request.headers.get(HTMX_REQUEST_HEADER) == HTMX_REQUEST_TRUE


def render_partial_content(page: PageContent) -> str:
    """HTMX 요청용: 콘텐츠만 반환."""
    return page.html


def render_full_page(
    page: PageContent,
    render_template: Callable[[PageContent], str],
) -> str:
    """
    레이아웃 포함 전체 페이지 렌더.

    render_template 실패 시 에러 문서를 반환 (예외 전파 없음).
    """
    try:
        return render_template(page)
    except Exception as e:
        logger.error(f"Template execution error: {e}", exc_info=True)
        return (
            "<html><body><h1>Template Execution Error</h1>"
            f"<p>{escape(str(e))}</p></body></html>"
        )


ContentFunc = Callable[[Request], PageContent | Awaitable[PageContent]]


def page_handler(
    content_func: ContentFunc,
    render_template: Callable[[PageContent], str],
) -> Callable[[Request], Awaitable[HTMLResponse]]:
    """
    전체 페이지/HTMX 요청을 같은 방식으로 처리하는 FastAPI endpoint 생성.

    content_func가 던진 예외는 그대로 전파 (상위 exception handler 담당).

    Args:
        content_func: request → PageContent (sync/async 모두 허용)
        render_template: PageContent → 전체 HTML

    Returns:
        FastAPI endpoint
    """

    async def endpoint(request: Request) -> HTMLResponse:
        result = content_func(request)
        page = await result if inspect.isawaitable(result) else result

        if is_htmx_request(request):
            return HTMLResponse(content=render_partial_content(page))
        return HTMLResponse(content=render_full_page(page, render_template))

    return endpoint
