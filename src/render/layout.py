"""
Main Layout: 페이지 렌더 (전체 문서 vs HTMX fragment).

결정 규칙:
- 기본: 전체 문서 (layout + sidebar + page content)
- HX-Request: true → fragment (page content만)
- RenderControl.full_layout(또는 meta "full_layout")이 있으면 header보다 우선

실패 정책 ("always respond"):
- 템플릿 해석/읽기/파싱/실행 실패는 예외가 아니라 inline HTML 에러 마커로 렌더
- 레이아웃 실패 시에도 page content는 마커 뒤에 그대로 붙여 유실하지 않음
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from markupsafe import Markup, escape

from src.domain.constants import SIDEBAR_TEMPLATE, TEMPLATE_SUFFIX
from src.domain.errors import ErrorCodes, RenderError, TemplateNotFoundError
from src.render.loader import TemplateLoader
from src.render.page import PageContent, PageOptions, is_htmx_request

# 에러 코드 → 마커 라벨 접미사
ERROR_LABELS = {
    ErrorCodes.TEMPLATE_SYNTAX_ERROR: "syntax error",
    ErrorCodes.TEMPLATE_READ_FAILED: "read error",
    ErrorCodes.TEMPLATE_EXECUTION_FAILED: "execution error",
}


def error_marker(label: str, detail: str) -> str:
    """화면에 보이는 inline 에러 마커."""
    return f'<div class="render-error">{escape(label)}: {escape(detail)}</div>'


def render_error_marker(kind: str, error: RenderError) -> str:
    """RenderError → 마커 ("Template syntax error: ...", "Layout read error: ...")."""
    label = ERROR_LABELS.get(error.code, "execution error")
    return error_marker(f"{kind} {label}", error.message)


def page_template_name(template_name: str) -> str:
    """논리 페이지 이름 → 파일 이름 ("users" → "users.html")."""
    if template_name.endswith(TEMPLATE_SUFFIX):
        return template_name
    return template_name + TEMPLATE_SUFFIX


@dataclass(frozen=True)
class MainLayoutPage:
    """
    레이아웃 이름 + TemplateLoader 묶음 (불변).

    레이아웃 변경은 with_layout()으로 새 인스턴스를 만들거나,
    렌더 1회에 한해 RenderControl.layout_override로 지정한다.
    """
    name: str
    loader: TemplateLoader

    def with_layout(self, name: str) -> "MainLayoutPage":
        return replace(self, name=name)

    # =========================================================================
    # Render
    # =========================================================================

    def render_page(
        self,
        request: Any,
        template_name: str,
        data: Any = None,
        options: PageOptions | None = None,
    ) -> PageContent:
        """
        페이지 렌더.

        Args:
            request: headers 매핑을 가진 요청 객체 (None 허용)
            template_name: 페이지 이름 ("users" 또는 "users.html")
            data: 페이지 템플릿에 그대로 전달되는 데이터
            options: 렌더 옵션

        Returns:
            PageContent (템플릿 문제로 예외를 던지지 않음)
        """
        options = options or PageOptions()
        control = options.render_control()

        full_layout = not is_htmx_request(request)
        if control.full_layout is not None:
            full_layout = control.full_layout

        content_html = self.render_content(template_name, data)

        if full_layout:
            layout_name = control.layout_override or self.name
            html = self.render_layout(layout_name, content_html, options)
        else:
            html = content_html

        return PageContent.from_options(html, options)

    def render_template(self, page: PageContent) -> str:
        """
        이미 렌더된 PageContent를 레이아웃으로 감싼다.

        page_handler()의 render_template 인자로 사용.
        """
        options = PageOptions(
            title=page.title,
            current_page=page.current_page,
            scripts=list(page.scripts),
            styles=list(page.styles),
            custom_css=page.custom_css,
            meta_tags=dict(page.meta_tags),
            sidebar_data=page.sidebar_data,
        )
        control = options.render_control()
        return self.render_layout(control.layout_override or self.name, page.html, options)

    def render_content(self, template_name: str, data: Any = None) -> str:
        """페이지 콘텐츠 템플릿만 렌더 (실패 시 에러 마커)."""
        name = page_template_name(template_name)

        context: dict[str, Any] = {"data": data}
        if isinstance(data, Mapping):
            context.update(data)

        try:
            return self.loader.render(name, context)
        except TemplateNotFoundError:
            return error_marker("Template not found", name)
        except RenderError as e:
            return render_error_marker("Template", e)

    def render_sidebar(self, options: PageOptions) -> str:
        """sidebar partial 렌더. 없으면 빈 문자열."""
        context = {
            "title": options.title,
            "current_page": options.current_page,
            "sidebar_data": options.sidebar_data,
        }
        try:
            return self.loader.render(SIDEBAR_TEMPLATE, context)
        except TemplateNotFoundError:
            return ""
        except RenderError as e:
            return render_error_marker("Sidebar", e)

    def render_layout(self, layout_name: str, content_html: str, options: PageOptions) -> str:
        """레이아웃에 content를 주입 (실패 시 에러 마커 + content)."""
        layout_context = {
            "title": options.title,
            "description": options.meta_tags.get("description", ""),
            "current_page": options.current_page,
            "meta_tags": options.display_meta_tags(),
            "sidebar_data": options.sidebar_data,
            "scripts": options.scripts,
            "styles": options.styles,
            "custom_css": options.custom_css,
            "sidebar": Markup(self.render_sidebar(options)),
            "content": Markup(content_html),
        }

        try:
            return self.loader.render(layout_name, layout_context)
        except TemplateNotFoundError:
            return error_marker("Layout template not found", layout_name) + content_html
        except RenderError as e:
            return render_error_marker("Layout", e) + content_html
