"""
Template Loader: 프로젝트 → embedded fallback 순서의 템플릿 해석.

해석 순서 (first match wins, 이후 후보는 조회하지 않음):
1. <layout_dir>/<name>            (로컬 파일시스템)
2. <page_dir>/<name>              (로컬 파일시스템)
3. embedded:layouts/<name>        (embedded fallback)
4. embedded:pages/<name>          (embedded fallback)
5. embedded:<name>                (embedded 루트)

규칙:
- 캐시 없음: load()마다 cascade를 다시 조회하고 다시 파싱
- 모든 후보 실패 시에만 TEMPLATE_NOT_FOUND (첫 실패에서 중단 금지)
- 파싱/읽기 에러는 다음 후보로 넘어가지 않고 그대로 호출자에게 전달
"""

import importlib.resources
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from jinja2 import (
    BaseLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)
from jinja2.loaders import split_template_path

from src.domain.constants import LAYOUTS_DIR, PAGES_DIR
from src.domain.errors import ErrorCodes, RenderError, TemplateNotFoundError

logger = logging.getLogger(__name__)


def default_embedded() -> Traversable:
    """패키지에 포함된 기본 템플릿 번들 (src/render/defaults/)."""
    return importlib.resources.files("src.render") / "defaults"


# =============================================================================
# Candidates
# =============================================================================

@dataclass(frozen=True)
class Candidate:
    """cascade 후보 하나."""
    label: str  # "project:layouts", "embedded:pages" 등
    location: Path | Traversable
    embedded: bool

    def describe(self) -> str:
        return f"{self.label}:{self.location}"


# =============================================================================
# Jinja2 Loader
# =============================================================================

class CascadeLoader(BaseLoader):
    """
    cascade 해석을 수행하는 Jinja2 loader.

    Environment에 연결되므로 템플릿 안의 {% include %}, {% extends %}도
    같은 cascade로 해석된다.
    """

    def __init__(
        self,
        layout_dir: Path,
        page_dir: Path,
        embedded: Traversable | None = None,
        embedded_layout_dir: str = LAYOUTS_DIR,
        embedded_page_dir: str = PAGES_DIR,
    ) -> None:
        self.layout_dir = layout_dir
        self.page_dir = page_dir
        self.embedded = embedded
        self.embedded_layout_dir = embedded_layout_dir
        self.embedded_page_dir = embedded_page_dir

    def candidates(self, name: str) -> list[Candidate]:
        """
        name에 대한 후보 목록 (조회 순서대로).

        Raises:
            TemplateNotFound: ".." 등 디렉토리 밖을 가리키는 이름
        """
        pieces = split_template_path(name)

        result = [
            Candidate("project:layouts", self.layout_dir.joinpath(*pieces), embedded=False),
            Candidate("project:pages", self.page_dir.joinpath(*pieces), embedded=False),
        ]

        if self.embedded is not None:
            result.append(Candidate(
                "embedded:layouts",
                _join(self.embedded / self.embedded_layout_dir, pieces),
                embedded=True,
            ))
            result.append(Candidate(
                "embedded:pages",
                _join(self.embedded / self.embedded_page_dir, pieces),
                embedded=True,
            ))
            result.append(Candidate("embedded:root", _join(self.embedded, pieces), embedded=True))

        return result

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str | None, Callable[[], bool]]:
        for candidate in self.candidates(template):
            logger.debug(f"Trying {candidate.describe()}")

            if candidate.embedded:
                # embedded 후보: 읽기에 성공해야 hit
                try:
                    source = candidate.location.read_text(encoding="utf-8")
                except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
                    logger.debug(f"Not found in {candidate.label}: {e}")
                    continue
                logger.debug(f"Found template '{template}' at {candidate.describe()}")
                return source, str(candidate.location), _always_stale

            # 로컬 후보: 존재하면 hit (읽기 에러는 그대로 전파)
            path = candidate.location
            if path.is_file():
                logger.debug(f"Found template '{template}' at {candidate.describe()}")
                return path.read_text(encoding="utf-8"), str(path), _always_stale

            logger.debug(f"Not found in {candidate.label}: {path}")

        raise TemplateNotFound(template)


def _join(base: Traversable, pieces: list[str]) -> Traversable:
    """Traversable에 경로 조각을 차례로 결합."""
    for piece in pieces:
        base = base / piece
    return base


def _always_stale() -> bool:
    # Jinja2 auto_reload가 매번 다시 읽도록 항상 False
    return False


# =============================================================================
# Template Loader
# =============================================================================

class TemplateLoader:
    """
    논리 템플릿 이름 → 파싱된 Jinja2 Template.

    구조:
    <root>/
    ├── layouts/   # base.html, sidebar.html, 공용 partial
    └── pages/     # dashboard.html, users.html ...

    Usage:
        loader = TemplateLoader.from_root(Path("templates"), embedded=default_embedded())
        tmpl = loader.load("base.html")
    """

    def __init__(
        self,
        layout_dir: Path,
        page_dir: Path,
        embedded: Traversable | None = None,
    ):
        """
        Args:
            layout_dir: 프로젝트 레이아웃 디렉토리
            page_dir: 프로젝트 페이지 디렉토리
            embedded: embedded fallback 번들 (None이면 프로젝트만 조회)
        """
        self.layout_dir = Path(layout_dir)
        self.page_dir = Path(page_dir)
        self.embedded = embedded

        self._cascade = CascadeLoader(self.layout_dir, self.page_dir, embedded)
        self.env = Environment(
            loader=self._cascade,
            autoescape=select_autoescape(["html", "htm"]),
            undefined=StrictUndefined,
            cache_size=0,
            auto_reload=True,
        )

    @classmethod
    def from_root(cls, root: Path, embedded: Traversable | None = None) -> "TemplateLoader":
        """<root>/layouts, <root>/pages 로 구성된 loader."""
        root = Path(root)
        return cls(root / LAYOUTS_DIR, root / PAGES_DIR, embedded=embedded)

    def load(self, name: str) -> Template:
        """
        템플릿 해석 + 파싱.

        Args:
            name: 논리 템플릿 이름 (예: "base.html", "users.html")

        Returns:
            파싱된 Template

        Raises:
            TemplateNotFoundError: 모든 후보에서 찾지 못함
            RenderError: TEMPLATE_SYNTAX_ERROR (선택된 후보의 파싱 실패),
                TEMPLATE_READ_FAILED (선택된 후보의 읽기/디코딩 실패)
        """
        try:
            return self.env.get_template(name)
        except TemplateNotFound as e:
            searched = self.searched(name)
            logger.warning(f"Template {name} not found in project or embedded fallback")
            raise TemplateNotFoundError(name, searched=searched) from e
        except TemplateSyntaxError as e:
            logger.error(f"Template {name} failed to parse: {e}")
            raise RenderError(
                ErrorCodes.TEMPLATE_SYNTAX_ERROR,
                f"template {name} has a syntax error: {e.message}",
                template=name,
                lineno=e.lineno,
            ) from e
        except (UnicodeDecodeError, OSError) as e:
            logger.error(f"Template {name} could not be read: {e}")
            raise RenderError(
                ErrorCodes.TEMPLATE_READ_FAILED,
                f"template {name} could not be read: {e}",
                template=name,
            ) from e

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """
        템플릿 해석 + 실행.

        Raises:
            TemplateNotFoundError: 모든 후보에서 찾지 못함
            RenderError: TEMPLATE_SYNTAX_ERROR, TEMPLATE_READ_FAILED,
                TEMPLATE_EXECUTION_FAILED (렌더 중 예외)
        """
        tmpl = self.load(name)
        try:
            return tmpl.render(context)
        except Exception as e:
            logger.warning(f"Template {name} failed to execute: {e}")
            raise RenderError(
                ErrorCodes.TEMPLATE_EXECUTION_FAILED,
                str(e),
                template=name,
            ) from e

    def searched(self, name: str) -> list[str]:
        """에러 메시지용: 조회한 후보 목록."""
        try:
            return [c.describe() for c in self._cascade.candidates(name)]
        except TemplateNotFound:
            return []
