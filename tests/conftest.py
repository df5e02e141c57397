"""
Pytest fixtures for the web example tests.

테스트 구성:
- 템플릿 트리 (프로젝트 / embedded fallback)는 tmp_path에 생성
- DB는 테스트마다 새 SQLite 파일
- HTTP 테스트는 create_app(config) + TestClient (lifespan 포함)
"""

from collections.abc import Generator
from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

from src.app.main import create_app
from src.core.passwords import hash_password
from src.domain.schemas import User
from src.render import TemplateLoader
from src.repository import Database, UserRepository

# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def default_config(default_config_path: Path) -> dict:
    """기본 설정 로드."""
    with open(default_config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Template Fixtures
# =============================================================================

def write_template(root: Path, relative: str, source: str) -> Path:
    """root/relative에 템플릿 파일 생성."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


@pytest.fixture
def project_templates(tmp_path: Path) -> Path:
    """
    프로젝트 템플릿 트리.

    포함:
    - layouts/base.html, layouts/sidebar.html
    - pages/home.html
    """
    root = tmp_path / "project"
    write_template(
        root,
        "layouts/base.html",
        '<html><head><title>{{ title }}</title></head><body>'
        '<nav id="layout-sidebar">{{ sidebar }}</nav>'
        '<main id="layout-main">{{ content }}</main></body></html>',
    )
    write_template(
        root,
        "layouts/sidebar.html",
        '<ul class="project-sidebar" data-current="{{ current_page }}"></ul>',
    )
    write_template(root, "pages/home.html", '<section class="home">Hello {{ name }}</section>')
    return root


@pytest.fixture
def embedded_templates(tmp_path: Path) -> Path:
    """
    embedded fallback 역할의 템플릿 트리.

    포함:
    - layouts/base.html (프로젝트와 같은 이름)
    - layouts/fallback.html (embedded에만 존재)
    - pages/about.html
    - root.html (embedded 루트)
    """
    root = tmp_path / "embedded"
    write_template(root, "layouts/base.html", '<html><body class="embedded">{{ content }}</body></html>')
    write_template(root, "layouts/fallback.html", '<div class="embedded-layout">fallback</div>')
    write_template(root, "pages/about.html", '<section class="embedded-about">About</section>')
    write_template(root, "root.html", '<p class="embedded-root">root</p>')
    return root


@pytest.fixture
def template_loader(project_templates: Path, embedded_templates: Path) -> TemplateLoader:
    """프로젝트 + embedded fallback loader."""
    return TemplateLoader.from_root(project_templates, embedded=embedded_templates)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def database(tmp_path: Path) -> Database:
    """스키마가 초기화된 빈 DB (tenant: default)."""
    db = Database(tmp_path / "data" / "test.db")
    db.initialize()
    return db


@pytest.fixture
def user_repo(database: Database) -> UserRepository:
    return UserRepository(database)


def make_user(username: str, is_active: bool = True, **kwargs) -> User:
    """저장 전 User (password_hash 포함)."""
    return User(
        username=username,
        email=kwargs.pop("email", f"{username}@example.com"),
        tenant_id=kwargs.pop("tenant_id", "default"),
        password_hash=kwargs.pop("password_hash", hash_password("password123")),
        is_active=is_active,
        **kwargs,
    )


@pytest.fixture
def user_factory():
    """make_user를 테스트에 주입."""
    return make_user


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app_config(tmp_path: Path) -> dict:
    """테스트용 설정 (DB는 tmp_path)."""
    return {
        "database": {"path": str(tmp_path / "app.db")},
        "logging": {"level": "WARNING"},
    }


@pytest.fixture
def client(app_config: dict) -> Generator[TestClient, None, None]:
    """FastAPI TestClient (lifespan 실행)."""
    with TestClient(create_app(app_config)) as client:
        yield client
