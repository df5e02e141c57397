"""
Domain Constants: 렌더/API 전역 상수.

템플릿 디렉토리 구조, HTMX 헤더, 예약 meta 키 등
시스템 전반에서 사용되는 값들.
"""

# =============================================================================
# Template Directory Structure (템플릿 디렉토리 구조)
# =============================================================================
# templates/
# ├── layouts/   # 레이아웃 + 공용 partial (sidebar 등)
# └── pages/     # 페이지별 콘텐츠 템플릿
#
# embedded fallback (src/render/defaults/)도 같은 2단 구조를 따른다.

LAYOUTS_DIR = "layouts"
PAGES_DIR = "pages"
TEMPLATE_SUFFIX = ".html"

DEFAULT_MAIN_LAYOUT = "base.html"
SIDEBAR_TEMPLATE = "sidebar.html"

# =============================================================================
# HTMX
# =============================================================================

HTMX_REQUEST_HEADER = "HX-Request"
HTMX_REQUEST_TRUE = "true"

# =============================================================================
# Reserved meta tag keys (렌더 제어용, <meta>로 출력되지 않음)
# =============================================================================

META_FULL_LAYOUT = "full_layout"
META_MAIN_LAYOUT = "main_layout"
RESERVED_META_KEYS = frozenset({META_FULL_LAYOUT, META_MAIN_LAYOUT})

# =============================================================================
# Tenant / Pagination
# =============================================================================

DEFAULT_TENANT_ID = "default"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# SQLite INTEGER 최대값 (LIMIT/OFFSET 바인딩 한계)
MAX_QUERY_OFFSET = 2**63 - 1

# 목록 필터 허용 필드
USER_FILTER_FIELDS = ("username", "email", "is_active")
