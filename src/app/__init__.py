"""
App layer: 웹 서버 (FastAPI + Jinja2 + HTMX).

역할:
- 대시보드 화면 (MainLayoutPage로 전체 문서/fragment 렌더)
- 사용자 관리 JSON API (Flow 파이프라인 → UserRepository)
- 설정 로드, 로깅 설정

주의: 폴더 구분
- templates/ (루트) → 프로젝트 템플릿 (layouts/, pages/)
- src/render/defaults/ → embedded 기본 템플릿 (fallback)
"""
