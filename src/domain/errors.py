"""
Error definitions for the web examples.

규칙:
- 조용한 실패 금지 → 코드가 붙은 예외로 명시적 실패
- 렌더 계층(MainLayoutPage)만 예외를 inline HTML 마커로 변환
- HTTP 계층은 FlowError를 JSON 응답으로 변환
"""

from typing import Any


class AppError(Exception):
    """
    코드가 붙은 애플리케이션 에러 베이스.

    Usage:
        raise RepositoryError("USER_NOT_FOUND", "user not found", user_id=user_id)
    """

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class RenderError(AppError):
    """템플릿 해석/실행 에러."""


class TemplateNotFoundError(RenderError):
    """cascade의 모든 후보에서 템플릿을 찾지 못함."""

    def __init__(self, name: str, searched: list[str] | None = None) -> None:
        self.name = name
        super().__init__(
            ErrorCodes.TEMPLATE_NOT_FOUND,
            f"template {name} not found in project or embedded fallback",
            template=name,
            searched=searched or [],
        )


class RepositoryError(AppError):
    """DB 저장소 에러."""


class FlowError(AppError):
    """
    Flow 파이프라인 에러 (HTTP 상태 코드 포함).

    fields: 필드별 검증 메시지 (검증 실패 시에만)
    """

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        fields: dict[str, str] | None = None,
        **context: Any,
    ) -> None:
        self.status_code = status_code
        self.fields = fields or {}
        super().__init__(code, message, **context)

    def to_response(self) -> dict[str, Any]:
        """HTTP 응답 body."""
        body: dict[str, Any] = {
            "success": False,
            "code": self.code,
            "message": self.message,
        }
        if self.fields:
            body["fields"] = self.fields
        return body


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Render ===
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_SYNTAX_ERROR = "TEMPLATE_SYNTAX_ERROR"
    TEMPLATE_READ_FAILED = "TEMPLATE_READ_FAILED"
    TEMPLATE_EXECUTION_FAILED = "TEMPLATE_EXECUTION_FAILED"

    # === Flow / Request ===
    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # === Repository ===
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_EXISTS = "USER_EXISTS"
    USER_INVALID = "USER_INVALID"
    TENANT_NOT_FOUND = "TENANT_NOT_FOUND"
    DB_LOCK_TIMEOUT = "DB_LOCK_TIMEOUT"
