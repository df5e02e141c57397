"""
Flow: 요청 바인딩 → 검증 → 액션 → 응답 포맷 파이프라인.

Usage:
    handler = (
        Flow("CreateUser", CreateUserRequest)
        .validate_required("username", "email", "password")
        .validate_request([FieldValidator("email", [email()])])
        .action("create_user", create_user_action)
        .as_handler(smart=True)
    )
    api_router.add_api_route("/users", handler, methods=["POST"])

규칙:
- 단계는 등록 순서대로 실행, 재시도 없음
- 검증 실패는 FlowError(400)로 즉시 중단
- validate_request 규칙은 값이 있을 때만 적용 (optional 필드)
- 바인딩 우선순위: query < body < path
"""

import inspect
import json
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from math import ceil
from typing import Any, Generic, NoReturn, TypeVar

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from src.domain.constants import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_TENANT_ID,
    MAX_PAGE_SIZE,
    MAX_QUERY_OFFSET,
)
from src.domain.errors import ErrorCodes, FlowError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

FILTER_PARAM_PATTERN = re.compile(r"^filter\[(\w+)\]$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# =============================================================================
# Validation Rules
# =============================================================================

# 규칙: 값 → 에러 메시지 (통과 시 None)
ValidationRule = Callable[[Any], str | None]


def email() -> ValidationRule:
    """이메일 형식."""
    def rule(value: Any) -> str | None:
        if not EMAIL_PATTERN.match(str(value)):
            return "must be a valid email address"
        return None
    return rule


def min_length(length: int) -> ValidationRule:
    """최소 길이."""
    def rule(value: Any) -> str | None:
        if len(str(value)) < length:
            return f"must be at least {length} characters"
        return None
    return rule


def max_length(length: int) -> ValidationRule:
    """최대 길이."""
    def rule(value: Any) -> str | None:
        if len(str(value)) > length:
            return f"must be at most {length} characters"
        return None
    return rule


def one_of(*allowed: str) -> ValidationRule:
    """허용 값 목록."""
    def rule(value: Any) -> str | None:
        if value not in allowed:
            return f"must be one of: {', '.join(allowed)}"
        return None
    return rule


@dataclass
class FieldValidator:
    """필드 하나에 적용할 규칙 목록."""
    field: str
    rules: list[ValidationRule]


# =============================================================================
# Pagination / Response
# =============================================================================

@dataclass
class Pagination:
    """?page=2&page_size=20&filter[username]=ali"""
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    filter: dict[str, str] = field(default_factory=dict)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class FlowResponse:
    """액션이 만든 응답."""
    status_code: int
    body: dict[str, Any]


def _serialize(data: Any) -> Any:
    """to_dict()가 있으면 사용 (password_hash 등 내부 필드 노출 방지)."""
    if hasattr(data, "to_dict"):
        return data.to_dict()
    if isinstance(data, (list, tuple)):
        return [_serialize(item) for item in data]
    return data


# =============================================================================
# Flow Context
# =============================================================================

class FlowContext(Generic[T]):
    """
    Flow 실행 컨텍스트.

    액션은 params(바인딩된 DTO)를 읽고, 응답 헬퍼로 결과를 반환하거나
    에러 헬퍼로 FlowError를 던진다.
    """

    def __init__(self, flow_name: str, request: Request, params: T):
        self.flow_name = flow_name
        self.request = request
        self.params = params
        self.pagination: Pagination | None = None
        self.response: FlowResponse | None = None

    @property
    def database(self) -> Any:
        """app.state.database (lifespan에서 초기화)."""
        return self.request.app.state.database

    @property
    def tenant_id(self) -> str:
        return getattr(self.request.app.state, "tenant_id", DEFAULT_TENANT_ID)

    # =========================================================================
    # Responses
    # =========================================================================

    def ok(self, data: Any = None, message: str | None = None) -> FlowResponse:
        body: dict[str, Any] = {"success": True, "data": _serialize(data)}
        if message:
            body["message"] = message
        return FlowResponse(200, body)

    def created(self, data: Any = None, message: str | None = None) -> FlowResponse:
        response = self.ok(data, message)
        response.status_code = 201
        return response

    def paginated_ok(self, items: list[Any], total: int) -> FlowResponse:
        """pagination_query() 이후에만 사용."""
        pagination = self.pagination or Pagination()
        total_pages = ceil(total / pagination.page_size) if pagination.page_size else 0
        return FlowResponse(200, {
            "success": True,
            "data": _serialize(items),
            "meta": {
                "page": pagination.page,
                "page_size": pagination.page_size,
                "total": total,
                "total_pages": total_pages,
            },
        })

    # =========================================================================
    # Errors
    # =========================================================================

    def error_bad_request(self, message: str, fields: dict[str, str] | None = None) -> NoReturn:
        raise FlowError(400, ErrorCodes.INVALID_REQUEST, message, fields=fields)

    def error_not_found(self, message: str) -> NoReturn:
        raise FlowError(404, ErrorCodes.NOT_FOUND, message)

    def error_conflict(self, message: str) -> NoReturn:
        raise FlowError(409, ErrorCodes.CONFLICT, message)

    def error_internal(self, message: str) -> NoReturn:
        raise FlowError(500, ErrorCodes.INTERNAL_ERROR, message)


Step = Callable[[FlowContext[Any]], FlowResponse | None | Awaitable[FlowResponse | None]]


# =============================================================================
# Binding
# =============================================================================

def _validation_fields(error: ValidationError) -> dict[str, str]:
    """pydantic ValidationError → 필드별 메시지 (필드당 첫 에러만)."""
    fields: dict[str, str] = {}
    for item in error.errors():
        name = str(item["loc"][0]) if item["loc"] else "body"
        fields.setdefault(name, f"{name}: {item['msg']}")
    return fields


async def _read_body(request: Request, smart: bool) -> dict[str, Any]:
    """JSON body (smart면 form도 허용)."""
    if request.method not in ("POST", "PUT", "PATCH"):
        return {}

    content_type = request.headers.get("content-type", "")

    if smart and (
        "application/x-www-form-urlencoded" in content_type
        or "multipart/form-data" in content_type
    ):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    raw = await request.body()
    if not raw.strip():
        return {}

    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise FlowError(400, ErrorCodes.INVALID_REQUEST, "request body must be valid JSON") from None

    if not isinstance(body, dict):
        raise FlowError(400, ErrorCodes.INVALID_REQUEST, "request body must be a JSON object")
    return body


# =============================================================================
# Flow
# =============================================================================

class Flow(Generic[T]):
    """
    요청 처리 파이프라인 빌더.

    단계:
    1. bind: path/query/body → dto_type (pydantic BaseModel)
    2. validate_required / validate_request / pagination_query (등록 순서)
    3. action: 비즈니스 로직, FlowResponse 반환
    4. 응답 포맷: JSONResponse
    """

    def __init__(self, name: str, dto_type: type[T]):
        if not (isinstance(dto_type, type) and issubclass(dto_type, BaseModel)):
            raise TypeError(f"Flow '{name}': dto_type must be a pydantic model")

        self.name = name
        self.dto_type = dto_type
        self._field_names = list(dto_type.model_fields)
        self._steps: list[tuple[str, Step]] = []

    def _check_fields(self, names: list[str]) -> None:
        unknown = [n for n in names if n not in self._field_names]
        if unknown:
            raise ValueError(f"Flow '{self.name}': unknown fields {unknown}")

    # =========================================================================
    # Builder
    # =========================================================================

    def validate_required(self, *fields: str) -> "Flow[T]":
        """필수 필드 (None/빈 문자열 불가)."""
        self._check_fields(list(fields))

        def step(ctx: FlowContext[T]) -> None:
            errors = {}
            for name in fields:
                value = getattr(ctx.params, name)
                if value is None or value == "":
                    errors[name] = f"{name} is required"
            if errors:
                raise FlowError(
                    400, ErrorCodes.VALIDATION_FAILED, "validation failed", fields=errors
                )

        self._steps.append(("validate_required", step))
        return self

    def validate_request(self, validators: list[FieldValidator]) -> "Flow[T]":
        """필드별 규칙 (값이 있을 때만 적용)."""
        self._check_fields([v.field for v in validators])

        def step(ctx: FlowContext[T]) -> None:
            errors = {}
            for validator in validators:
                value = getattr(ctx.params, validator.field)
                if value is None or value == "":
                    continue
                for rule in validator.rules:
                    message = rule(value)
                    if message:
                        errors[validator.field] = f"{validator.field} {message}"
                        break
            if errors:
                raise FlowError(
                    400, ErrorCodes.VALIDATION_FAILED, "validation failed", fields=errors
                )

        self._steps.append(("validate_request", step))
        return self

    def pagination_query(
        self,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> "Flow[T]":
        """page, page_size, filter[<field>] query → ctx.pagination."""

        def step(ctx: FlowContext[T]) -> None:
            query = ctx.request.query_params
            try:
                page = int(query.get("page", 1))
                page_size = int(query.get("page_size", default_page_size))
            except ValueError:
                raise FlowError(
                    400, ErrorCodes.INVALID_REQUEST, "page and page_size must be integers"
                ) from None

            page = max(page, 1)
            page_size = min(max(page_size, 1), max_page_size)
            if (page - 1) * page_size > MAX_QUERY_OFFSET:
                raise FlowError(
                    400,
                    ErrorCodes.INVALID_REQUEST,
                    "page is out of range",
                    fields={"page": f"page: offset must not exceed {MAX_QUERY_OFFSET}"},
                )

            filters = {}
            for key, value in query.items():
                match = FILTER_PARAM_PATTERN.match(key)
                if match:
                    filters[match.group(1)] = value

            ctx.pagination = Pagination(page=page, page_size=page_size, filter=filters)

        self._steps.append(("pagination_query", step))
        return self

    def action(self, name: str, func: Step) -> "Flow[T]":
        """비즈니스 액션 (sync/async)."""
        self._steps.append((name, func))
        return self

    # =========================================================================
    # Execution
    # =========================================================================

    async def bind(self, request: Request, smart: bool = False) -> T:
        """path/query/body 값을 DTO로 바인딩 (타입 변환/검증은 pydantic)."""
        values: dict[str, Any] = {}
        values.update(request.query_params)
        values.update(await _read_body(request, smart))
        values.update(request.path_params)

        try:
            return self.dto_type.model_validate(values)
        except ValidationError as e:
            raise FlowError(
                400, ErrorCodes.INVALID_REQUEST, "invalid request", fields=_validation_fields(e)
            ) from None

    async def run(self, request: Request, smart: bool = False) -> FlowResponse:
        """모든 단계 실행. 마지막으로 반환된 FlowResponse가 응답."""
        params = await self.bind(request, smart)
        ctx: FlowContext[T] = FlowContext(self.name, request, params)

        for step_name, step in self._steps:
            result = step(ctx)
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, FlowResponse):
                ctx.response = result
            logger.debug(f"Flow {self.name}: step '{step_name}' done")

        return ctx.response or ctx.ok()

    def as_handler(self, smart: bool = False) -> Callable[[Request], Awaitable[JSONResponse]]:
        """
        FastAPI endpoint 생성.

        Args:
            smart: True면 form-encoded body도 바인딩
        """

        async def handler(request: Request) -> JSONResponse:
            try:
                response = await self.run(request, smart)
            except FlowError as e:
                logger.info(f"Flow {self.name} rejected: {e}")
                return JSONResponse(status_code=e.status_code, content=e.to_response())
            return JSONResponse(
                status_code=response.status_code,
                content=jsonable_encoder(response.body),
            )

        handler.__name__ = self.name
        return handler
