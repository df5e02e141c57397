"""
test_flow.py - Flow 파이프라인 테스트

테스트 케이스:
- 바인딩: query < body < path, 타입 변환, 변환 실패 → 400 INVALID_REQUEST
- validate_required / validate_request (optional 필드 의미)
- pagination_query: 기본값, 상한, filter[field]
- smart 모드: form body 허용
- 응답 포맷: ok / created / paginated_ok / FlowError
"""

from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from src.core.flow import (
    FieldValidator,
    Flow,
    FlowContext,
    email,
    max_length,
    min_length,
    one_of,
)


class EchoRequest(BaseModel):
    name: str = ""
    email: str = ""
    age: int | None = None
    active: bool | None = None
    extra: dict[str, Any] | None = None
    score: float | None = None
    tags: list[str] | None = None


def echo_action(ctx: FlowContext[EchoRequest]):
    return ctx.ok(ctx.params.model_dump())


def create_action(ctx: FlowContext[EchoRequest]):
    return ctx.created({"name": ctx.params.name}, message="created")


def page_action(ctx: FlowContext[EchoRequest]):
    items = [{"n": i} for i in range(ctx.pagination.page_size)]
    return ctx.paginated_ok(items, total=45)


def filter_action(ctx: FlowContext[EchoRequest]):
    return ctx.ok(ctx.pagination.filter)


def conflict_action(ctx: FlowContext[EchoRequest]):
    ctx.error_conflict("name taken")


async def async_action(ctx: FlowContext[EchoRequest]):
    return ctx.ok({"async": True})


def silent_action(ctx: FlowContext[EchoRequest]):
    return None


@pytest.fixture
def flow_client():
    app = FastAPI()

    echo = Flow("Echo", EchoRequest).action("echo", echo_action)
    app.add_api_route("/echo/{name}", echo.as_handler(), methods=["GET", "POST"])
    app.add_api_route("/echo", echo.as_handler(), methods=["GET", "POST"])
    app.add_api_route("/smart", echo.as_handler(smart=True), methods=["POST"])

    validated = (
        Flow("Validated", EchoRequest)
        .validate_required("name")
        .validate_request([
            FieldValidator("email", [email()]),
            FieldValidator("name", [min_length(2), max_length(5)]),
        ])
        .action("echo", echo_action)
    )
    app.add_api_route("/validated", validated.as_handler(), methods=["POST"])

    roles = (
        Flow("Roles", EchoRequest)
        .validate_request([FieldValidator("name", [one_of("admin", "user")])])
        .action("echo", echo_action)
    )
    app.add_api_route("/roles", roles.as_handler(), methods=["POST"])

    simple = {
        "/create": ("POST", Flow("Create", EchoRequest).action("create", create_action)),
        "/conflict": ("POST", Flow("Conflict", EchoRequest).action("conflict", conflict_action)),
        "/async": ("GET", Flow("Async", EchoRequest).action("async", async_action)),
        "/silent": ("GET", Flow("Silent", EchoRequest).action("silent", silent_action)),
        "/filters": ("GET", Flow("Filters", EchoRequest).pagination_query().action("f", filter_action)),
        "/page": (
            "GET",
            Flow("Page", EchoRequest)
            .pagination_query(default_page_size=10, max_page_size=25)
            .action("page", page_action),
        ),
    }
    for path, (method, flow) in simple.items():
        app.add_api_route(path, flow.as_handler(), methods=[method])

    with TestClient(app) as client:
        yield client


# =============================================================================
# Binding
# =============================================================================


class TestBinding:
    """path/query/body → DTO."""

    def test_query_binding_with_coercion(self, flow_client):
        response = flow_client.get("/echo", params={"name": "kim", "age": "30", "active": "true"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "kim"
        assert data["age"] == 30
        assert data["active"] is True

    def test_body_overrides_query(self, flow_client):
        response = flow_client.post("/echo?name=query", json={"name": "body"})

        assert response.json()["data"]["name"] == "body"

    def test_path_overrides_body(self, flow_client):
        response = flow_client.post("/echo/path", json={"name": "body"})

        assert response.json()["data"]["name"] == "path"

    def test_dict_field_from_json(self, flow_client):
        response = flow_client.post("/echo", json={"extra": {"team": "a"}})

        assert response.json()["data"]["extra"] == {"team": "a"}

    def test_type_error_is_bad_request(self, flow_client):
        response = flow_client.post("/echo", json={"active": "maybe"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "INVALID_REQUEST"
        assert "active" in body["fields"]

    def test_invalid_json_body(self, flow_client):
        response = flow_client.post(
            "/echo", content=b"{not json", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_non_object_json_body(self, flow_client):
        response = flow_client.post("/echo", json=[1, 2])

        assert response.status_code == 400

    def test_wrong_scalar_type_is_bad_request(self, flow_client):
        response = flow_client.post("/echo", json={"score": "high"})

        assert response.status_code == 400
        assert "score" in response.json()["fields"]

    def test_list_field_rejects_string(self, flow_client):
        response = flow_client.post("/echo", json={"tags": "x"})

        assert response.status_code == 400
        assert response.json()["fields"]["tags"].startswith("tags: ")

    def test_typed_fields_pass_through(self, flow_client):
        response = flow_client.post("/echo", json={"tags": ["a"], "score": 1.5})

        data = response.json()["data"]
        assert data["tags"] == ["a"]
        assert data["score"] == 1.5

    def test_form_body_requires_smart(self, flow_client):
        """smart가 아니면 form body는 JSON으로 해석 → 400."""
        response = flow_client.post("/echo", data={"name": "form"})

        assert response.status_code == 400

    def test_smart_accepts_form(self, flow_client):
        response = flow_client.post("/smart", data={"name": "form", "active": "on"})

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "form"
        assert response.json()["data"]["active"] is True

    def test_smart_accepts_json(self, flow_client):
        response = flow_client.post("/smart", json={"name": "json"})

        assert response.json()["data"]["name"] == "json"


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    """validate_required / validate_request."""

    def test_valid_request(self, flow_client):
        response = flow_client.post("/validated", json={"name": "kim", "email": "kim@example.com"})

        assert response.status_code == 200

    def test_missing_required_field(self, flow_client):
        response = flow_client.post("/validated", json={"email": "kim@example.com"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert body["fields"] == {"name": "name is required"}

    def test_empty_string_counts_as_missing(self, flow_client):
        response = flow_client.post("/validated", json={"name": ""})

        assert response.json()["fields"]["name"] == "name is required"

    def test_optional_field_skipped_when_absent(self, flow_client):
        """email이 없으면 email 규칙은 적용하지 않음."""
        response = flow_client.post("/validated", json={"name": "kim"})

        assert response.status_code == 200

    def test_invalid_email(self, flow_client):
        response = flow_client.post("/validated", json={"name": "kim", "email": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["fields"]["email"] == "email must be a valid email address"

    def test_min_and_max_length(self, flow_client):
        short = flow_client.post("/validated", json={"name": "k"})
        long = flow_client.post("/validated", json={"name": "kimchi"})

        assert short.json()["fields"]["name"] == "name must be at least 2 characters"
        assert long.json()["fields"]["name"] == "name must be at most 5 characters"

    def test_one_of(self, flow_client):
        assert flow_client.post("/roles", json={"name": "admin"}).status_code == 200

        response = flow_client.post("/roles", json={"name": "root"})
        assert response.json()["fields"]["name"] == "name must be one of: admin, user"

    def test_unknown_field_rejected_at_build_time(self):
        with pytest.raises(ValueError):
            Flow("Bad", EchoRequest).validate_required("nickname")

    def test_dto_must_be_model(self):
        with pytest.raises(TypeError):
            Flow("Bad", dict)


# =============================================================================
# Pagination
# =============================================================================


class TestPagination:
    """pagination_query + paginated_ok."""

    def test_defaults(self, flow_client):
        body = flow_client.get("/page").json()

        assert body["meta"] == {"page": 1, "page_size": 10, "total": 45, "total_pages": 5}
        assert len(body["data"]) == 10

    def test_page_size_capped(self, flow_client):
        body = flow_client.get("/page", params={"page": "2", "page_size": "500"}).json()

        assert body["meta"]["page"] == 2
        assert body["meta"]["page_size"] == 25
        assert body["meta"]["total_pages"] == 2

    def test_page_clamped_to_one(self, flow_client):
        body = flow_client.get("/page", params={"page": "-3"}).json()

        assert body["meta"]["page"] == 1

    def test_filter_params(self, flow_client):
        response = flow_client.get(
            "/filters", params={"filter[username]": "ali", "filter[is_active]": "true", "q": "x"}
        )

        assert response.json()["data"] == {"username": "ali", "is_active": "true"}

    def test_non_integer_page(self, flow_client):
        response = flow_client.get("/page", params={"page": "two"})

        assert response.status_code == 400

    def test_page_beyond_offset_range(self, flow_client):
        response = flow_client.get("/page", params={"page": "100000000000000000000"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_REQUEST"
        assert "page" in body["fields"]


# =============================================================================
# Response shaping
# =============================================================================


class TestResponses:
    """ok / created / 에러 / async 액션."""

    def test_created(self, flow_client):
        response = flow_client.post("/create", json={"name": "kim"})

        assert response.status_code == 201
        assert response.json() == {"success": True, "data": {"name": "kim"}, "message": "created"}

    def test_flow_error_response(self, flow_client):
        response = flow_client.post("/conflict", json={})

        assert response.status_code == 409
        assert response.json() == {"success": False, "code": "CONFLICT", "message": "name taken"}

    def test_async_action(self, flow_client):
        assert flow_client.get("/async").json()["data"] == {"async": True}

    def test_action_without_response_returns_ok(self, flow_client):
        response = flow_client.get("/silent")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": None}
