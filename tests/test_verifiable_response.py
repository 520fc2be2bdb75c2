import json
from datetime import timedelta
from typing import Any, Optional

import httpx
import pytest
from hamcrest import (
    contains_string,
    greater_than_or_equal_to,
    has_entries,
    has_length,
    less_than,
    starts_with,
)
from pydantic import BaseModel
from pytest_httpx import HTTPXMock

from restassured import (
    Dispatcher,
    Outcome,
    ResolvedRequest,
    ResponseVerificationError,
    VerifiableResponse,
    given,
)


class Item(BaseModel):
    id: int
    name: str


def make_response(
    body: Any = None,
    status_code: int = 200,
    headers: Optional[dict[str, str]] = None,
    elapsed_ms: int = 120,
) -> VerifiableResponse:
    if body is None:
        content = b""
    elif isinstance(body, (bytes, str)):
        content = body.encode() if isinstance(body, str) else body
    else:
        content = json.dumps(body).encode()

    outcome = Outcome(
        status_code=status_code,
        headers=httpx.Headers(headers or {"Content-Type": "application/json"}),
        content=content,
        elapsed=timedelta(milliseconds=elapsed_ms),
        request=ResolvedRequest(method="GET", url="https://api.example.com/items"),
    )
    return VerifiableResponse(outcome)


class TestVerifiableResponse:
    def test_then_and_are_identity(self):
        response = make_response()

        assert response.then() is response
        assert response.and_() is response

    class TestStatusCode:
        def test_matching_status(self):
            response = make_response(status_code=201)

            assert response.status_code(201) is response
            assert response.status_code(greater_than_or_equal_to(200)) is response

        def test_mismatching_status(self):
            response = make_response(status_code=404)

            with pytest.raises(ResponseVerificationError) as exc_info:
                response.status_code(200)

            error = exc_info.value
            assert isinstance(error, AssertionError)
            assert error.expected == 200
            assert error.actual == 404
            assert "Expected status code <200>" in str(error)
            assert "was <404>" in str(error)

    class TestHeaders:
        def test_header(self):
            response = make_response(headers={"X-Request-Id": "abc-123"})

            response.header("x-request-id", "abc-123").header(
                "X-Request-Id", starts_with("abc")
            )

        def test_missing_header(self):
            response = make_response(headers={})

            with pytest.raises(ResponseVerificationError, match="not present"):
                response.header("X-Request-Id", "abc")

        def test_content_type(self):
            response = make_response(
                headers={"Content-Type": "application/json; charset=utf-8"}
            )

            response.content_type(contains_string("application/json"))

            with pytest.raises(ResponseVerificationError):
                response.content_type("text/html")

    class TestBody:
        def test_whole_body(self):
            response = make_response("plain text")

            response.body("plain text").body(contains_string("text"))

            with pytest.raises(ResponseVerificationError):
                response.body("other text")

        def test_body_path(self):
            response = make_response(
                {"items": [{"id": 1, "name": "widget"}, {"id": 2, "name": "gadget"}]}
            )

            (
                response.body("$.items[0].name", "widget")
                .body("items[1].id", 2)
                .body("$.items", has_length(2))
                .body("items[0]", has_entries({"id": 1}))
            )

        def test_body_path_mismatch(self):
            response = make_response({"name": "widget"})

            with pytest.raises(ResponseVerificationError) as exc_info:
                response.body("$.name", "gadget")

            assert exc_info.value.expected == "gadget"
            assert exc_info.value.actual == "widget"
            assert "body at '$.name'" in str(exc_info.value)

        def test_missing_body_path(self):
            response = make_response({"name": "widget"})

            with pytest.raises(ResponseVerificationError, match="KeyError"):
                response.body("$.owner.name", "acme")

        def test_unsupported_body_path_fails_verification(self):
            response = make_response({"name": "widget", "items": [{"name": "a"}]})

            with pytest.raises(ResponseVerificationError, match="ValueError"):
                response.body("$..name", "widget")

            with pytest.raises(ResponseVerificationError, match="ValueError"):
                response.body("items[abc]", has_length(1))

        def test_body_path_on_non_json(self):
            response = make_response("<html></html>")

            with pytest.raises(ResponseVerificationError, match="JSON body"):
                response.body("$.name", "widget")

        def test_body_path_can_match_none(self):
            response = make_response({"deleted_at": None})

            response.body("deleted_at", None)

    class TestResponseTime:
        def test_response_time(self):
            response = make_response(elapsed_ms=120)

            response.response_time(less_than(500))

            with pytest.raises(ResponseVerificationError, match="response time"):
                response.response_time(less_than(100))

    class TestExtract:
        def test_extract(self):
            response = make_response({"id": 3}, headers={"Location": "/items/3"})

            assert response.extract().status_code == 200
            assert response.extract_body() == {"id": 3}
            assert response.extract_body("$.id") == 3
            assert response.extract_header("Location") == "/items/3"
            assert response.extract_header("X-Missing") is None

        def test_deserialize(self):
            response = make_response({"id": 3, "name": "widget"})

            assert response.deserialize(Item) == Item(id=3, name="widget")

        def test_deserialize_invalid_body(self):
            response = make_response({"id": "not-a-number"})

            with pytest.raises(ResponseVerificationError, match="valid Item"):
                response.deserialize(Item)

    class TestEndToEnd:
        def test_fluent_chain(
            self, httpx_mock: HTTPXMock, dispatcher: Dispatcher, base_url: str
        ):
            httpx_mock.add_response(
                url=f"{base_url}/items/7",
                json={"id": 7, "name": "widget"},
                headers={"X-Request-Id": "r-1"},
            )

            (
                given(dispatcher)
                .path_param("id", 7)
                .accept("application/json")
                .when()
                .get(base_url + "/items/{{id}}")
                .then()
                .status_code(200)
                .and_()
                .header("X-Request-Id", "r-1")
                .body("$.name", "widget")
            )

        def test_not_found_fails_only_on_assertion(
            self, httpx_mock: HTTPXMock, dispatcher: Dispatcher, base_url: str
        ):
            httpx_mock.add_response(url=f"{base_url}/items/8", status_code=404)

            response = given(dispatcher).get(f"{base_url}/items/8")
            response.status_code(404)

            with pytest.raises(ResponseVerificationError):
                response.status_code(200)
