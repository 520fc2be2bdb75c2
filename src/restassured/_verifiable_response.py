import json
from logging import getLogger
from typing import Any, Optional, TypeVar

import httpx
from hamcrest import equal_to
from hamcrest.core.matcher import Matcher
from hamcrest.core.string_description import StringDescription
from pydantic import BaseModel, ValidationError

from ._utils._body_path import resolve_body_path
from ._utils._request_spec import Outcome
from ._utils.constants import HEADER_CONTENT_TYPE
from .models.errors import ResponseVerificationError

logger = getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_MISSING: Any = object()


def _as_matcher(expected: Any) -> Matcher:
    if isinstance(expected, Matcher):
        return expected
    return equal_to(expected)


class VerifiableResponse:
    """Assertions over the outcome of a request.

    Every expectation takes either a plain value, compared for equality, or
    a PyHamcrest matcher. Each returns the same instance so expectations can
    be chained; the first one that fails raises
    :class:`ResponseVerificationError`.
    """

    def __init__(self, outcome: Outcome):
        self._outcome = outcome

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def status(self) -> int:
        return self._outcome.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._outcome.headers

    @property
    def text(self) -> str:
        return self._outcome.text

    def then(self) -> "VerifiableResponse":
        return self

    def and_(self) -> "VerifiableResponse":
        return self

    def status_code(self, expected: Any) -> "VerifiableResponse":
        return self._verify("status code", self._outcome.status_code, expected)

    def header(self, name: str, expected: Any) -> "VerifiableResponse":
        actual = self._outcome.headers.get(name)
        if actual is None:
            raise ResponseVerificationError(
                f"Expected response header '{name}' but it was not present",
                expected=expected,
            )
        return self._verify(f"header '{name}'", actual, expected)

    def content_type(self, expected: Any) -> "VerifiableResponse":
        return self.header(HEADER_CONTENT_TYPE, expected)

    def body(self, path_or_expected: Any, expected: Any = _MISSING) -> "VerifiableResponse":
        """Verify the response body.

        ``body(expected)`` compares the whole body as text.
        ``body(path, expected)`` compares the value found at ``path`` in
        the JSON body, e.g. ``body("$.items[0].name", "widget")``.
        """
        if expected is _MISSING:
            return self._verify("body", self._outcome.text, path_or_expected)

        path = path_or_expected
        return self._verify(f"body at '{path}'", self._body_value(path), expected)

    def response_time(self, expected: Any) -> "VerifiableResponse":
        """Verify the elapsed time in milliseconds, e.g. ``less_than(500)``."""
        elapsed_ms = self._outcome.elapsed.total_seconds() * 1000
        return self._verify("response time (ms)", elapsed_ms, expected)

    def extract(self) -> Outcome:
        return self._outcome

    def extract_body(self, path: str = "*") -> Any:
        return self._body_value(path)

    def extract_header(self, name: str) -> Optional[str]:
        return self._outcome.headers.get(name)

    def deserialize(self, model: type[ModelT]) -> ModelT:
        """Validate the JSON body into ``model``."""
        try:
            return model.model_validate_json(self._outcome.content)
        except ValidationError as e:
            raise ResponseVerificationError(
                f"Expected body to be a valid {model.__name__}\n     but: {e}",
                expected=model.__name__,
                actual=self._outcome.text,
            ) from e

    def _body_value(self, path: str) -> Any:
        try:
            document = self._outcome.json()
        except json.JSONDecodeError as e:
            raise ResponseVerificationError(
                f"Expected a JSON body to evaluate '{path}'\n     but: {e}",
                actual=self._outcome.text,
            ) from e

        try:
            return resolve_body_path(document, path)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ResponseVerificationError(
                f"Expected body to contain '{path}'\n     but: {type(e).__name__}: {e}",
                actual=document,
            ) from e

    def _verify(self, what: str, actual: Any, expected: Any) -> "VerifiableResponse":
        matcher = _as_matcher(expected)
        if matcher.matches(actual):
            return self

        description = StringDescription()
        description.append_text(f"Expected {what} ").append_description_of(
            matcher
        ).append_text("\n     but: ")
        matcher.describe_mismatch(actual, description)

        logger.debug(f"Verification failed: {description}")
        raise ResponseVerificationError(
            str(description), expected=expected, actual=actual
        )
