"""Fluent request building and response verification for HTTP API tests.

Examples:
    >>> from hamcrest import has_length
    >>> from restassured import given
    >>> (
    ...     given()
    ...     .oauth2("token")
    ...     .query_param("page", 2)
    ...     .when()
    ...     .get("https://api.example.com/items")
    ...     .then()
    ...     .status_code(200)
    ...     .body("$.items", has_length(10))
    ... )
"""

from ._config import Config, load_config
from ._request_specification import RequestSpecification, given
from ._services import Dispatcher, close_default_dispatcher, get_default_dispatcher
from ._utils._request_spec import Outcome, ResolvedRequest
from ._verifiable_response import VerifiableResponse
from .models.errors import (
    InvalidRequestError,
    RequestAlreadySentError,
    ResponseVerificationError,
    RestAssuredError,
    SerializationError,
    TransportError,
    UnresolvedPlaceholderError,
)

__all__ = [
    "Config",
    "Dispatcher",
    "InvalidRequestError",
    "Outcome",
    "RequestAlreadySentError",
    "RequestSpecification",
    "ResolvedRequest",
    "ResponseVerificationError",
    "RestAssuredError",
    "SerializationError",
    "TransportError",
    "UnresolvedPlaceholderError",
    "VerifiableResponse",
    "close_default_dispatcher",
    "get_default_dispatcher",
    "given",
    "load_config",
]
