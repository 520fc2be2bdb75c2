"""Resolution steps turning accumulated request settings into a ResolvedRequest.

Each step is a plain function so it can be exercised on its own:

- ``render_endpoint``: substitute ``{{name}}`` placeholders with encoded path params
- ``append_query_string``: append percent-encoded query params
- ``join_base_url`` / ``validate_url``: make the URL absolute and check it
- ``serialize_body``: turn the body into its string wire form
- ``validate_headers``: reject header names/values httpx would refuse
"""

import codecs
import dataclasses
import json
import logging
import re
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import quote, urlencode

import httpx
from jinja2 import (
    Environment,
    StrictUndefined,
    TemplateError,
    TemplateSyntaxError,
    meta,
)
from pydantic import BaseModel

from ..models.errors import (
    InvalidRequestError,
    SerializationError,
    UnresolvedPlaceholderError,
)

logger = logging.getLogger(__name__)

_TEMPLATE_MARKERS = ("{{", "{%", "{#")

# RFC 3986 scheme followed by "://"
_ABSOLUTE_URL_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")

# RFC 7230 token
_HEADER_NAME_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

_environment = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def render_endpoint(template: str, path_params: Mapping[str, str]) -> str:
    """Substitute every placeholder in ``template`` with its path parameter.

    Values are percent-encoded as single path segments before substitution,
    so ``"a/b"`` renders as ``a%2Fb``. Templates without placeholder syntax
    are returned unchanged. Supplied parameters the template never references
    are ignored with a warning.

    Raises:
        UnresolvedPlaceholderError: A placeholder has no path parameter.
        InvalidRequestError: The template is malformed or fails to render.
    """
    if not any(marker in template for marker in _TEMPLATE_MARKERS):
        if path_params:
            logger.warning(
                "Path parameters %s supplied but endpoint '%s' has no placeholders",
                sorted(path_params),
                template,
            )
        return template

    try:
        parsed = _environment.parse(template)
    except TemplateSyntaxError as e:
        raise InvalidRequestError(
            f"malformed endpoint template '{template}': {e.message}"
        ) from e

    placeholders = meta.find_undeclared_variables(parsed)
    missing = placeholders - set(path_params)
    if missing:
        raise UnresolvedPlaceholderError(template, missing)

    unused = set(path_params) - placeholders
    if unused:
        logger.warning(
            "Path parameters %s are not used by endpoint '%s'",
            sorted(unused),
            template,
        )

    # each value is one path segment: "/", "?" and "#" are encoded too
    encoded = {key: quote(value, safe="") for key, value in path_params.items()}
    try:
        return _environment.from_string(template).render(encoded)
    except (TemplateError, TypeError, ValueError, ArithmeticError, LookupError) as e:
        raise InvalidRequestError(
            f"cannot render endpoint template '{template}': {e}"
        ) from e


def append_query_string(endpoint: str, query_params: Mapping[str, str]) -> str:
    """Append ``query_params`` to ``endpoint`` as a percent-encoded query string.

    An existing query is extended with ``&``; a fragment stays at the end.
    """
    if not query_params:
        return endpoint

    base, hash_sign, fragment = endpoint.partition("#")
    query = urlencode(dict(query_params), quote_via=quote)

    if "?" not in base:
        separator = "?"
    elif base.endswith(("?", "&")):
        separator = ""
    else:
        separator = "&"

    return f"{base}{separator}{query}{hash_sign}{fragment}"


def join_base_url(endpoint: str, base_url: Optional[str]) -> str:
    """Prefix a relative ``endpoint`` with ``base_url``.

    An endpoint counts as absolute only when it starts with a scheme, so
    ``"/redirect?to=https://a.test"`` is still joined.
    """
    if base_url is None or _ABSOLUTE_URL_PATTERN.match(endpoint):
        return endpoint
    if not endpoint:
        return base_url
    return f"{base_url}/{endpoint.lstrip('/')}"


def validate_url(url: str) -> str:
    """Check that ``url`` parses and is an absolute http(s) URL.

    Raises:
        InvalidRequestError: The URL is malformed, relative or not http(s).
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidRequestError(f"invalid URL '{url}': {e}") from e

    if not parsed.is_absolute_url or not parsed.host:
        raise InvalidRequestError(
            f"URL '{url}' is not absolute; pass a full URL or configure a base_url"
        )
    if parsed.scheme not in ("http", "https"):
        raise InvalidRequestError(
            f"unsupported URL scheme '{parsed.scheme}' in '{url}'"
        )
    return url


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_body(body: Any) -> str:
    """Serialize a request body to its string wire form.

    Strings are sent verbatim, ``None`` becomes an empty body and pydantic
    models are dumped by alias. Everything else goes through ``json.dumps``;
    ``NaN`` and infinities are rejected since JSON has no literal for them.

    Raises:
        SerializationError: The body cannot be represented as JSON.
    """
    if body is None:
        return ""
    if isinstance(body, str):
        return body

    try:
        if isinstance(body, BaseModel):
            return body.model_dump_json(by_alias=True)
        return json.dumps(body, default=_to_jsonable, allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(body, str(e)) from e


def encode_body(body: str, encoding: str, source: Any = None) -> bytes:
    try:
        return body.encode(encoding)
    except UnicodeEncodeError as e:
        raise SerializationError(
            source if source is not None else body,
            f"cannot encode body as {encoding}: {e.reason}",
        ) from e


def validate_encoding(encoding: str) -> str:
    try:
        return codecs.lookup(encoding).name
    except LookupError as e:
        raise InvalidRequestError(f"unknown content encoding '{encoding}'") from e


def validate_headers(headers: Iterable[tuple[str, str]]) -> None:
    for name, value in headers:
        if not _HEADER_NAME_PATTERN.match(name):
            raise InvalidRequestError(f"invalid header name '{name}'")
        if "\r" in value or "\n" in value or "\x00" in value:
            raise InvalidRequestError(
                f"invalid value for header '{name}': line breaks are not allowed"
            )
