import base64
from typing import Any, Iterable, Mapping, Optional, Union

from ._config import load_config
from ._services._dispatcher import (
    Dispatcher,
    get_default_config,
    get_default_dispatcher,
)
from ._utils._request_spec import ResolvedRequest
from ._utils._resolve import (
    append_query_string,
    encode_body,
    join_base_url,
    render_endpoint,
    serialize_body,
    validate_encoding,
    validate_headers,
    validate_url,
)
from ._utils.constants import (
    DEFAULT_CONTENT_ENCODING,
    DEFAULT_CONTENT_TYPE,
    HEADER_ACCEPT,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
)
from ._verifiable_response import VerifiableResponse
from .models.errors import RequestAlreadySentError


class RequestSpecification:
    """The request to be sent.

    Settings accumulate through chained calls; every non-terminal method
    returns the same instance. A terminal verb (``get``, ``post``, ``put``,
    ``patch``, ``delete`` or ``send``) resolves the request, dispatches it and
    returns a :class:`VerifiableResponse`. A specification is single-use:
    a second terminal call raises :class:`RequestAlreadySentError`.
    ``resolve`` can be called at any time and never dispatches.

    Examples:
        >>> (
        ...     given()
        ...     .path_param("id", 7)
        ...     .query_param("expand", "owner")
        ...     .when()
        ...     .get("https://api.example.com/items/{{id}}")
        ...     .then()
        ...     .status_code(200)
        ... )
    """

    def __init__(self, dispatcher: Optional[Dispatcher] = None) -> None:
        self._dispatcher = dispatcher
        self._owns_dispatcher = False

        self._headers: list[tuple[str, str]] = []
        self._query_params: dict[str, str] = {}
        self._path_params: dict[str, str] = {}
        self._content_type = DEFAULT_CONTENT_TYPE
        self._content_encoding = DEFAULT_CONTENT_ENCODING
        self._body: Any = ""
        self._timeout: Union[int, float] | None = None

        self._sent: Optional[ResolvedRequest] = None

    def header(
        self, key: str, value: Union[Any, Iterable[str]]
    ) -> "RequestSpecification":
        """Add a request header; existing values for ``key`` are kept.

        ``value`` may be a single value or a list/tuple of values. A
        ``Content-Type`` header is stored as the content type instead; when
        several values are given for it, the last one wins.

        Args:
            key: The header name.
            value: The header value, or a list/tuple of values.

        Returns:
            RequestSpecification: The current specification.
        """
        values = value if isinstance(value, (list, tuple)) else [value]

        if key.lower() == HEADER_CONTENT_TYPE.lower():
            if not values:
                return self
            return self.content_type(str(values[-1]))

        self._headers.extend((key, str(item)) for item in values)
        return self

    def headers(self, headers: Mapping[str, Any]) -> "RequestSpecification":
        for key, value in headers.items():
            self.header(key, value)
        return self

    def content_type(self, content_type: str) -> "RequestSpecification":
        """Set the Content-Type sent with the body.

        Args:
            content_type: The media type, e.g. ``"text/csv"``. Not validated.

        Returns:
            RequestSpecification: The current specification.
        """
        self._content_type = content_type
        return self

    def content_encoding(self, encoding: str) -> "RequestSpecification":
        """Set the character encoding used for the body, e.g. ``"utf-16"``."""
        self._content_encoding = encoding
        return self

    def accept(self, accept: str) -> "RequestSpecification":
        """Add an ``Accept`` header value; earlier values are kept."""
        self._headers.append((HEADER_ACCEPT, accept))
        return self

    def query_param(self, key: str, value: Any) -> "RequestSpecification":
        """Add a query parameter, replacing an earlier value for ``key``.

        Args:
            key: The query parameter name.
            value: The value; converted with ``str()`` and percent-encoded
                when the request is resolved.

        Returns:
            RequestSpecification: The current specification.
        """
        self._query_params[key] = str(value)
        return self

    def query_params(self, query_params: Mapping[str, Any]) -> "RequestSpecification":
        for key, value in query_params.items():
            self.query_param(key, value)
        return self

    def path_param(self, key: str, value: Any) -> "RequestSpecification":
        """Set the value of the ``{{key}}`` placeholder in the endpoint.

        The value is converted with ``str()`` and percent-encoded as a single
        path segment, so ``/``, ``?`` and ``#`` cannot change the URL layout.

        Args:
            key: The placeholder name.
            value: The value substituted for the placeholder.

        Returns:
            RequestSpecification: The current specification.
        """
        self._path_params[key] = str(value)
        return self

    def path_params(self, path_params: Mapping[str, Any]) -> "RequestSpecification":
        for key, value in path_params.items():
            self.path_param(key, value)
        return self

    def basic_auth(self, username: str, password: str) -> "RequestSpecification":
        """Authenticate with HTTP Basic credentials.

        Replaces any Authorization header set before.

        Args:
            username: The user name.
            password: The password.

        Returns:
            RequestSpecification: The current specification.
        """
        credentials = base64.b64encode(f"{username}:{password}".encode()).decode(
            "ascii"
        )
        return self._authorization(f"Basic {credentials}")

    def oauth2(self, token: str) -> "RequestSpecification":
        """Authenticate with an OAuth2 bearer token.

        Replaces any Authorization header set before.
        """
        return self._authorization(f"Bearer {token}")

    def _authorization(self, value: str) -> "RequestSpecification":
        self._headers = [
            (key, existing)
            for key, existing in self._headers
            if key.lower() != HEADER_AUTHORIZATION.lower()
        ]
        self._headers.append((HEADER_AUTHORIZATION, value))
        return self

    def body(self, body: Any) -> "RequestSpecification":
        """Set the request body.

        Strings are sent as they are. Any other value is serialized to JSON
        when the request is resolved.
        """
        self._body = body
        return self

    def timeout(self, seconds: Union[int, float]) -> "RequestSpecification":
        """Override the dispatcher's transport timeout for this request.

        Args:
            seconds: Connect, read, write and pool timeout in seconds.

        Returns:
            RequestSpecification: The current specification.
        """
        self._timeout = seconds
        return self

    def and_(self) -> "RequestSpecification":
        return self

    def when(self) -> "RequestSpecification":
        return self

    def resolve(self, method: str, endpoint: str) -> ResolvedRequest:
        """Resolve the accumulated settings into an immutable request.

        Args:
            method: The HTTP method.
            endpoint: The endpoint, optionally with ``{{name}}`` placeholders
                and relative to the configured base URL.

        Returns:
            ResolvedRequest: The request as it would be sent.

        Raises:
            UnresolvedPlaceholderError: A placeholder has no path parameter.
            InvalidRequestError: The URL, a header or the encoding is invalid.
            SerializationError: The body cannot be serialized or encoded.
        """
        url = render_endpoint(endpoint, self._path_params)
        url = join_base_url(url, self._base_url)
        url = append_query_string(url, self._query_params)
        validate_url(url)

        validate_headers(self._headers)
        encoding = validate_encoding(self._content_encoding)

        body = serialize_body(self._body)
        encode_body(body, encoding, source=self._body)

        return ResolvedRequest(
            method=method.upper(),
            url=url,
            headers=tuple(self._headers),
            body=body,
            content_type=self._content_type,
            content_encoding=encoding,
            timeout=self._timeout,
        )

    @property
    def _base_url(self) -> Optional[str]:
        if self._dispatcher is not None:
            return self._dispatcher.config.base_url
        # resolving alone never starts the shared dispatcher
        return get_default_config().base_url

    def _get_dispatcher(self) -> Dispatcher:
        if self._dispatcher is None:
            self._dispatcher = get_default_dispatcher()
        return self._dispatcher

    def send(self, method: str, endpoint: str) -> VerifiableResponse:
        """Resolve the request and send it.

        A dispatcher created by ``given(**config)`` is closed afterwards.

        Args:
            method: The HTTP method.
            endpoint: The endpoint, as accepted by :meth:`resolve`.

        Returns:
            VerifiableResponse: The response, whatever its status code.

        Raises:
            RequestAlreadySentError: The specification was already sent.
            InvalidRequestError: The request cannot be resolved.
            SerializationError: The body cannot be serialized or encoded.
            TransportError: No response was received.
        """
        if self._sent is not None:
            raise RequestAlreadySentError(self._sent.method, self._sent.url)

        resolved = self.resolve(method, endpoint)
        self._sent = resolved
        try:
            outcome = self._get_dispatcher().send(resolved)
        finally:
            # only closes a dispatcher created by given(**config)
            self.close()
        return VerifiableResponse(outcome)

    def get(self, endpoint: str) -> VerifiableResponse:
        """Send a GET request to ``endpoint``; see :meth:`send`."""
        return self.send("GET", endpoint)

    def post(self, endpoint: str) -> VerifiableResponse:
        """Send a POST request to ``endpoint``; see :meth:`send`."""
        return self.send("POST", endpoint)

    def put(self, endpoint: str) -> VerifiableResponse:
        return self.send("PUT", endpoint)

    def patch(self, endpoint: str) -> VerifiableResponse:
        return self.send("PATCH", endpoint)

    def delete(self, endpoint: str) -> VerifiableResponse:
        return self.send("DELETE", endpoint)

    def close(self) -> None:
        """Close the dispatcher if this specification created it."""
        if self._owns_dispatcher and self._dispatcher is not None:
            self._dispatcher.close()

    def __enter__(self) -> "RequestSpecification":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def given(
    dispatcher: Optional[Dispatcher] = None, **config: Any
) -> RequestSpecification:
    """Start a new request specification.

    Args:
        dispatcher: Dispatcher to send the request with. Defaults to the
            shared dispatcher configured from the environment.
        **config: :class:`~restassured.Config` fields; when given, a
            dedicated dispatcher is created and closed with the
            specification.

    Returns:
        RequestSpecification: A fresh, empty specification.
    """
    if config:
        if dispatcher is not None:
            raise ValueError("Pass either a dispatcher or config fields, not both")

        specification = RequestSpecification(Dispatcher(load_config(**config)))
        specification._owns_dispatcher = True
        return specification

    return RequestSpecification(dispatcher)
