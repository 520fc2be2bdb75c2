from typing import Any, Iterable, Optional


class RestAssuredError(Exception):
    """Base class for every error raised while building or sending a request."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidRequestError(RestAssuredError):
    """Raised when the request cannot be turned into a valid HTTP request.

    Covers malformed endpoint templates, URLs that do not parse or are not
    absolute, invalid header names or values and unknown content encodings.
    """

    def __init__(self, message: str):
        super().__init__(f"Request resolution failed: {message}")


class UnresolvedPlaceholderError(InvalidRequestError):
    """Raised when an endpoint placeholder has no matching path parameter."""

    def __init__(self, template: str, placeholders: Iterable[str]):
        self.template = template
        self.placeholders = sorted(placeholders)
        names = ", ".join(f"'{name}'" for name in self.placeholders)
        super().__init__(
            f"no path parameter supplied for placeholder(s) {names} in '{template}'"
        )


class RequestAlreadySentError(InvalidRequestError):
    def __init__(self, method: str, url: str):
        self.method = method
        self.url = url
        super().__init__(
            f"this request specification was already sent ({method} {url}); "
            "create a new one with given() for every request"
        )


class SerializationError(RestAssuredError):
    """Raised when the request body cannot be converted to its wire form."""

    def __init__(self, body: Any, reason: str):
        self.body_type = type(body).__name__
        super().__init__(
            f"Request body serialization failed for {self.body_type}: {reason}"
        )


class TransportError(RestAssuredError):
    """Raised when the request never produced a response.

    Wraps connection failures, timeouts, DNS errors and protocol errors
    reported by the transport. The original exception is kept on ``cause``.
    """

    def __init__(self, cause: BaseException, request: Optional[Any] = None):
        self.cause = cause
        self.request = request
        target = f" for {request.method} {request.url}" if request is not None else ""
        detail = str(cause) or type(cause).__name__
        super().__init__(f"Transport failed{target}: {detail}")


class ResponseVerificationError(AssertionError):
    """Raised when a response does not meet an expectation."""

    def __init__(self, message: str, expected: Any = None, actual: Any = None):
        self.message = message
        self.expected = expected
        self.actual = actual
        super().__init__(self.message)
