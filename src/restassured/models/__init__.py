from .errors import (
    InvalidRequestError,
    RequestAlreadySentError,
    ResponseVerificationError,
    RestAssuredError,
    SerializationError,
    TransportError,
    UnresolvedPlaceholderError,
)

__all__ = [
    "InvalidRequestError",
    "RequestAlreadySentError",
    "ResponseVerificationError",
    "RestAssuredError",
    "SerializationError",
    "TransportError",
    "UnresolvedPlaceholderError",
]
