from contextlib import contextmanager
from typing import Generator, Optional

import httpx

from ..models.errors import TransportError
from ._request_spec import ResolvedRequest


@contextmanager
def handle_transport_errors(
    request: Optional[ResolvedRequest] = None,
) -> Generator[None, None, None]:
    """Context manager converting transport failures into TransportError.

    Only failures that prevented a response from being produced are
    converted. HTTP error statuses are not errors at this level and no
    other exception type is touched.

    Args:
        request: The request being sent, attached to the raised error.

    Yields:
        None: The context manager yields control to the wrapped code.

    Raises:
        TransportError: For connection, timeout, DNS, protocol and redirect
            failures.
    """
    try:
        yield
    except httpx.RequestError as e:
        raise TransportError(e, request=request) from e
