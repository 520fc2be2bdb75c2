import asyncio
import atexit
from importlib.metadata import PackageNotFoundError, version
from logging import getLogger
from typing import Any, Optional

import httpx
from httpx import AsyncClient, Headers

from .._config import Config, load_config
from .._utils._errors import handle_transport_errors
from .._utils._request_spec import Outcome, ResolvedRequest
from .._utils._ssl_context import get_httpx_client_kwargs
from .._utils.constants import (
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    HEADER_USER_AGENT,
    PACKAGE_NAME,
    USER_AGENT_PRODUCT,
)


def user_agent_value() -> str:
    try:
        package_version = version(PACKAGE_NAME)
    except PackageNotFoundError:
        package_version = "unknown"
    return f"{USER_AGENT_PRODUCT}/{package_version}"


def _redact(headers: Any) -> list[tuple[str, str]]:
    return [
        (key, "[redacted]" if key.lower() == HEADER_AUTHORIZATION.lower() else value)
        for key, value in headers
    ]


class Dispatcher:
    """Sends resolved requests and waits for their outcome.

    The transport is asynchronous; ``send`` blocks the calling thread until
    the response has been read completely (or the transport failed), so test
    code can stay linear. The dispatcher owns a private event loop and an
    ``httpx.AsyncClient`` that is reused across sequential calls. Timeouts
    are entirely the transport's. Nothing is retried.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._logger = getLogger("restassured")
        self._config = config or load_config()

        client_kwargs: dict[str, Any] = {
            **get_httpx_client_kwargs(self._config),
            "headers": Headers(self.default_headers),
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client_kwargs = client_kwargs

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._client: Optional[AsyncClient] = None
        self._closed = False

    @property
    def config(self) -> Config:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def default_headers(self) -> dict[str, str]:
        return {
            HEADER_USER_AGENT: user_agent_value(),
            **self._config.default_headers,
        }

    def send(self, request: ResolvedRequest) -> Outcome:
        """Send ``request`` and block until its outcome is available.

        HTTP error statuses are returned like any other outcome.

        Raises:
            TransportError: No response was produced.
            RuntimeError: The dispatcher is closed, or the calling thread is
                already running an event loop (use ``send_async`` there).
        """
        if self._closed:
            raise RuntimeError("Cannot send a request with a closed Dispatcher")

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Dispatcher.send() blocks and cannot be called from a running "
                "event loop; await Dispatcher.send_async() instead"
            )

        if self._loop is None:
            self._loop = asyncio.new_event_loop()
        if self._client is None:
            self._client = AsyncClient(**self._client_kwargs)

        return self._loop.run_until_complete(self._send(self._client, request))

    async def send_async(self, request: ResolvedRequest) -> Outcome:
        """Send ``request`` on the caller's event loop.

        A client is opened for this call only and closed on every exit path.
        """
        if self._closed:
            raise RuntimeError("Cannot send a request with a closed Dispatcher")

        async with AsyncClient(**self._client_kwargs) as client:
            return await self._send(client, request)

    async def _send(self, client: AsyncClient, request: ResolvedRequest) -> Outcome:
        headers = [*request.headers, (HEADER_CONTENT_TYPE, request.content_type)]
        timeout = (
            request.timeout
            if request.timeout is not None
            else httpx.USE_CLIENT_DEFAULT
        )

        self._logger.debug(f"Request: {request.method} {request.url}")
        self._logger.debug(f"HEADERS: {_redact(headers)}")

        with handle_transport_errors(request):
            async with client.stream(
                request.method,
                request.url,
                headers=headers,
                content=request.content,
                timeout=timeout,
            ) as response:
                content = await response.aread()

        outcome = Outcome(
            status_code=response.status_code,
            headers=response.headers,
            content=content,
            elapsed=response.elapsed,
            request=request,
            encoding=response.encoding,
        )

        self._logger.debug(
            f"Response: {outcome.status_code} for {request.method} {request.url} "
            f"in {outcome.elapsed.total_seconds() * 1000:.0f}ms"
        )
        return outcome

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        if self._loop is not None:
            if self._client is not None:
                self._loop.run_until_complete(self._client.aclose())
            self._loop.close()
        self._client = None
        self._loop = None

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


_default_dispatcher: Optional[Dispatcher] = None


def get_default_dispatcher() -> Dispatcher:
    """Shared dispatcher used by ``given()``, configured from the environment."""
    global _default_dispatcher
    if _default_dispatcher is None or _default_dispatcher.closed:
        _default_dispatcher = Dispatcher()
    return _default_dispatcher


def get_default_config() -> Config:
    """Configuration of the shared dispatcher, without starting one."""
    if _default_dispatcher is not None and not _default_dispatcher.closed:
        return _default_dispatcher.config
    return load_config()


def close_default_dispatcher() -> None:
    global _default_dispatcher
    if _default_dispatcher is not None:
        _default_dispatcher.close()
        _default_dispatcher = None


atexit.register(close_default_dispatcher)
