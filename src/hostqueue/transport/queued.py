"""
httpx integration.

Gates every outgoing request of an httpx.AsyncClient through a QueueRouter,
keyed by destination host. The slot is released when the response body is
closed, or immediately when the request fails.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Callable

import httpx
import structlog

from hostqueue.core.models import QueueOptions, RequestOptions
from hostqueue.queue.router import QueueRouter
from hostqueue.utils.logging import group_context

logger = structlog.get_logger()

UNKNOWN_GROUP = "UNKNOWN"

# Request extensions read for per-request overrides
PRIORITY_EXTENSION = "queue_priority"
DELAY_EXTENSION = "queue_delay_ms"
MAX_CONCURRENT_EXTENSION = "queue_max_concurrent"
GROUP_EXTENSION = "queue_group"

ConfigureHook = Callable[[httpx.Request, RequestOptions], "RequestOptions | None"]


def request_options(request: httpx.Request) -> RequestOptions:
    """Read per-request overrides from the request extensions."""
    extensions = request.extensions
    return RequestOptions(
        priority=extensions.get(PRIORITY_EXTENSION),
        delay_ms=extensions.get(DELAY_EXTENSION),
        max_concurrent=extensions.get(MAX_CONCURRENT_EXTENSION),
        group=extensions.get(GROUP_EXTENSION),
    )


def resolve_group_key(
    request: httpx.Request, options: RequestOptions | None = None
) -> str:
    """
    Compute the group a request belongs to.

    An explicit group override wins, then the URL's host[:port].
    """
    if options is not None and options.group:
        return options.group

    group = request.extensions.get(GROUP_EXTENSION)
    if group:
        return str(group)

    netloc = request.url.netloc.decode("ascii")
    return netloc or UNKNOWN_GROUP


class _ReleasingStream(httpx.AsyncByteStream):
    """Response stream that releases its slot once closed."""

    def __init__(self, stream: httpx.AsyncByteStream, release: Callable[[], None]):
        self._stream = stream
        self._release = release

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self._stream:
            yield chunk

    async def aclose(self) -> None:
        try:
            await self._stream.aclose()
        finally:
            self._release()


class QueuedTransport(httpx.AsyncBaseTransport):
    """
    Transport that waits for admission before sending.

    A router passed in may be shared by several clients and is left running
    when this transport closes. Without one, the transport builds its own
    router from options and tears it down in aclose().

    Example:
        router = QueueRouter(QueueOptions(max_concurrent=1, delay_ms=100))
        client = httpx.AsyncClient(transport=QueuedTransport(router))

        await client.get("https://api.example.com/a", extensions={"queue_priority": 1})
    """

    def __init__(
        self,
        router: QueueRouter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        configure: ConfigureHook | None = None,
        options: QueueOptions | None = None,
    ):
        # Only a router created here is torn down by aclose()
        self._owns_router = router is None
        self.router = router or QueueRouter(options or QueueOptions.from_settings())
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._configure = configure

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        options = request_options(request)
        if self._configure is not None:
            options = self._configure(request, options) or options

        group_key = resolve_group_key(request, options)
        request_id = await self.router.admit(group_key, options)

        released = False

        def release() -> None:
            nonlocal released
            if not released:
                released = True
                self.router.release(group_key, request_id)

        try:
            with group_context(group_key, request_id):
                response = await self._transport.handle_async_request(request)
        except BaseException:
            release()
            raise

        if not isinstance(response.stream, httpx.AsyncByteStream):
            release()
            return response

        return httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            stream=_ReleasingStream(response.stream, release),
            extensions=response.extensions,
        )

    async def aclose(self) -> None:
        if self._owns_router and not self.router.closed:
            self.router.teardown()
        await self._transport.aclose()


def create_client(
    options: QueueOptions | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    configure: ConfigureHook | None = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """
    Create an httpx.AsyncClient whose requests are queued per host.

    Closing the client tears down its router, resuming anything still queued.
    """
    queued = QueuedTransport(
        transport=transport,
        configure=configure,
        options=options,
    )
    return httpx.AsyncClient(transport=queued, **client_kwargs)
