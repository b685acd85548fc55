"""httpx transport integration."""

from hostqueue.transport.queued import (
    QueuedTransport,
    create_client,
    request_options,
    resolve_group_key,
)

__all__ = [
    "QueuedTransport",
    "create_client",
    "request_options",
    "resolve_group_key",
]
