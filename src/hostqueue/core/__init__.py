"""Core configuration and models."""

from hostqueue.core.config import Settings, get_settings, reload_settings
from hostqueue.core.models import QueueOptions, RequestOptions

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "QueueOptions",
    "RequestOptions",
]
