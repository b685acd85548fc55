"""Utility modules for hostqueue."""

from hostqueue.utils.logging import setup_logging, get_logger, group_context

__all__ = [
    "setup_logging",
    "get_logger",
    "group_context",
]
