"""
Core data models for hostqueue.

Defines the router-wide defaults and the per-request overrides.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from hostqueue.core.config import Settings, get_settings


class QueueOptions(BaseModel):
    """Defaults applied to every group a router creates."""

    model_config = ConfigDict(frozen=True)

    max_concurrent: int = Field(
        default=2, ge=1, description="Max in-flight requests per group"
    )
    delay_ms: int = Field(
        default=300, ge=0, description="Cooldown after a completion, in milliseconds"
    )
    debug: bool = Field(default=False, description="Log admissions and releases")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "QueueOptions":
        """Build options from application settings."""
        settings = settings or get_settings()
        return cls(
            max_concurrent=settings.queue.max_concurrent,
            delay_ms=settings.queue.delay_ms,
            debug=settings.queue.debug,
        )


class RequestOptions(BaseModel):
    """
    Per-request overrides.

    Any field left as None falls back to the router's QueueOptions.
    max_concurrent only takes effect for the call that creates a group.
    """

    model_config = ConfigDict(frozen=True)

    priority: int | None = Field(default=None, description="Lower is more urgent")
    delay_ms: int | None = Field(default=None, ge=0)
    max_concurrent: int | None = Field(default=None, ge=1)
    group: str | None = Field(default=None, description="Explicit group key")
