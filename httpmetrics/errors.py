"""Exceptions raised by httpmetrics."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpmetrics.core.registry import MetricDescriptor


class MetricsError(Exception):
    """Base exception for all httpmetrics errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class MetricRegistrationError(MetricsError):
    """Raised when an instrument cannot be registered.

    This is a configuration error: the application should not start serving
    traffic with an inconsistent registry, so callers are expected to let it
    propagate out of startup.
    """


class MetricSchemaMismatchError(MetricRegistrationError):
    """Raised when a metric name is already registered with a different schema."""

    def __init__(self, name: str, existing: MetricDescriptor, requested: MetricDescriptor):
        super().__init__(
            f"Metric {name!r} is already registered as {existing.kind.value} "
            f"with labels {list(existing.labelnames)}; cannot register it as "
            f"{requested.kind.value} with labels {list(requested.labelnames)}",
            details={
                "name": name,
                "existing_kind": existing.kind.value,
                "existing_labels": list(existing.labelnames),
                "requested_kind": requested.kind.value,
                "requested_labels": list(requested.labelnames),
            },
        )
        self.name = name
        self.existing = existing
        self.requested = requested
