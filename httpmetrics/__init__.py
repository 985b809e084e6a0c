"""
httpmetrics - Prometheus request metrics for Starlette and FastAPI applications.
"""

from httpmetrics.core.counter import SizeCounter
from httpmetrics.core.metrics import HTTPInstruments
from httpmetrics.core.registry import (
    MetricDescriptor,
    MetricKind,
    MetricRegistry,
    get_default_registry,
)
from httpmetrics.errors import MetricRegistrationError, MetricSchemaMismatchError, MetricsError
from httpmetrics.exposition import metrics_endpoint, render
from httpmetrics.middleware.metrics import PrometheusMiddleware
from httpmetrics.prometheus import Prometheus, middleware

__version__ = "0.1.0"
__all__ = [
    "Prometheus",
    "middleware",
    "PrometheusMiddleware",
    "HTTPInstruments",
    "MetricRegistry",
    "MetricDescriptor",
    "MetricKind",
    "get_default_registry",
    "SizeCounter",
    "render",
    "metrics_endpoint",
    "MetricsError",
    "MetricRegistrationError",
    "MetricSchemaMismatchError",
]
