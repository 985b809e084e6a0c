"""One-stop wiring of request metrics into a Starlette / FastAPI app.

Usage
-----
from fastapi import FastAPI
from httpmetrics import Prometheus

app = FastAPI()
Prometheus("myapp").use(app)    # middleware + GET /metrics

Or, when the middleware list is built up front:

app = FastAPI(middleware=[httpmetrics.middleware("myapp")])
"""

from __future__ import annotations

from typing import Any, Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware

from httpmetrics.core.metrics import HTTPInstruments
from httpmetrics.core.registry import MetricRegistry, get_default_registry
from httpmetrics.exposition import metrics_endpoint, render
from httpmetrics.middleware.metrics import (
    DEFAULT_METRICS_PATH,
    DEFAULT_SIZE_TIMEOUT,
    PrometheusMiddleware,
)


class Prometheus:
    """Request instrumentation for one subsystem.

    Instruments are registered on construction. Building a second instance
    with the same subsystem (and namespace) on the same registry reuses the
    existing instruments.

    Raises:
        MetricRegistrationError: an instrument name is already taken with an
            incompatible schema.
        ValueError: ``metrics_path`` is not absolute or ``size_timeout`` is
            not positive.
    """

    def __init__(
        self,
        subsystem: str,
        *,
        metrics_path: str = DEFAULT_METRICS_PATH,
        namespace: str = "",
        registry: Optional[MetricRegistry] = None,
        size_timeout: float = DEFAULT_SIZE_TIMEOUT,
    ) -> None:
        if not metrics_path.startswith("/"):
            raise ValueError(f"metrics_path must start with '/', got {metrics_path!r}")
        if size_timeout <= 0:
            raise ValueError(f"size_timeout must be positive, got {size_timeout!r}")

        self.subsystem = subsystem
        self.namespace = namespace
        self.metrics_path = metrics_path
        self.size_timeout = size_timeout
        self.registry = registry if registry is not None else get_default_registry()
        self.instruments = HTTPInstruments.register(self.registry, subsystem, namespace)

    def middleware(self) -> Middleware:
        """Middleware entry for ``Starlette(middleware=[...])``."""
        return Middleware(PrometheusMiddleware, **self._middleware_options())

    def use(self, app: Starlette) -> None:
        """Install the middleware and the exposition route on *app*."""
        app.add_middleware(PrometheusMiddleware, **self._middleware_options())
        app.add_route(
            self.metrics_path,
            metrics_endpoint(self.registry),
            methods=["GET"],
            include_in_schema=False,
        )

    def expose(self, accept: Optional[str] = None) -> tuple[bytes, str]:
        return render(self.registry, accept)

    def _middleware_options(self) -> dict[str, Any]:
        return {
            "instruments": self.instruments,
            "metrics_path": self.metrics_path,
            "size_timeout": self.size_timeout,
        }


def middleware(subsystem: str, **options: Any) -> Middleware:
    """Shortcut for ``Prometheus(subsystem, **options).middleware()``."""
    return Prometheus(subsystem, **options).middleware()
