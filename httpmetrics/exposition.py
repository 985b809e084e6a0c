"""Exposition endpoint serving the registry in the Prometheus text format."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from prometheus_client.exposition import choose_encoder
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from httpmetrics.core.registry import MetricRegistry

logger = logging.getLogger(__name__)


def render(registry: MetricRegistry, accept: Optional[str] = None) -> tuple[bytes, str]:
    """Render every instrument in *registry*.

    The encoder is negotiated from *accept*: OpenMetrics when the client asks
    for ``application/openmetrics-text``, Prometheus text 0.0.4 otherwise.
    """
    encoder, content_type = choose_encoder(accept or "")
    return encoder(registry.collector_registry), content_type


def metrics_endpoint(registry: MetricRegistry) -> Callable[[Request], Awaitable[Response]]:
    """Build a Starlette endpoint that exposes *registry*."""

    async def metrics(request: Request) -> Response:
        try:
            body, content_type = render(registry, request.headers.get("accept"))
        except Exception:
            logger.exception("Failed to render metrics")
            return PlainTextResponse("Failed to render metrics", status_code=500)
        return Response(content=body, headers={"Content-Type": content_type})

    return metrics
