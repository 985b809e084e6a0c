import asyncio
import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Request, Response

from httpmetrics.config import Settings, get_settings
from httpmetrics.core.registry import MetricRegistry
from httpmetrics.prometheus import Prometheus
from httpmetrics.utils.logger import configure_logging

logger = logging.getLogger(__name__)

MAX_PAYLOAD_BYTES = 10 * 1024 * 1024


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[MetricRegistry] = None,
) -> FastAPI:
    """Build the instrumented demo service."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="httpmetrics demo", version="0.1.0")

    prometheus = Prometheus(
        settings.subsystem,
        namespace=settings.namespace,
        metrics_path=settings.metrics_path,
        registry=registry,
        size_timeout=settings.size_timeout,
    )
    prometheus.use(app)
    app.state.prometheus = prometheus

    # ----- health check ------------------------------------------------------
    @app.get("/health", tags=["system"])
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    # ----- demo endpoints ----------------------------------------------------
    @app.post("/echo", tags=["demo"])
    async def echo(request: Request) -> Response:
        body = await request.body()
        logger.debug("Echoing %d bytes", len(body))
        return Response(content=body, media_type=request.headers.get("content-type"))

    @app.get("/payload/{size}", tags=["demo"])
    def payload(size: int) -> Response:
        if size < 0 or size > MAX_PAYLOAD_BYTES:
            raise HTTPException(status_code=400, detail=f"size must be between 0 and {MAX_PAYLOAD_BYTES}")
        return Response(content=b"x" * size, media_type="application/octet-stream")

    @app.get("/sleep/{ms}", tags=["demo"])
    async def sleep(ms: int) -> Dict[str, int]:
        if ms < 0:
            raise HTTPException(status_code=400, detail="ms must be non-negative")
        await asyncio.sleep(ms / 1000)
        return {"slept_ms": ms}

    logger.info(
        "Serving %s metrics on %s", settings.subsystem, settings.metrics_path
    )
    return app
