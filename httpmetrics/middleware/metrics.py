"""ASGI middleware for Prometheus request metrics.

Records, for every HTTP request outside the metrics path, one increment of
``requests_total`` plus one sample each of latency, request size and
response size, using the shared instruments in ``httpmetrics.core.metrics``.

The request is sized while it is being handled: a background task writes the
request head into a ``SizeCounter`` and body chunks are counted as the
application pulls them from the server. Body the application never read is
drained and counted after it returns. The application sees exactly the
messages the server produced, in order and at its own pace.

A handler that raises is recorded as ``code="500"`` (or the status it had
already sent) before the exception is re-raised; a cancelled request is not
recorded.
"""
from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Any, Callable, Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from httpmetrics.core.counter import SizeCounter
from httpmetrics.core.metrics import HTTPInstruments
from httpmetrics.core.wire import write_request_head

logger = logging.getLogger(__name__)

DEFAULT_METRICS_PATH = "/metrics"
DEFAULT_SIZE_TIMEOUT = 5.0
UNMATCHED_HANDLER = "unmatched"


def handler_name(scope: Scope) -> str:
    """Identify the endpoint Starlette routed *scope* to as ``module.qualname``."""
    endpoint = scope.get("endpoint")
    if endpoint is None:
        return UNMATCHED_HANDLER
    qualname = getattr(endpoint, "__qualname__", None) or type(endpoint).__qualname__
    module = getattr(endpoint, "__module__", None)
    return f"{module}.{qualname}" if module else qualname


class RequestSizeProbe:
    """Measure the serialized size of a request as the app reads it.

    ``receive`` replaces the server's receive channel for the wrapped app.
    Every message is pulled from the server only when the app asks for it, so
    server flow control (and ``Expect: 100-continue``) behave as without the
    middleware; body chunks are counted on the way through. The request head
    is serialized by a background task started with ``start``. Whatever body
    the app left unread is drained by ``result`` once the app has returned.
    """

    def __init__(self, scope: Scope, receive: Receive) -> None:
        self._scope = scope
        self._receive = receive
        self._counter = SizeCounter()
        self._body_complete = False
        self._failed = False
        self._head_task: Optional[asyncio.Task[bool]] = None

    def start(self) -> None:
        self._head_task = asyncio.create_task(self._measure_head())

    async def receive(self) -> Message:
        try:
            message = await self._receive()
        except Exception:
            self._failed = True
            raise
        self._count(message)
        return message

    async def result(self, timeout: float, drain: bool = True) -> int:
        """Wait up to *timeout* seconds for the measured size; 0 when unavailable.

        With *drain* the unread remainder of the body is pulled from the server
        and counted; without it only what the app consumed is counted.
        """
        if self._head_task is None:
            raise RuntimeError("size measurement not started")
        try:
            return await asyncio.wait_for(self._finish(drain), timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Request size measurement for %s %s timed out after %.1fs",
                self._scope.get("method"),
                self._scope.get("path"),
                timeout,
            )
            return 0

    def cancel(self) -> None:
        if self._head_task is not None and not self._head_task.done():
            self._head_task.cancel()

    async def _measure_head(self) -> bool:
        try:
            write_request_head(self._scope, self._counter)
        except Exception:
            logger.debug("Could not serialize request head", exc_info=True)
            return False
        return True

    async def _finish(self, drain: bool) -> int:
        head_measured = await self._head_task
        if drain:
            await self._drain()
        if not head_measured or self._failed:
            return 0
        return self._counter.size

    async def _drain(self) -> None:
        while not self._body_complete and not self._failed:
            try:
                message = await self._receive()
            except Exception:
                logger.debug("Could not read the rest of the request body", exc_info=True)
                self._failed = True
                return
            self._count(message)

    def _count(self, message: Message) -> None:
        if self._body_complete:
            return
        if message["type"] != "http.request":
            # Disconnect before the body ended: count what arrived.
            self._body_complete = True
            return
        self._counter.write(message.get("body", b""))
        if not message.get("more_body", False):
            self._body_complete = True


class ResponseRecorder:
    """``send`` wrapper that captures the status code and body byte count."""

    def __init__(self, send: Send) -> None:
        self._send = send
        self.started = False
        self.status_code = 200
        self.size = 0

    async def send(self, message: Message) -> None:
        message_type = message["type"]
        if message_type == "http.response.start":
            self.started = True
            self.status_code = message["status"]
        elif message_type == "http.response.body":
            self.size += len(message.get("body", b""))
        elif message_type == "http.response.pathsend":
            self.size += _file_size(message["path"])
        await self._send(message)


def _file_size(path: str) -> int:
    try:
        return os.stat(path).st_size
    except OSError:
        logger.debug("Could not stat %s for response size", path, exc_info=True)
        return 0


class PrometheusMiddleware:
    """Pure ASGI middleware that records request count, latency and sizes.

    Parameters
    ----------
    app:
        The inner ASGI application.
    instruments:
        Instrument set the observations are recorded into.
    metrics_path:
        Path of the exposition endpoint. Requests to it are passed straight
        through and never measured.
    size_timeout:
        Seconds to wait for the request size (including draining unread body)
        once the response is complete.
    """

    def __init__(
        self,
        app: ASGIApp,
        instruments: HTTPInstruments,
        metrics_path: str = DEFAULT_METRICS_PATH,
        size_timeout: float = DEFAULT_SIZE_TIMEOUT,
    ) -> None:
        self.app = app
        self.instruments = instruments
        self.metrics_path = metrics_path
        self.size_timeout = size_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # Scrapes of the exposition endpoint must not measure themselves.
        if scope["path"] == self.metrics_path:
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()

        probe = RequestSizeProbe(scope, receive)
        probe.start()
        response = ResponseRecorder(send)

        try:
            await self.app(scope, probe.receive, response.send)
        except Exception:
            # ServerErrorMiddleware answers 500 unless a response already started.
            status = response.status_code if response.started else 500
            await self._observe(scope, start, status, probe, response, drain=False)
            raise
        except BaseException:
            probe.cancel()
            raise

        await self._observe(scope, start, response.status_code, probe, response)

    async def _observe(
        self,
        scope: Scope,
        start: float,
        status: int,
        probe: RequestSizeProbe,
        response: ResponseRecorder,
        drain: bool = True,
    ) -> None:
        elapsed = (time.perf_counter() - start) * 1_000_000

        self._record(self.instruments.observe_duration, elapsed)
        self._record(
            self.instruments.increment_request, str(status), scope["method"], handler_name(scope)
        )
        request_size = await probe.result(self.size_timeout, drain=drain)
        self._record(self.instruments.observe_request_size, request_size)
        self._record(self.instruments.observe_response_size, response.size)

    @staticmethod
    def _record(observe: Callable[..., None], *args: Any) -> None:
        try:
            observe(*args)
        except Exception:
            # Never allow metrics to impact request flow.
            logger.debug("Failed to record request metric", exc_info=True)
