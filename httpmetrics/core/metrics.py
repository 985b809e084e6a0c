"""The four HTTP instruments shared by every request.

Instruments are created through a ``MetricRegistry`` so that building the
set twice for the same subsystem returns the *same* Counter/Summary objects
instead of duplicating them in the Prometheus registry.
"""

from __future__ import annotations

from dataclasses import dataclass

from prometheus_client import Counter, Summary

from httpmetrics.core.registry import MetricRegistry

REQUEST_LABELS = ("code", "method", "handler")


@dataclass(frozen=True)
class HTTPInstruments:
    requests_total: Counter
    request_duration: Summary
    request_size: Summary
    response_size: Summary

    @classmethod
    def register(cls, registry: MetricRegistry, subsystem: str, namespace: str = "") -> HTTPInstruments:
        """Register (or fetch) the instrument set for *subsystem* on *registry*."""
        return cls(
            requests_total=registry.counter(
                "requests_total",
                "How many HTTP requests processed, partitioned by status code and HTTP method.",
                labelnames=REQUEST_LABELS,
                subsystem=subsystem,
                namespace=namespace,
            ),
            request_duration=registry.summary(
                "request_duration_microseconds",
                "The HTTP request latencies in microseconds.",
                subsystem=subsystem,
                namespace=namespace,
            ),
            request_size=registry.summary(
                "request_size_bytes",
                "The HTTP request sizes in bytes.",
                subsystem=subsystem,
                namespace=namespace,
            ),
            response_size=registry.summary(
                "response_size_bytes",
                "The HTTP response sizes in bytes.",
                subsystem=subsystem,
                namespace=namespace,
            ),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def increment_request(self, code: int | str, method: str, handler: str) -> None:
        """Increment the request counter."""
        self.requests_total.labels(str(code), method, handler).inc()

    def observe_duration(self, microseconds: float) -> None:
        """Record request latency in microseconds."""
        self.request_duration.observe(microseconds)

    def observe_request_size(self, size: int) -> None:
        self.request_size.observe(size)

    def observe_response_size(self, size: int) -> None:
        self.response_size.observe(size)
