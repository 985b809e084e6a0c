"""Shared fixtures and ASGI helpers for the httpmetrics test suite."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest
from prometheus_client import CollectorRegistry

from httpmetrics.core.registry import MetricRegistry

SUBSYSTEM = "test"


@pytest.fixture
def registry() -> MetricRegistry:
    """Fresh registry so tests never see each other's samples."""
    return MetricRegistry(CollectorRegistry())


def sample(registry: MetricRegistry, name: str, labels: Optional[dict[str, str]] = None) -> float:
    """Return a sample value, treating a missing series as 0."""
    value = registry.collector_registry.get_sample_value(name, labels or {})
    return value if value is not None else 0.0


def requests_total(registry: MetricRegistry, subsystem: str = SUBSYSTEM) -> float:
    """Sum of ``requests_total`` across every label combination."""
    total = 0.0
    for family in registry.collector_registry.collect():
        for s in family.samples:
            if s.name == f"{subsystem}_requests_total":
                total += s.value
    return total


def make_scope(
    method: str = "GET",
    path: str = "/foo",
    headers: tuple[tuple[bytes, bytes], ...] = ((b"host", b"example.com"),),
    query_string: bytes = b"",
) -> dict[str, Any]:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": query_string,
        "root_path": "",
        "headers": list(headers),
        "client": ("127.0.0.1", 51000),
        "server": ("example.com", 80),
    }


def make_receive(*chunks: bytes):
    """Receive channel delivering *chunks* as one streamed body, then disconnect."""
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks or (b"",))
    ]

    async def receive() -> dict[str, Any]:
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return receive


def hanging_receive():
    async def receive() -> dict[str, Any]:
        await asyncio.Event().wait()
        raise AssertionError("unreachable")

    return receive


class SendCollector:
    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def status(self) -> Optional[int]:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return message["status"]
        return None

    @property
    def body(self) -> bytes:
        return b"".join(
            m.get("body", b"") for m in self.messages if m["type"] == "http.response.body"
        )
