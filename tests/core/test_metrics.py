"""Tests for the HTTP instrument set (httpmetrics.core.metrics)."""

import pytest

from httpmetrics.core.metrics import REQUEST_LABELS, HTTPInstruments
from httpmetrics.errors import MetricSchemaMismatchError


class TestHTTPInstruments:
    def test_registers_four_instruments(self, registry):
        HTTPInstruments.register(registry, "app")
        assert registry.names() == [
            "app_request_duration_microseconds",
            "app_request_size_bytes",
            "app_requests_total",
            "app_response_size_bytes",
        ]

    def test_namespace_prefixes_names(self, registry):
        HTTPInstruments.register(registry, "app", namespace="shop")
        assert "shop_app_requests_total" in registry.names()

    def test_second_registration_shares_instruments(self, registry):
        first = HTTPInstruments.register(registry, "app")
        second = HTTPInstruments.register(registry, "app")
        assert first.requests_total is second.requests_total
        assert first.request_duration is second.request_duration
        assert first.request_size is second.request_size
        assert first.response_size is second.response_size

    def test_incompatible_existing_counter_is_fatal(self, registry):
        registry.counter("requests_total", "Other.", labelnames=("code",), subsystem="app")
        with pytest.raises(MetricSchemaMismatchError):
            HTTPInstruments.register(registry, "app")

    def test_increment_request(self, registry):
        instruments = HTTPInstruments.register(registry, "app")
        instruments.increment_request(200, "GET", "/foo")
        instruments.increment_request("200", "GET", "/foo")
        labels = dict(zip(REQUEST_LABELS, ("200", "GET", "/foo")))
        assert registry.collector_registry.get_sample_value("app_requests_total", labels) == 2

    def test_observations(self, registry):
        instruments = HTTPInstruments.register(registry, "app")
        instruments.observe_duration(1500.0)
        instruments.observe_request_size(120)
        instruments.observe_request_size(80)
        instruments.observe_response_size(1024)

        get = registry.collector_registry.get_sample_value
        assert get("app_request_duration_microseconds_sum") == 1500.0
        assert get("app_request_size_bytes_count") == 2
        assert get("app_request_size_bytes_sum") == 200
        assert get("app_response_size_bytes_sum") == 1024
