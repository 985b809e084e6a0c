"""Metric primitives: size counting, wire framing, registry and instruments."""
