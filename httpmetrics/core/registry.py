"""Idempotent instrument registration on top of ``prometheus_client``.

``prometheus_client`` raises ``ValueError`` when the same metric is registered
twice, which makes constructing the middleware twice (tests, hot reload,
several apps in one process) blow up. ``MetricRegistry`` keeps its own
name -> instrument table next to a ``CollectorRegistry`` so repeat
registrations with a compatible schema hand back the live instrument, while
a conflicting schema is reported as a configuration error.

Example:
    registry = MetricRegistry()
    hits = registry.counter("hits_total", "Cache hits.", labelnames=("cache",))
    assert registry.counter("hits_total", "Cache hits.", labelnames=("cache",)) is hits
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Summary

from httpmetrics.errors import MetricRegistrationError, MetricSchemaMismatchError

logger = logging.getLogger(__name__)

Instrument = Union[Counter, Summary]


class MetricKind(str, Enum):
    COUNTER = "counter"
    SUMMARY = "summary"


_FACTORIES = {
    MetricKind.COUNTER: Counter,
    MetricKind.SUMMARY: Summary,
}


@dataclass(frozen=True)
class MetricDescriptor:
    """Everything needed to build (or look up) one instrument."""

    name: str
    documentation: str
    kind: MetricKind
    subsystem: str = ""
    namespace: str = ""
    labelnames: tuple[str, ...] = ()

    @property
    def full_name(self) -> str:
        """Composite ``namespace_subsystem_name``; counters always end in ``_total``."""
        name = "_".join(part for part in (self.namespace, self.subsystem, self.name) if part)
        if self.kind is MetricKind.COUNTER and not name.endswith("_total"):
            name += "_total"
        return name

    def is_compatible(self, other: MetricDescriptor) -> bool:
        # Help text is cosmetic and not part of the schema.
        return self.kind is other.kind and tuple(self.labelnames) == tuple(other.labelnames)


class MetricRegistry:
    """Thread-safe register-or-get façade over a ``CollectorRegistry``."""

    def __init__(self, collector_registry: Optional[CollectorRegistry] = None) -> None:
        self.collector_registry = (
            collector_registry if collector_registry is not None else CollectorRegistry()
        )
        self._lock = threading.Lock()
        self._instruments: dict[str, tuple[MetricDescriptor, Instrument]] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register_or_get(self, descriptor: MetricDescriptor) -> Instrument:
        """Return the instrument for *descriptor*, creating it on first use.

        Raises:
            MetricSchemaMismatchError: the name is taken by a different kind or label set.
            MetricRegistrationError: the collector registry refused the instrument.
        """
        full_name = descriptor.full_name
        with self._lock:
            entry = self._instruments.get(full_name)
            if entry is not None:
                existing, instrument = entry
                if not existing.is_compatible(descriptor):
                    raise MetricSchemaMismatchError(full_name, existing, descriptor)
                return instrument

            instrument = self._create(descriptor)
            self._instruments[full_name] = (descriptor, instrument)

        logger.info("Registered %s %s", descriptor.kind.value, full_name)
        return instrument

    def counter(
        self,
        name: str,
        documentation: str,
        labelnames: tuple[str, ...] = (),
        subsystem: str = "",
        namespace: str = "",
    ) -> Counter:
        descriptor = MetricDescriptor(
            name=name,
            documentation=documentation,
            kind=MetricKind.COUNTER,
            subsystem=subsystem,
            namespace=namespace,
            labelnames=tuple(labelnames),
        )
        return self.register_or_get(descriptor)  # type: ignore[return-value]

    def summary(
        self,
        name: str,
        documentation: str,
        labelnames: tuple[str, ...] = (),
        subsystem: str = "",
        namespace: str = "",
    ) -> Summary:
        descriptor = MetricDescriptor(
            name=name,
            documentation=documentation,
            kind=MetricKind.SUMMARY,
            subsystem=subsystem,
            namespace=namespace,
            labelnames=tuple(labelnames),
        )
        return self.register_or_get(descriptor)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def get(self, full_name: str) -> Optional[Instrument]:
        with self._lock:
            entry = self._instruments.get(full_name)
        return entry[1] if entry is not None else None

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._instruments)

    def _create(self, descriptor: MetricDescriptor) -> Instrument:
        factory = _FACTORIES[descriptor.kind]
        try:
            return factory(
                descriptor.name,
                descriptor.documentation,
                labelnames=descriptor.labelnames,
                namespace=descriptor.namespace,
                subsystem=descriptor.subsystem,
                registry=self.collector_registry,
            )
        except ValueError as exc:
            raise MetricRegistrationError(
                f"Cannot register {descriptor.kind.value} {descriptor.full_name!r}: {exc}",
                details={"name": descriptor.full_name, "kind": descriptor.kind.value},
            ) from exc


_default_registry: Optional[MetricRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> MetricRegistry:
    """Return the process-wide adapter bound to ``prometheus_client.REGISTRY``."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = MetricRegistry(REGISTRY)
        return _default_registry
