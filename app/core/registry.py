"""Metrics registry owned by the application context.

prometheus_client ships a process-global ``REGISTRY``.  The service does
not use it: each application context owns one ``CollectorRegistry`` so
that the registry's lifetime is the application's lifetime and tests can
build as many isolated applications as they like.

The service only ever registers one metric of its own (see
``app.api.metrics_endpoint``).  Other code may register more through
``register_gauge`` or by handing its own collectors to
``collector_registry``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from prometheus_client import CollectorRegistry, Gauge
from prometheus_client.metrics_core import Metric

from app.core.errors import DuplicateMetricRegistration

logger = logging.getLogger(__name__)


class MetricsSnapshot:
    """Point-in-time list of metric families.

    Exposes ``collect()`` so the prometheus_client encoders accept it in
    place of a registry.
    """

    def __init__(self, families: list[Metric]) -> None:
        self._families = families

    def collect(self) -> Iterator[Metric]:
        return iter(self._families)

    def __iter__(self) -> Iterator[Metric]:
        return iter(self._families)

    def __len__(self) -> int:
        return len(self._families)


class MetricsRegistry:
    """Thin wrapper over ``CollectorRegistry``.

    Registration and collection thread-safety come from prometheus_client;
    no extra locking happens here.
    """

    def __init__(self, collector_registry: CollectorRegistry | None = None) -> None:
        self.collector_registry = collector_registry or CollectorRegistry(
            auto_describe=True
        )

    def register_gauge(self, name: str, documentation: str) -> Gauge:
        """Create a gauge in this registry.

        Raises DuplicateMetricRegistration if the name is already taken,
        whether through this wrapper or by a collector registered directly
        on ``collector_registry``.
        """
        # _names_to_collectors is the index CollectorRegistry.register checks.
        if name in self.collector_registry._names_to_collectors:
            logger.error("Refusing duplicate registration of metric %s", name)
            raise DuplicateMetricRegistration(name)
        gauge = Gauge(name, documentation, registry=self.collector_registry)
        logger.debug("Registered gauge %s", name)
        return gauge

    def set(self, handle: Gauge, value: float) -> None:
        handle.set(value)

    def snapshot(self) -> MetricsSnapshot:
        """Collect every family once, in registration order."""
        return MetricsSnapshot(list(self.collector_registry.collect()))
