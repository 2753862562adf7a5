"""Tests for the context-owned metrics registry.

Each test builds its own MetricsRegistry, so unlike prometheus_client's
global REGISTRY nothing leaks between tests and no delta arithmetic is
needed.
"""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY, CollectorRegistry, Gauge

from app.core.errors import DuplicateMetricRegistration
from app.core.registry import MetricsRegistry


def test_register_gauge_starts_at_zero() -> None:
    registry = MetricsRegistry()
    registry.register_gauge("is_web_up", "Tells whether web service is up")
    assert registry.collector_registry.get_sample_value("is_web_up") == 0.0


def test_set_updates_the_sample() -> None:
    registry = MetricsRegistry()
    handle = registry.register_gauge("is_web_up", "Tells whether web service is up")
    registry.set(handle, 1)
    assert registry.collector_registry.get_sample_value("is_web_up") == 1.0


def test_duplicate_name_fails_loudly() -> None:
    registry = MetricsRegistry()
    registry.register_gauge("is_web_up", "first")
    with pytest.raises(DuplicateMetricRegistration) as excinfo:
        registry.register_gauge("is_web_up", "second")
    assert excinfo.value.name == "is_web_up"


def test_duplicate_leaves_first_gauge_intact() -> None:
    registry = MetricsRegistry()
    handle = registry.register_gauge("is_web_up", "first")
    registry.set(handle, 1)
    with pytest.raises(DuplicateMetricRegistration):
        registry.register_gauge("is_web_up", "second")
    assert registry.collector_registry.get_sample_value("is_web_up") == 1.0
    assert len(registry.snapshot()) == 1


def test_name_taken_by_foreign_collector_is_a_duplicate() -> None:
    registry = MetricsRegistry()
    Gauge("is_web_up", "registered elsewhere", registry=registry.collector_registry)
    with pytest.raises(DuplicateMetricRegistration):
        registry.register_gauge("is_web_up", "second")
    assert len(registry.snapshot()) == 1


def test_invalid_name_is_not_reported_as_duplicate() -> None:
    registry = MetricsRegistry()
    with pytest.raises(ValueError) as excinfo:
        registry.register_gauge("", "bad")
    assert not isinstance(excinfo.value, DuplicateMetricRegistration)


def test_same_name_in_separate_registries_is_fine() -> None:
    MetricsRegistry().register_gauge("is_web_up", "a")
    MetricsRegistry().register_gauge("is_web_up", "b")


def test_does_not_touch_the_global_registry() -> None:
    MetricsRegistry().register_gauge("only_in_context_registry", "x")
    assert REGISTRY.get_sample_value("only_in_context_registry") is None


def test_snapshot_preserves_registration_order() -> None:
    registry = MetricsRegistry()
    for name in ("b_metric", "a_metric", "c_metric"):
        registry.register_gauge(name, name)
    assert [family.name for family in registry.snapshot()] == [
        "b_metric",
        "a_metric",
        "c_metric",
    ]


def test_wraps_a_given_collector_registry() -> None:
    collector_registry = CollectorRegistry()
    registry = MetricsRegistry(collector_registry)
    registry.register_gauge("wrapped", "x")
    assert collector_registry.get_sample_value("wrapped") == 0.0
