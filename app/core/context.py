from __future__ import annotations

from dataclasses import dataclass, field

from prometheus_client import Gauge

from app.core.config import Settings
from app.core.registry import MetricsRegistry


@dataclass
class AppContext:
    """Everything an application instance owns for its whole lifetime.

    Built once by ``create_app`` and handed to the route builders, instead
    of the routes reaching for module-level singletons.  ``service_up`` is
    filled in when the metrics route is defined and never replaced.
    """

    settings: Settings
    registry: MetricsRegistry = field(default_factory=MetricsRegistry)
    service_up: Gauge | None = None
