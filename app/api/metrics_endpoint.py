"""Monitoring metrics endpoint.

GET /api/monitoring/metrics returns every metric in the application's
registry, in the exposition format the caller's Accept header asks for
(see app.core.exposition).  It is scraped by Prometheus and must answer
in safe mode, before the rest of the application has started, so it
relies only on credentials that need no session:

  curl -H 'X-System-Passcode: ...'      http://host/api/monitoring/metrics
  curl -H 'Authorization: Bearer ...'   http://host/api/monitoring/metrics

Defining the route registers the ``is_web_up`` gauge at 0.  Whatever
completes startup is responsible for setting it to 1 through
``ctx.registry.set(ctx.service_up, 1)``; nothing in this module does.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.api.authorization import (
    AuthorizationGate,
    build_gate,
    require_authorization,
)
from app.core.context import AppContext
from app.core.exposition import ExpositionResponse, negotiate, write_exposition

SERVICE_UP_GAUGE = "is_web_up"
SERVICE_UP_HELP = "Tells whether web service is up"


def build_metrics_router(
    ctx: AppContext, gate: AuthorizationGate | None = None
) -> APIRouter:
    """Define the monitoring route against ``ctx``.

    Registers the service-up gauge as a side effect, so this may run only
    once per context; a second call raises DuplicateMetricRegistration.
    """
    gate = gate or build_gate(ctx.settings)

    ctx.service_up = ctx.registry.register_gauge(SERVICE_UP_GAUGE, SERVICE_UP_HELP)
    ctx.registry.set(ctx.service_up, 0)

    guard = require_authorization(gate)

    router = APIRouter(prefix="/api/monitoring", tags=["monitoring"])

    @router.get("/metrics", include_in_schema=False)
    async def metrics(
        request: Request,
        _scheme: str = Depends(guard),
    ) -> ExpositionResponse:
        """Expose the registry; the gate has already accepted the caller."""
        fmt = negotiate(request.headers.get("accept"))
        return write_exposition(fmt, ctx.registry.snapshot())

    return router
