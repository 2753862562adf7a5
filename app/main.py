from __future__ import annotations

import logging

from fastapi import FastAPI

from app.api.metrics_endpoint import build_metrics_router
from app.core.config import SETTINGS, Settings
from app.core.context import AppContext
from app.core.logging import setup_logging
from app.middleware.request_context import (
    RequestContextMiddleware,
    install_request_context_filter,
)

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_request_context_filter()

logger = logging.getLogger(__name__)


def create_app(settings: Settings = SETTINGS) -> FastAPI:
    """Build an application with its own context and metrics registry.

    Route definition registers the service-up gauge, so a failure there
    (DuplicateMetricRegistration) aborts startup.
    """
    ctx = AppContext(settings=settings)

    app = FastAPI(
        title="monitoring-service",
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )
    app.state.context = ctx

    app.add_middleware(RequestContextMiddleware)
    app.include_router(build_metrics_router(ctx))

    logger.info(
        "monitoring-service configured  env=%s safe_mode=%s log_level=%s port=%d",
        settings.app_env,
        "on" if settings.safe_mode else "off",
        settings.log_level,
        settings.port,
    )
    return app


# uvicorn app.main:app --host 0.0.0.0 --port 8000
app = create_app(SETTINGS)
