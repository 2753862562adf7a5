"""Request context middleware: request IDs and one summary log line.

Every request gets an ID, taken from the X-Request-ID header when the
caller (usually a load balancer) sends one, else a fresh UUID.  The ID is
kept in a ContextVar so log lines emitted anywhere during the request can
carry it; a ContextVar rather than threading.local because concurrent
async requests share a thread.

This is a plain ASGI middleware rather than a BaseHTTPMiddleware: it sits
directly on the client transport, so the summary line is written only
after the body has been sent, and a transport OSError is reported here as
ResponseWriteFailure.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.errors import ResponseWriteFailure

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestContextFilter(logging.Filter):
    """Attach the current request ID to every LogRecord."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        return True


def install_request_context_filter() -> None:
    """Install the filter on the root handlers, once.

    Filters on the root *logger* do not run for records propagated from
    child loggers; filters on the handlers do.
    """
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, _RequestContextFilter) for f in handler.filters):
            handler.addFilter(_RequestContextFilter())


class RequestContextMiddleware:
    """Assign a request ID, time the request, log completion."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        req_id = Headers(scope=scope).get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)
        method = scope["method"]
        path = scope["path"]
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message)["X-Request-ID"] = req_id
            try:
                await send(message)
            except ResponseWriteFailure:
                raise
            except OSError as exc:
                logger.warning(
                    "Response write failed for %s %s: %s",
                    method,
                    path,
                    exc,
                    extra={"request_id": req_id, "status_code": status_code},
                )
                raise ResponseWriteFailure(str(exc)) from exc

        start = time.monotonic()
        await self.app(scope, receive, send_wrapper)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        # No headers or query string here: they may carry credentials.
        logger.info(
            "%s %s → %d (%.1fms)",
            method,
            path,
            status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": duration_ms,
            },
        )
