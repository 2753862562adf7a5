"""Exposition formats: content negotiation and response writing.

Two wire formats are supported, both produced by prometheus_client:

  Prometheus text 0.0.4 (the default)
      # HELP is_web_up Tells whether web service is up
      # TYPE is_web_up gauge
      is_web_up 0.0

  OpenMetrics 1.0.0
      same content, plus a trailing "# EOF" line and stricter typing

A Prometheus server asks for OpenMetrics first and falls back to text:

  Accept: application/openmetrics-text;version=1.0.0,text/plain;version=0.0.4;q=0.5,*/*;q=0.1

Anything else (curl, a browser, a header naming only unknown types) gets
the text format.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from prometheus_client import exposition as text_exposition
from prometheus_client.openmetrics import exposition as openmetrics_exposition
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from app.core.errors import ResponseWriteFailure
from app.core.registry import MetricsSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExpositionFormat:
    name: str
    media_type: str
    content_type: str
    encoder: Callable[..., bytes]

    def encode(self, snapshot: MetricsSnapshot) -> bytes:
        return self.encoder(snapshot)


PROMETHEUS_TEXT = ExpositionFormat(
    name="prometheus-text",
    media_type="text/plain",
    content_type="text/plain; version=0.0.4; charset=utf-8",
    encoder=text_exposition.generate_latest,
)

OPENMETRICS_TEXT = ExpositionFormat(
    name="openmetrics-text",
    media_type="application/openmetrics-text",
    content_type="application/openmetrics-text; version=1.0.0; charset=utf-8",
    encoder=openmetrics_exposition.generate_latest,
)

DEFAULT_FORMAT = PROMETHEUS_TEXT

SUPPORTED_FORMATS: tuple[ExpositionFormat, ...] = (OPENMETRICS_TEXT, PROMETHEUS_TEXT)


# ---------------------------------------------------------------------------
# Negotiation
# ---------------------------------------------------------------------------


def _media_ranges(accept: str) -> tuple[list[str], set[str]]:
    """Split an Accept header into media ranges, most preferred first.

    Ranges are ordered by q-value; equal q keeps header order.  q=0 means
    "not acceptable": such ranges are returned separately as the rejected
    set.  An unparseable q counts as 1.
    """
    weighted: list[tuple[float, int, str]] = []
    rejected: set[str] = set()
    for index, part in enumerate(accept.split(",")):
        fields = [f.strip() for f in part.split(";")]
        media = fields[0].lower()
        if not media:
            continue
        q = 1.0
        for param in fields[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() != "q":
                continue
            try:
                q = float(value.strip())
            except ValueError:
                q = 1.0
        if q <= 0:
            rejected.add(media)
        weighted.append((q, index, media))

    weighted.sort(key=lambda item: (-item[0], item[1]))
    # "q > 0" also drops NaN
    return [media for q, _, media in weighted if q > 0], rejected


def _matches(media_range: str, fmt: ExpositionFormat) -> bool:
    if media_range == "*/*":
        return True
    type_, _, subtype = media_range.partition("/")
    if subtype == "*":
        return fmt.media_type.startswith(type_ + "/")
    return media_range == fmt.media_type


def negotiate(accept: str | None) -> ExpositionFormat:
    """Pick the exposition format for an Accept header value.

    A wildcard range never resolves to a format the header names with
    q=0.  Total: every input, including None and "", yields a supported
    format.
    """
    if not accept:
        return DEFAULT_FORMAT

    accepted, rejected = _media_ranges(accept)
    for media_range in accepted:
        if "*" in media_range:
            candidates = tuple(
                fmt
                for fmt in (DEFAULT_FORMAT, *SUPPORTED_FORMATS)
                if fmt.media_type not in rejected
            )
        else:
            candidates = SUPPORTED_FORMATS
        for fmt in candidates:
            if _matches(media_range, fmt):
                return fmt

    return DEFAULT_FORMAT


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


class ExpositionResponse(Response):
    """Response that reports transport errors as ResponseWriteFailure.

    Status and Content-Type go out with ``http.response.start`` before any
    body bytes.  If the client has gone away the send raises; there is no
    retry and nothing to roll back, so the error is logged and re-raised.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        except ResponseWriteFailure:
            raise
        except OSError as exc:
            logger.warning("Metrics response write failed: %s", exc)
            raise ResponseWriteFailure(str(exc)) from exc


def write_exposition(
    fmt: ExpositionFormat, snapshot: MetricsSnapshot
) -> ExpositionResponse:
    """Encode ``snapshot`` in ``fmt`` as a 200 response."""
    return ExpositionResponse(
        content=fmt.encode(snapshot),
        status_code=200,
        media_type=fmt.content_type,
    )
