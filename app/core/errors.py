"""Errors raised by the monitoring endpoint and its collaborators."""

from __future__ import annotations

from fastapi import HTTPException, status


class AuthorizationDenied(HTTPException):
    """None of the credential schemes accepted the request.

    Rendered by FastAPI's default HTTPException handler as
    ``403 {"detail": "Insufficient privileges"}``.
    """

    def __init__(self, detail: str = "Insufficient privileges") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class DuplicateMetricRegistration(ValueError):
    """A metric with the same name is already in the registry.

    Raised at startup only; the application must not come up.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Metric {name!r} is already registered")
        self.name = name


class ResponseWriteFailure(OSError):
    """The transport failed while the exposition body was being sent."""
