"""Authorization gate for the monitoring endpoint.

The gate holds an ordered tuple of credential validators and accepts a
request as soon as one of them does.  Order only affects which scheme is
reported; the decision is a plain OR.

    gate = build_gate(settings)

    @router.get("/metrics")
    def metrics(scheme: str = Depends(require_authorization(gate))): ...

Used as a dependency, the gate raises AuthorizationDenied (403) before
the handler body runs, so a denied request never reaches the registry
and never gets a Content-Type other than the error's.
"""

from __future__ import annotations

import logging
from typing import Protocol

from fastapi import Request

from app.core.config import Settings
from app.core.errors import AuthorizationDenied
from app.services.admin_session import SafeModeAdminCheck, SessionAdminCheck
from app.services.passcodes import BearerPasscode, SystemPasscode

logger = logging.getLogger(__name__)


class CredentialValidator(Protocol):
    scheme: str

    def is_valid(self, request: Request) -> bool: ...


class AuthorizationGate:
    def __init__(self, validators: tuple[CredentialValidator, ...]) -> None:
        self.validators = validators

    def authorize(self, request: Request) -> str | None:
        """Return the scheme of the first validator that accepts, else None."""
        for validator in self.validators:
            if validator.is_valid(request):
                return validator.scheme
        return None

    def check(self, request: Request) -> str:
        """Return the accepting scheme or raise AuthorizationDenied."""
        scheme = self.authorize(request)
        if scheme is None:
            logger.warning(
                "Access denied: no valid credential for %s %s",
                request.method,
                request.url.path,
            )
            raise AuthorizationDenied()
        logger.debug("Access granted via %s", scheme, extra={"scheme": scheme})
        return scheme


def build_gate(settings: Settings) -> AuthorizationGate:
    """Standard validator chain: system passcode, admin session, bearer."""
    admin_check = SafeModeAdminCheck() if settings.safe_mode else SessionAdminCheck()
    return AuthorizationGate(
        (
            SystemPasscode(settings.system_passcode),
            admin_check,
            BearerPasscode(settings.bearer_token),
        )
    )


def require_authorization(gate: AuthorizationGate):
    """Dependency factory: run ``gate`` against the current request.

    Usage: Depends(require_authorization(gate))
    Returns the accepting scheme, else 403.
    """

    def _guard(request: Request) -> str:
        return gate.check(request)

    return _guard
