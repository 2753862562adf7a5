"""Static shared-secret credentials.

Both schemes compare a header value against a secret from Settings.  They
work without any session machinery, which is what makes them usable in
safe mode.

  System passcode:  X-System-Passcode: <SYSTEM_PASSCODE>
  Bearer passcode:  Authorization: Bearer <METRICS_BEARER_TOKEN>

An unset secret disables its scheme: the validator then reports false
for every request, including requests that send an empty header.

Comparisons use ``hmac.compare_digest`` so response timing does not
reveal how much of a guess was right.
"""

from __future__ import annotations

import hmac
import logging

from starlette.requests import Request

logger = logging.getLogger(__name__)

PASSCODE_HEADER = "X-System-Passcode"
AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "bearer "


def _same_secret(presented: str, expected: str) -> bool:
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


class SystemPasscode:
    scheme = "system_passcode"

    def __init__(self, passcode: str | None) -> None:
        self._passcode = passcode
        if passcode:
            logger.info("System authentication by passcode is enabled")
        else:
            logger.info("System authentication by passcode is disabled")

    @property
    def enabled(self) -> bool:
        return bool(self._passcode)

    def is_valid(self, request: Request) -> bool:
        if not self._passcode:
            return False
        presented = request.headers.get(PASSCODE_HEADER)
        if presented is None:
            return False
        return _same_secret(presented, self._passcode)


class BearerPasscode:
    scheme = "bearer_passcode"

    def __init__(self, token: str | None) -> None:
        self._token = token

    @property
    def enabled(self) -> bool:
        return bool(self._token)

    def is_valid(self, request: Request) -> bool:
        if not self._token:
            return False
        header = request.headers.get(AUTHORIZATION_HEADER)
        if header is None or not header.lower().startswith(BEARER_PREFIX):
            return False
        presented = header[len(BEARER_PREFIX) :].strip()
        return _same_secret(presented, self._token)
