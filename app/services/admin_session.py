"""Administrator session checks.

Two variants, chosen by Settings.safe_mode:

  SafeModeAdminCheck: always false.  Before startup completes there is no
    session subsystem, so no caller can be recognised as an administrator.
    This is a property of safe mode, not a missing feature; callers in
    safe mode authenticate with a passcode instead.

  SessionAdminCheck: reads the ``session`` cookie, verifies it as a
    session JWT and reports true when its roles include ``admin``.
"""

from __future__ import annotations

import logging

import jwt
from starlette.requests import Request

from app.models.principal import Principal
from app.services import token_service

logger = logging.getLogger(__name__)


class SafeModeAdminCheck:
    scheme = "admin_session"

    def is_valid(self, request: Request) -> bool:
        # No authenticated user in safe mode
        return False


class SessionAdminCheck:
    scheme = "admin_session"

    def is_valid(self, request: Request) -> bool:
        cookie = request.cookies.get(token_service.SESSION_COOKIE)
        if not cookie:
            return False
        try:
            claims = token_service.decode_session_token(cookie)
        except jwt.ExpiredSignatureError:
            logger.debug("Session cookie expired")
            return False
        except jwt.InvalidTokenError:
            logger.debug("Invalid session cookie")
            return False

        principal = Principal.from_claims(claims)
        if not principal.is_system_admin():
            logger.debug("Session user=%s is not a system admin", principal.user_id)
            return False
        return True
