"""Session tokens (ES256 JWTs) for the administrator session check.

Only used in full mode.  In safe mode the session subsystem does not
exist yet and nothing here is consulted.

A session token is the value of the ``session`` cookie.  It carries the
subject and its platform roles; an ``admin`` role makes the caller a
system administrator for the monitoring endpoint.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

# ---------------------------------------------------------------------------
# Key management
# ---------------------------------------------------------------------------
# Dev/test: generate an ephemeral EC key pair on import.
# Production: load from env var, file, or KMS (not implemented yet).
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "monitoring-service"
SESSION_AUDIENCE = "monitoring-service-session"
SESSION_TTL_MIN = 30
SESSION_COOKIE = "session"


def create_session_token(
    *,
    sub: str,
    roles: list[str] | None = None,
    ttl: timedelta = timedelta(minutes=SESSION_TTL_MIN),
) -> str:
    """Build and sign a session JWT for the session cookie."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": SESSION_AUDIENCE,
        "exp": now + ttl,
        "iat": now,
        "jti": str(uuid.uuid4()),
        "roles": roles or ["user"],
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_session_token(token: str) -> dict:
    """Verify a session JWT and return its claims.

    Pins the algorithm to ES256 and the audience to SESSION_AUDIENCE.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=SESSION_AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
