"""
Bearer token authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC-SHA256 signatures and base64url encoding.  Tokens carry
the user's id (``sub``), their ``username`` and an expiration
timestamp (``exp``).  A secret key from the application settings is
used to sign and verify the token.

``check_auth`` is the identity verifier used by every mutation: it
turns the raw token taken from the ``Authorization`` header into the
caller's identity, or raises ``UnauthenticatedError``.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .errors import UnauthenticatedError


_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _encode_segment(value: object) -> str:
    return _b64(json.dumps(value, separators=(",", ":")).encode("utf-8"))


def _decode_segment(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _signature(header_b64: str, payload_b64: str) -> bytes:
    return hmac.new(
        settings.secret_key.encode("utf-8"),
        f"{header_b64}.{payload_b64}".encode("ascii"),
        hashlib.sha256,
    ).digest()


def create_access_token(data: Dict[str, str], expires_delta: Optional[int] = None) -> str:
    """Sign ``data`` (usually ``sub`` and ``username``) into a bearer token.

    ``expires_delta`` is the lifetime in seconds and defaults to
    ``settings.access_token_expire_minutes``.
    """
    lifetime = expires_delta or settings.access_token_expire_minutes * 60
    claims = dict(data, exp=int(time.time()) + lifetime)
    header_b64 = _encode_segment(_HEADER)
    payload_b64 = _encode_segment(claims)
    return f"{header_b64}.{payload_b64}.{_b64(_signature(header_b64, payload_b64))}"


def decode_access_token(token: str) -> Optional[Dict[str, str]]:
    """Return the claims of a well-signed, unexpired token, else ``None``."""
    try:
        header_b64, payload_b64, signature_b64 = token.split(".")
        signature = _decode_segment(signature_b64)
        if not hmac.compare_digest(_signature(header_b64, payload_b64), signature):
            return None
        claims = json.loads(_decode_segment(payload_b64).decode("utf-8"))
    except ValueError:
        return None
    if not isinstance(claims, dict):
        return None
    exp = claims.get("exp")
    if not isinstance(exp, int) or exp < int(time.time()):
        return None
    return claims


def check_auth(token: Optional[str]) -> Dict[str, str]:
    """Resolve the caller's identity from a bearer token.

    The token must be valid and unexpired and its subject must still
    exist in the ``users`` table.  The username is taken from the
    store rather than from the token claims.

    Returns
    -------
    dict
        ``{"id": <user id>, "username": <username>}``.

    Raises
    ------
    UnauthenticatedError
        If the token is missing, invalid, expired or refers to an
        unknown user.
    """
    if not token:
        raise UnauthenticatedError("Authorization header must be provided")
    payload = decode_access_token(token)
    if not payload:
        raise UnauthenticatedError("Invalid/Expired token")

    from forum_api.app.core.db import get_connection
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT id, username FROM users WHERE id = ?",
            (payload.get("sub"),),
        ).fetchone()
    finally:
        conn.close()
    if not row:
        raise UnauthenticatedError("User no longer exists")
    return {"id": row["id"], "username": row["username"]}


security = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Dependency returning the raw bearer token, or ``None``.

    Authentication itself is left to the services so that the order of
    checks (authentication before validation) is decided in one place.
    """
    if credentials is None:
        return None
    return credentials.credentials
