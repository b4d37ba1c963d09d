"""
Shared-password gate and device tokens.

The registry is meant for a single shop: one password unlocks a
device.  After a successful login the device receives a signed token,
stored in a cookie, that keeps it unlocked for
``settings.device_token_expire_days`` days.

Tokens follow the JWT layout (``header.payload.signature``, base64url
encoded) and are signed with HMAC-SHA256 using
``settings.secret_key``.  Only the ``sub`` and ``exp`` claims are used.
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from typing import Dict, Optional, Tuple

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings

logger = logging.getLogger(__name__)

DEVICE_SUBJECT = "device"


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC-SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def gate_enabled() -> bool:
    return bool(settings.app_password)


def verify_app_password(password: str) -> bool:
    """Compare ``password`` with the configured shared password in constant time."""
    if not settings.app_password:
        return False
    return hmac.compare_digest(password.encode("utf-8"), settings.app_password.encode("utf-8"))


def create_device_token(expires_delta: Optional[int] = None) -> Tuple[str, int]:
    """Create a signed device token.

    Parameters
    ----------
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.device_token_expire_days`` days.

    Returns
    -------
    tuple
        The token string and its expiry as a UNIX timestamp.
    """
    exp_seconds = expires_delta or settings.device_token_expire_days * 24 * 60 * 60
    expires_at = int(time.time()) + exp_seconds
    header = {"alg": "HS256", "typ": "JWT"}
    payload = {"sub": DEVICE_SUBJECT, "exp": expires_at}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}", expires_at


def decode_device_token(token: str) -> Optional[Dict[str, object]]:
    """Verify a device token and return its claims.

    Returns ``None`` if the token is malformed, carries a bad signature
    or has expired.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, settings.secret_key)
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict) or data.get("sub") != DEVICE_SUBJECT:
        return None
    exp = data.get("exp")
    if not isinstance(exp, int) or exp < int(time.time()):
        return None
    return data


security = HTTPBearer(auto_error=False)


def read_device_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Return the token from the device cookie, else from a Bearer header."""
    token = request.cookies.get(settings.device_cookie_name)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


def require_device(token: Optional[str] = Depends(read_device_token)) -> Optional[Dict[str, object]]:
    """Dependency that rejects requests from devices that are not unlocked.

    When no shared password is configured the gate is open and ``None``
    is returned.  Otherwise a missing, forged or expired token yields
    HTTP 403, which clients treat as "show the password screen".
    """
    if not gate_enabled():
        return None
    claims = decode_device_token(token) if token else None
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Device is not authorised",
        )
    return claims
