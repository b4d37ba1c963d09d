"""
Device unlock endpoints for API v1.

``POST /auth`` exchanges the shared password for a device token set as
an http-only cookie.  ``GET /auth`` tells a client whether its device is
still unlocked, and ``DELETE /auth`` forgets the cookie.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from registry_pos_api.app.core.config import settings
from registry_pos_api.app.core.security import (
    create_device_token,
    decode_device_token,
    gate_enabled,
    read_device_token,
    verify_app_password,
)
from registry_pos_api.app.schemas.auth import DeviceSession, LoginRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=DeviceSession)
async def auth_status(token: Optional[str] = Depends(read_device_token)) -> DeviceSession:
    """Return 200 if the device is unlocked, 403 otherwise."""
    if not gate_enabled():
        return DeviceSession(authenticated=True)
    claims = decode_device_token(token) if token else None
    if claims is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Device is not authorised")
    return DeviceSession(authenticated=True, expires_at=claims["exp"])


@router.post("", response_model=DeviceSession)
async def login(body: LoginRequest, response: Response) -> DeviceSession:
    """Unlock this device with the shared password."""
    if not verify_app_password(body.password):
        logger.warning("Rejected device login with a wrong password")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Wrong password")
    token, expires_at = create_device_token()
    response.set_cookie(
        key=settings.device_cookie_name,
        value=token,
        max_age=settings.device_token_expire_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
    )
    logger.info("Device unlocked until %s", expires_at)
    return DeviceSession(authenticated=True, token=token, expires_at=expires_at)


@router.delete("", response_model=DeviceSession)
async def logout(response: Response) -> DeviceSession:
    """Lock this device again by clearing its cookie."""
    response.delete_cookie(settings.device_cookie_name)
    return DeviceSession(authenticated=False)
