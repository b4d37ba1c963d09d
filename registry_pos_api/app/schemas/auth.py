"""Pydantic schemas for the shared-password device gate."""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    password: str = Field(..., examples=["s3cret"])


class DeviceSession(BaseModel):
    """Returned after a successful login or status check."""

    authenticated: bool
    token: Optional[str] = None
    expires_at: Optional[int] = Field(None, description="UNIX timestamp when the device token expires")
