"""Pydantic models for the account domain."""

from datetime import datetime

from pydantic import BaseModel, Field


class UserRecord(BaseModel):
    """A registered account. Keyed by email."""

    email: str = Field(..., description="Primary key, case-sensitive as stored")
    credential_hash: str = Field(..., description="bcrypt hash, never the plaintext")
    verified: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenClaims(BaseModel):
    """Claims carried by a validated signed token."""

    email: str
    purpose: str
    issued_at: datetime
    expires_at: datetime


class SessionToken(BaseModel):
    """Session credential returned after successful login."""

    token: str = Field(..., description="Signed session token")
    email: str
    expires_at: datetime


class SignupRequest(BaseModel):
    """Request payload for signup.

    Fields are optional here so that missing values reach the service and
    surface as ValidationError rather than a framework 422.
    """

    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    """Request payload for login."""

    email: str | None = None
    password: str | None = None


class SignupResult(BaseModel):
    """Acknowledgment returned after a successful signup."""

    email: str
    message: str = "Signup successful. Check your email to verify."


class ProfileImage(BaseModel):
    """Result of a profile image upload."""

    url: str
