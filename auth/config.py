"""Authentication configuration."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Durations are in their natural units (minutes for verification links,
    hours for sessions) to make configuration intuitive. Secrets are not
    part of this model; they come from Vault.
    """

    # Verification link settings
    verification_token_expiry_minutes: int = Field(
        default=60,
        description="How long email verification links remain valid",
        ge=5,
        le=1440,
    )
    verification_path: str = Field(
        default="/verify",
        description="Path of the verification endpoint embedded in emails",
    )

    # Session settings
    session_expiry_hours: int = Field(
        default=168,  # 7 days
        description="Session token lifetime in hours",
        ge=1,
        le=2160,
    )

    # Credential hashing
    bcrypt_rounds: int = Field(
        default=10,
        description="bcrypt cost factor (log2 of iterations)",
        ge=4,
        le=16,
    )

    # Token signing
    token_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )

    # Profile images
    max_profile_image_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Largest accepted profile image upload",
        ge=1,
    )

    # Application
    app_base_url: str = Field(
        default="https://lifelike-backend.onrender.com",
        description="Base URL for verification link generation",
    )
    app_name: str = Field(
        default="Lifelike",
        description="Application name for emails",
    )

    def verification_link(self, token: str) -> str:
        """Build the link a new account follows to verify its email."""
        return f"{self.app_base_url.rstrip('/')}{self.verification_path}?token={token}"
