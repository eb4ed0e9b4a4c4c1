"""Pydantic models for OAuth credentials."""

from typing import Optional

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """Body returned by the token endpoint for both grant types."""

    access_token: str
    refresh_token: str
    expires_in: int = Field(..., description="Lifetime in seconds declared by the server")
    token_type: Optional[str] = None
    scope: Optional[str] = None
    user_id: Optional[int] = None

    class Config:
        extra = "allow"


class Credential(BaseModel):
    """The stored credential with its expiry bookkeeping."""

    access_token: str
    refresh_token: str
    expires_in: int
    issued_at_ms: int = Field(..., description="Local clock at save time (epoch ms)")

    @property
    def expires_at_ms(self) -> int:
        """Literal expiry declared by the authorization server."""
        return self.issued_at_ms + self.expires_in * 1000
