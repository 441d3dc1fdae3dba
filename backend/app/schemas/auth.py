"""
Auth Schema Definitions

Pydantic models for authentication API endpoints and the identity
attached to requests and sockets.
"""

from pydantic import BaseModel, Field

from app.schemas.user import UserPublic


class Identity(BaseModel):
    """Authenticated principal derived from verified token claims."""

    id: str = Field(..., alias="_id")
    email: str

    class Config:
        populate_by_name = True


class TokenResponse(BaseModel):
    """Returned by register and login."""

    user: UserPublic
    token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    """Generic message response for auth endpoints."""

    message: str


class LogoutResponse(MessageResponse):
    """Response for logout endpoint."""

    pass
