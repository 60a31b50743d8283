"""
Wanderlust Backend - Auth Request/Response Schemas
====================================================

What:  Pydantic models for the signup/login API contract and token claims.
Why:   `PublicUser` is the only user shape that leaves the server; the
       password hash never appears in a response model.
"""

from typing import Optional

from pydantic import BaseModel, Field


class TokenClaims(BaseModel):
    """Identity carried inside a bearer token and attached to `request.state.user`."""

    id: str = Field(description="User ID")
    email: str = Field(description="User email, as stored")

    model_config = {"frozen": True}


class SignupRequest(BaseModel):
    name: Optional[str] = Field(default=None, description="Display name (required for new accounts)")
    email: str = Field(min_length=1, description="Email address, case-sensitive")
    password: str = Field(min_length=1, description="Plaintext password")


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class PublicUser(BaseModel):
    """The subset of a user that is safe to return to a client."""

    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    """
    Returned by POST /api/auth/signup (201) and POST /api/auth/login (200).

    Example:
        {
            "success": true,
            "token": "eyJhbGciOiJIUzI1NiIs...",
            "user": {"id": "6f1c...", "name": "Ada", "email": "ada@example.com"}
        }
    """

    success: bool = True
    token: str
    user: PublicUser
