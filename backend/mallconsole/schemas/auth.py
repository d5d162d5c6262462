"""Auth Pydantic schemas for identities and request/response validation."""

from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

Role = Literal["user", "admin"]


class Identity(BaseModel):
    """Opaque user identity handed out by the identity provider."""

    uid: str
    email: str
    id_token: Optional[str] = None


class SignInResult(BaseModel):
    """Identity plus the authorization role resolved from its side record."""

    identity: Identity
    role: str = "user"


class RegisterRequest(BaseModel):
    """Account registration request."""
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=128)
    role: Role = "user"


class LoginRequest(BaseModel):
    """Sign-in request."""
    email: str = Field(min_length=1, max_length=320)
    password: str


class TokenResponse(BaseModel):
    """Bearer token response."""
    access_token: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    """Signed-in identity info."""
    uid: str
    email: EmailStr
    role: str
