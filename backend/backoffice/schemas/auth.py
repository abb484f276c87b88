"""Request/response models for registration, login and the current principal."""

import uuid
from typing import List

from pydantic import BaseModel, Field, field_validator


class Credentials(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are stored lower-cased; a minimal shape check catches typos."""
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email address")
        return v


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: uuid.UUID
    email: str
    is_admin: bool = False


class PrincipalResponse(BaseModel):
    id: uuid.UUID
    email: str
    roles: List[str]
    is_admin: bool


class LoginRequest(BaseModel):
    """JSON login body; the OAuth2 form variant sends `username` instead of `email`."""
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)
