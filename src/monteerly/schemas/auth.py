from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator
from zxcvbn import zxcvbn

from monteerly.core.config import get_settings


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        """Validate password strength using zxcvbn entropy estimation."""
        result = zxcvbn(v)
        if result["score"] < get_settings().min_password_score:
            feedback = result.get("feedback", {})
            warning = feedback.get("warning", "")
            suggestions = feedback.get("suggestions", [])

            if warning:
                raise ValueError(f"Weak password: {warning}")
            elif suggestions:
                raise ValueError(f"Weak password: {suggestions[0]}")
            else:
                raise ValueError(
                    "Password is too weak. Use a longer password with a mix of characters."
                )
        return v


class CredentialsRequest(BaseModel):
    """Email and password as submitted. Checked by the session provider."""

    email: str = Field(max_length=320)
    password: str = Field(max_length=128)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class FederatedSignInRequest(BaseModel):
    id_token: str = Field(min_length=1)


class IdentityRead(BaseModel):
    uid: str
    email: str | None
    provider: str

    @classmethod
    def from_identity(cls, identity: Any) -> "IdentityRead":
        return cls(uid=identity.uid, email=identity.email, provider=identity.provider.value)


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    identity: IdentityRead
