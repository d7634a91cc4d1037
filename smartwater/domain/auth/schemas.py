"""Auth schemas - Pydantic models for login and registration"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email


class LoginRequest(BaseModel):
    username: str  # username or email
    password: str


class RegisterRequest(BaseModel):
    """Self-service signup; always creates a new organization"""

    username: str
    password: str
    confirmPassword: str
    email: str
    name: str
    organizationName: str
    phone: Optional[str] = None

    @field_validator("username", "name")
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)


class GoogleProfile(BaseModel):
    """Subset of the Google userinfo response"""

    id: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
