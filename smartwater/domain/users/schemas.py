"""User and organization schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...permissions import ROLES
from ...shared.validators import validate_choice, validate_email, validate_us_phone


class UserCreate(BaseModel):
    """Schema for an admin creating a user in their organization"""

    username: str
    password: str
    name: str
    email: str
    role: str = "technician"
    phone: Optional[str] = None
    address: Optional[str] = None
    organizationId: Optional[int] = None  # system admins only

    @field_validator("username", "name")
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return validate_choice(v, ROLES, "Role")

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_us_phone(v)
        return v


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    password: Optional[str] = None
    active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return validate_choice(v, ROLES, "Role")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if v is not None and len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_us_phone(v)
        return v


class OrganizationUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logoUrl: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)


class UserResponse(BaseModel):
    """Public user fields; the password hash is never part of a response"""

    id: int
    username: str
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    address: Optional[str] = None
    organizationId: Optional[int] = None
    active: Optional[bool] = None
    photoUrl: Optional[str] = None
    authProvider: Optional[str] = None
    googleConnected: bool = False
    createdAt: Optional[str] = None


class OrganizationResponse(BaseModel):
    id: int
    name: str
    slug: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logoUrl: Optional[str] = None
    active: Optional[bool] = None
    createdAt: Optional[str] = None
