"""Vendor schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_choice, validate_email, validate_us_phone

VENDOR_CATEGORIES = ("chemicals", "equipment", "parts", "service", "utilities", "other")
CHANNELS = ("email", "sms", "call", "note")


class VendorCreate(BaseModel):
    name: str
    category: Optional[str] = None
    contactName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    notes: Optional[str] = None
    isActive: Optional[bool] = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Vendor name is required")
        return v.strip()

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return validate_choice(v, VENDOR_CATEGORIES, "Category")

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_us_phone(v)


class VendorUpdate(VendorCreate):
    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Vendor name cannot be empty")
        return v.strip() if v else v


class CommunicationLinkCreate(BaseModel):
    channel: str
    subject: Optional[str] = None
    summary: Optional[str] = None
    externalId: Optional[str] = None
    occurredAt: Optional[datetime] = None

    @field_validator("channel")
    @classmethod
    def validate_channel(cls, v):
        return validate_choice(v, CHANNELS, "Channel")
