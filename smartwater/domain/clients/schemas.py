"""Client domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_choice, validate_email, validate_us_phone

CONTRACT_TYPES = ("residential", "commercial", "service", "maintenance")


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    companyName: Optional[str] = None
    contactName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipCode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contractType: Optional[str] = None
    poolType: Optional[str] = None
    poolSize: Optional[int] = None
    notes: Optional[str] = None
    userId: Optional[int] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_us_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("contractType")
    @classmethod
    def validate_contract_type(cls, v):
        return validate_choice(v, CONTRACT_TYPES, "Contract type")

    @field_validator("poolSize")
    @classmethod
    def validate_pool_size(cls, v):
        if v is not None and v < 0:
            raise ValueError("Pool size cannot be negative")
        return v


class ClientUpdate(ClientCreate):
    """Schema for updating an existing client (all fields optional)"""


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: int
    organizationId: int
    userId: Optional[int] = None
    companyName: Optional[str] = None
    contactName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipCode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contractType: Optional[str] = None
    poolType: Optional[str] = None
    poolSize: Optional[int] = None
    notes: Optional[str] = None
    createdAt: Optional[str] = None
