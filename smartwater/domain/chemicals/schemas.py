"""Chemical tracking schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_choice

CHEMICAL_TYPES = (
    "liquid_chlorine",
    "tablets",
    "shock",
    "acid",
    "soda_ash",
    "sodium_bicarbonate",
    "calcium_chloride",
    "stabilizer",
    "algaecide",
    "salt",
    "phosphate_remover",
    "clarifier",
    "other",
)


def _non_negative(v, label: str):
    if v is not None and v < 0:
        raise ValueError(f"{label} cannot be negative")
    return v


class ChemicalPriceCreate(BaseModel):
    chemicalType: str
    name: str
    unit: str
    unitCost: int  # cents
    vendorId: Optional[int] = None
    isActive: Optional[bool] = True

    @field_validator("chemicalType")
    @classmethod
    def validate_chemical_type(cls, v):
        return validate_choice(v, CHEMICAL_TYPES, "Chemical type")

    @field_validator("name", "unit")
    @classmethod
    def validate_required_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("unitCost")
    @classmethod
    def validate_unit_cost(cls, v):
        return _non_negative(v, "Unit cost")


class ChemicalPriceUpdate(BaseModel):
    chemicalType: Optional[str] = None
    name: Optional[str] = None
    unit: Optional[str] = None
    unitCost: Optional[int] = None
    vendorId: Optional[int] = None
    isActive: Optional[bool] = None

    @field_validator("chemicalType")
    @classmethod
    def validate_chemical_type(cls, v):
        return validate_choice(v, CHEMICAL_TYPES, "Chemical type")

    @field_validator("unitCost")
    @classmethod
    def validate_unit_cost(cls, v):
        return _non_negative(v, "Unit cost")


class ChemicalUsageCreate(BaseModel):
    maintenanceId: Optional[int] = None
    workOrderId: Optional[int] = None
    chemicalType: str
    amount: float
    unit: Optional[str] = None
    unitCost: Optional[int] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("chemicalType")
    @classmethod
    def validate_chemical_type(cls, v):
        return validate_choice(v, CHEMICAL_TYPES, "Chemical type")

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Amount must be greater than zero")
        return v

    @field_validator("unitCost")
    @classmethod
    def validate_unit_cost(cls, v):
        return _non_negative(v, "Unit cost")
