"""Inventory schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator


class InventoryItemCreate(BaseModel):
    name: str
    sku: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = "each"
    quantity: float = 0
    minStockLevel: float = 0
    unitCost: int = 0  # cents
    vendorId: Optional[int] = None
    isActive: Optional[bool] = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("quantity", "minStockLevel", "unitCost")
    @classmethod
    def validate_non_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("Value cannot be negative")
        return v


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    quantity: Optional[float] = None
    minStockLevel: Optional[float] = None
    unitCost: Optional[int] = None
    vendorId: Optional[int] = None
    isActive: Optional[bool] = None

    @field_validator("quantity", "minStockLevel", "unitCost")
    @classmethod
    def validate_non_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("Value cannot be negative")
        return v
