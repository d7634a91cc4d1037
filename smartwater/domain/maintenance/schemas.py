"""Maintenance schemas - Pydantic models for visits and recurring orders"""

from datetime import date, time
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_choice

MAINTENANCE_STATUSES = ("scheduled", "in_progress", "completed", "cancelled")
ORDER_STATUSES = ("active", "paused", "cancelled", "completed")
FREQUENCIES = ("weekly", "bi_weekly", "monthly", "bi_monthly", "quarterly")


class MaintenanceCreate(BaseModel):
    clientId: int
    scheduledDate: date
    scheduledTime: Optional[time] = None
    status: Optional[str] = "scheduled"
    type: str
    description: Optional[str] = None
    technicianId: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, MAINTENANCE_STATUSES, "Status")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        # cleaning, inspection, chemical_balance, filter_cleaning, equipment_check, ...
        if v is not None and not v.strip():
            raise ValueError("Maintenance type is required")
        return v


class MaintenanceUpdate(BaseModel):
    clientId: Optional[int] = None
    scheduledDate: Optional[date] = None
    scheduledTime: Optional[time] = None
    status: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    technicianId: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, MAINTENANCE_STATUSES, "Status")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        # cleaning, inspection, chemical_balance, filter_cleaning, equipment_check, ...
        if v is not None and not v.strip():
            raise ValueError("Maintenance type is required")
        return v


class TechnicianAssignment(BaseModel):
    technicianId: Optional[int] = None


class MaintenanceOrderCreate(BaseModel):
    clientId: int
    title: str
    description: Optional[str] = None
    frequency: str = "weekly"
    dayOfWeek: Optional[int] = None  # 0=Sunday ... 6=Saturday
    startDate: date
    endDate: Optional[date] = None
    technicianId: Optional[int] = None
    address: Optional[str] = None
    estimatedDuration: Optional[int] = None
    status: Optional[str] = "active"
    notes: Optional[str] = None

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, v):
        return validate_choice(v, FREQUENCIES, "Frequency")

    @field_validator("dayOfWeek")
    @classmethod
    def validate_day_of_week(cls, v):
        if v is not None and not 0 <= v <= 6:
            raise ValueError("Day of week must be between 0 (Sunday) and 6 (Saturday)")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, ORDER_STATUSES, "Status")


class MaintenanceOrderUpdate(BaseModel):
    clientId: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[str] = None
    dayOfWeek: Optional[int] = None
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    technicianId: Optional[int] = None
    address: Optional[str] = None
    estimatedDuration: Optional[int] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, v):
        return validate_choice(v, FREQUENCIES, "Frequency")

    @field_validator("dayOfWeek")
    @classmethod
    def validate_day_of_week(cls, v):
        if v is not None and not 0 <= v <= 6:
            raise ValueError("Day of week must be between 0 (Sunday) and 6 (Saturday)")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, ORDER_STATUSES, "Status")


class GenerateVisitsRequest(BaseModel):
    fromDate: Optional[date] = None
    toDate: Optional[date] = None
