"""Repair schemas - Pydantic models for validation"""

from datetime import date, time
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_choice

REPAIR_STATUSES = ("pending", "assigned", "scheduled", "in_progress", "completed", "cancelled")
PRIORITIES = ("low", "medium", "high", "urgent")


class RepairCreate(BaseModel):
    clientId: int
    issueType: str
    description: str
    status: Optional[str] = "pending"
    priority: Optional[str] = "medium"
    technicianId: Optional[int] = None
    scheduledDate: Optional[date] = None
    scheduledTime: Optional[time] = None
    notes: Optional[str] = None

    @field_validator("issueType", "description")
    @classmethod
    def validate_required_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, REPAIR_STATUSES, "Status")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return validate_choice(v, PRIORITIES, "Priority")


class RepairUpdate(BaseModel):
    issueType: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    technicianId: Optional[int] = None
    scheduledDate: Optional[date] = None
    scheduledTime: Optional[time] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, REPAIR_STATUSES, "Status")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return validate_choice(v, PRIORITIES, "Priority")
