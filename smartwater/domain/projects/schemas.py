"""Project schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_choice

PROJECT_STATUSES = ("planning", "in_progress", "review", "completed", "on_hold", "cancelled")
PHASE_STATUSES = ("pending", "in_progress", "completed", "on_hold")


def _percent(v):
    if v is not None and not 0 <= v <= 100:
        raise ValueError("Completion must be between 0 and 100")
    return v


class ProjectCreate(BaseModel):
    clientId: int
    name: str
    description: Optional[str] = None
    projectType: Optional[str] = None
    startDate: date
    deadline: Optional[date] = None
    status: Optional[str] = "planning"
    completion: Optional[int] = 0
    budget: Optional[int] = None  # cents
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Project name is required")
        return v.strip()

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, PROJECT_STATUSES, "Status")

    @field_validator("completion")
    @classmethod
    def validate_completion(cls, v):
        return _percent(v)


class ProjectUpdate(BaseModel):
    clientId: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    projectType: Optional[str] = None
    startDate: Optional[date] = None
    deadline: Optional[date] = None
    status: Optional[str] = None
    completion: Optional[int] = None
    budget: Optional[int] = None
    notes: Optional[str] = None
    isArchived: Optional[bool] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, PROJECT_STATUSES, "Status")

    @field_validator("completion")
    @classmethod
    def validate_completion(cls, v):
        return _percent(v)


class PhaseCreate(BaseModel):
    projectId: int
    name: str
    description: Optional[str] = None
    status: Optional[str] = "pending"
    order: Optional[int] = 0
    percentComplete: Optional[int] = 0
    startDate: Optional[date] = None
    endDate: Optional[date] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, PHASE_STATUSES, "Phase status")

    @field_validator("percentComplete")
    @classmethod
    def validate_percent(cls, v):
        return _percent(v)


class PhaseUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    order: Optional[int] = None
    percentComplete: Optional[int] = None
    startDate: Optional[date] = None
    endDate: Optional[date] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, PHASE_STATUSES, "Phase status")

    @field_validator("percentComplete")
    @classmethod
    def validate_percent(cls, v):
        return _percent(v)


class AssignmentCreate(BaseModel):
    technicianId: int
    role: str = "technician"
