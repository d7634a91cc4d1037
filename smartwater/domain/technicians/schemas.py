"""Technician schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel


class TechnicianCreate(BaseModel):
    userId: int
    specialization: Optional[str] = None
    certifications: Optional[str] = None


class TechnicianUpdate(BaseModel):
    specialization: Optional[str] = None
    certifications: Optional[str] = None
    active: Optional[bool] = None
