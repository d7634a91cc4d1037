"""Work order schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_choice

CATEGORIES = ("maintenance", "repair", "construction", "installation", "inspection", "other")
STATUSES = ("pending", "scheduled", "in_progress", "on_hold", "completed", "cancelled")
PRIORITIES = ("low", "medium", "high", "urgent")
ITEM_TYPES = ("part", "labor")


class ChecklistItem(BaseModel):
    text: str
    completed: bool = False


class WorkOrderBase(BaseModel):
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    scheduledDate: Optional[date] = None
    technicianId: Optional[int] = None
    clientId: Optional[int] = None
    projectId: Optional[int] = None
    projectPhaseId: Optional[int] = None
    repairId: Optional[int] = None
    maintenanceOrderId: Optional[int] = None
    checklist: Optional[list[ChecklistItem]] = None
    location: Optional[str] = None
    estimatedDuration: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return validate_choice(v, CATEGORIES, "Category")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, STATUSES, "Status")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return validate_choice(v, PRIORITIES, "Priority")

    @field_validator("estimatedDuration")
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v < 0:
            raise ValueError("Estimated duration cannot be negative")
        return v


class WorkOrderCreate(WorkOrderBase):
    title: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class WorkOrderUpdate(WorkOrderBase):
    title: Optional[str] = None


class NoteCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError("Note content is required")
        return v


class ItemCreate(BaseModel):
    itemType: str = "part"
    description: str
    quantity: float = 1
    unitPrice: int = 0  # cents
    inventoryItemId: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("itemType")
    @classmethod
    def validate_item_type(cls, v):
        return validate_choice(v, ITEM_TYPES, "Item type")

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        if v is not None and v < 0:
            raise ValueError("Quantity cannot be negative")
        return v


class ItemUpdate(BaseModel):
    itemType: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[float] = None
    unitPrice: Optional[int] = None
    inventoryItemId: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("itemType")
    @classmethod
    def validate_item_type(cls, v):
        return validate_choice(v, ITEM_TYPES, "Item type")

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        if v is not None and v < 0:
            raise ValueError("Quantity cannot be negative")
        return v


class TimeEntryCreate(BaseModel):
    userId: Optional[int] = None
    clockIn: Optional[datetime] = None
    clockOut: Optional[datetime] = None
    breakMinutes: int = 0
    notes: Optional[str] = None


class TimeEntryUpdate(BaseModel):
    clockIn: Optional[datetime] = None
    clockOut: Optional[datetime] = None
    breakMinutes: Optional[int] = None
    notes: Optional[str] = None


class ClockInRequest(BaseModel):
    notes: Optional[str] = None


class ClockOutRequest(BaseModel):
    breakMinutes: int = 0
    notes: Optional[str] = None


class TeamMemberCreate(BaseModel):
    userId: int
    role: str = "helper"
    isActive: bool = True


class TeamMemberUpdate(BaseModel):
    role: Optional[str] = None
    isActive: Optional[bool] = None


# ============================================================================
# Responses
# ============================================================================


class ClientSummary(BaseModel):
    id: int
    companyName: Optional[str] = None
    contactName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class TechnicianUserSummary(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None


class TechnicianSummary(BaseModel):
    id: int
    user: Optional[TechnicianUserSummary] = None


class NamedRecord(BaseModel):
    id: int
    name: str


class RepairSummary(BaseModel):
    id: int
    issueType: Optional[str] = None
    description: Optional[str] = None


class MaintenanceOrderSummary(BaseModel):
    id: int
    title: str
    frequency: str


class WorkOrderResponse(BaseModel):
    id: int
    organizationId: int
    title: str
    description: Optional[str] = None
    category: str
    status: str
    priority: str
    scheduledDate: Optional[str] = None
    technicianId: Optional[int] = None
    clientId: Optional[int] = None
    projectId: Optional[int] = None
    projectPhaseId: Optional[int] = None
    repairId: Optional[int] = None
    maintenanceOrderId: Optional[int] = None
    checklist: list[ChecklistItem] = []
    location: Optional[str] = None
    estimatedDuration: Optional[int] = None
    notes: Optional[str] = None
    createdBy: Optional[int] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    # Present when the list is hydrated (includeClient or maintenance category)
    client: Optional[ClientSummary] = None
    technician: Optional[TechnicianSummary] = None


class WorkOrderDetailResponse(WorkOrderResponse):
    project: Optional[NamedRecord] = None
    projectPhase: Optional[NamedRecord] = None
    repair: Optional[RepairSummary] = None
    maintenanceOrder: Optional[MaintenanceOrderSummary] = None


class NoteResponse(BaseModel):
    id: int
    workOrderId: int
    userId: Optional[int] = None
    userName: str
    content: str
    createdAt: Optional[str] = None


class ItemResponse(BaseModel):
    id: int
    workOrderId: int
    itemType: str
    description: str
    quantity: Optional[float] = None
    unitPrice: Optional[int] = None  # cents
    totalPrice: Optional[int] = None  # cents
    inventoryItemId: Optional[int] = None
    notes: Optional[str] = None
    createdAt: Optional[str] = None


class TimeEntryResponse(BaseModel):
    id: int
    workOrderId: int
    userId: int
    userName: str
    clockIn: Optional[str] = None
    clockOut: Optional[str] = None
    breakMinutes: Optional[int] = None
    duration: Optional[int] = None  # minutes
    notes: Optional[str] = None


class TeamMemberResponse(BaseModel):
    id: int
    workOrderId: int
    userId: int
    role: str
    isActive: bool
    userName: str
    userEmail: Optional[str] = None
    userRole: Optional[str] = None
    createdAt: Optional[str] = None


class AuditLogResponse(BaseModel):
    id: int
    workOrderId: int
    userId: Optional[int] = None
    userName: str
    action: str
    description: str
    fieldName: Optional[str] = None
    oldValue: Optional[str] = None
    newValue: Optional[str] = None
    createdAt: Optional[str] = None
