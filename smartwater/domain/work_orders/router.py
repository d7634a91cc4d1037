"""Work order router - FastAPI endpoints for work orders and their sub-resources"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    AuditLogResponse,
    ClockInRequest,
    ClockOutRequest,
    ItemCreate,
    ItemResponse,
    ItemUpdate,
    NoteCreate,
    NoteResponse,
    TeamMemberCreate,
    TeamMemberResponse,
    TeamMemberUpdate,
    TimeEntryCreate,
    TimeEntryResponse,
    TimeEntryUpdate,
    WorkOrderCreate,
    WorkOrderDetailResponse,
    WorkOrderResponse,
    WorkOrderUpdate,
)
from .service import (
    WorkOrderService,
    serialize_audit_log,
    serialize_item,
    serialize_note,
    serialize_team_member,
    serialize_time_entry,
    serialize_work_order,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/work-orders", tags=["Work Orders"])


def get_work_order_service(db: Session = Depends(get_db)) -> WorkOrderService:
    """Dependency injection for WorkOrderService"""
    return WorkOrderService(db)


def get_staff_user(current_user: User = Depends(get_current_user)) -> User:
    """Work orders are internal; client portal logins are refused"""
    if current_user.role == "client":
        raise HTTPException(status_code=403, detail="Staff access required")
    return current_user


# ============================================================================
# WORK ORDERS
# ============================================================================


@router.get("", response_model=list[WorkOrderResponse], response_model_exclude_unset=True)
async def get_work_orders(
    category: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    technicianId: Optional[int] = Query(None),
    projectId: Optional[int] = Query(None),
    repairId: Optional[int] = Query(None),
    includeClient: bool = Query(False),
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    work_orders = service.get_work_orders(
        current_user, category, status_filter, technicianId, projectId, repairId
    )
    hydrate = includeClient or category == "maintenance"
    return [serialize_work_order(w, include_client=hydrate) for w in work_orders]


@router.get("/technician-hours/summary")
async def get_technician_hours_summary(
    startDate: Optional[date] = Query(None),
    endDate: Optional[date] = Query(None),
    technicianId: Optional[int] = Query(None),
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    """Minutes worked and order counts per technician"""
    return service.get_technician_hours(current_user, startDate, endDate, technicianId)


@router.get("/{work_order_id}", response_model=WorkOrderDetailResponse)
async def get_work_order(
    work_order_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_work_order(service.get_work_order(work_order_id, current_user), detail=True)


@router.post(
    "",
    response_model=WorkOrderResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_work_order(
    data: WorkOrderCreate,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_work_order(service.create_work_order(data, current_user))


@router.patch("/{work_order_id}", response_model=WorkOrderResponse, response_model_exclude_unset=True)
async def update_work_order(
    work_order_id: int,
    data: WorkOrderUpdate,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_work_order(service.update_work_order(work_order_id, data, current_user))


@router.delete("/{work_order_id}")
async def delete_work_order(
    work_order_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return service.delete_work_order(work_order_id, current_user)


# ============================================================================
# NOTES & AUDIT LOG
# ============================================================================


@router.get("/{work_order_id}/notes", response_model=list[NoteResponse])
async def get_work_order_notes(
    work_order_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return [serialize_note(n) for n in service.get_notes(work_order_id, current_user)]


@router.post("/{work_order_id}/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_work_order_note(
    work_order_id: int,
    data: NoteCreate,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_note(service.add_note(work_order_id, data, current_user))


@router.get("/{work_order_id}/audit-logs", response_model=list[AuditLogResponse])
async def get_work_order_audit_logs(
    work_order_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return [serialize_audit_log(log) for log in service.get_audit_logs(work_order_id, current_user)]


# ============================================================================
# PARTS & LABOR
# ============================================================================


@router.get("/{work_order_id}/items", response_model=list[ItemResponse])
async def get_work_order_items(
    work_order_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return [serialize_item(i) for i in service.get_items(work_order_id, current_user)]


@router.post("/{work_order_id}/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_work_order_item(
    work_order_id: int,
    data: ItemCreate,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_item(service.add_item(work_order_id, data, current_user))


@router.patch("/{work_order_id}/items/{item_id}", response_model=ItemResponse)
async def update_work_order_item(
    work_order_id: int,
    item_id: int,
    data: ItemUpdate,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_item(service.update_item(work_order_id, item_id, data, current_user))


@router.delete("/{work_order_id}/items/{item_id}")
async def delete_work_order_item(
    work_order_id: int,
    item_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return service.delete_item(work_order_id, item_id, current_user)


# ============================================================================
# TIME ENTRIES
# ============================================================================


@router.get("/{work_order_id}/time-entries", response_model=list[TimeEntryResponse])
async def get_work_order_time_entries(
    work_order_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return [serialize_time_entry(e) for e in service.get_time_entries(work_order_id, current_user)]


@router.post(
    "/{work_order_id}/time-entries", response_model=TimeEntryResponse, status_code=status.HTTP_201_CREATED
)
async def create_work_order_time_entry(
    work_order_id: int,
    data: TimeEntryCreate,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_time_entry(service.add_time_entry(work_order_id, data, current_user))


@router.patch("/{work_order_id}/time-entries/{entry_id}", response_model=TimeEntryResponse)
async def update_work_order_time_entry(
    work_order_id: int,
    entry_id: int,
    data: TimeEntryUpdate,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_time_entry(service.update_time_entry(work_order_id, entry_id, data, current_user))


@router.delete("/{work_order_id}/time-entries/{entry_id}")
async def delete_work_order_time_entry(
    work_order_id: int,
    entry_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return service.delete_time_entry(work_order_id, entry_id, current_user)


@router.post(
    "/{work_order_id}/clock-in", response_model=TimeEntryResponse, status_code=status.HTTP_201_CREATED
)
async def clock_in(
    work_order_id: int,
    data: Optional[ClockInRequest] = None,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_time_entry(service.clock_in(work_order_id, data or ClockInRequest(), current_user))


@router.post("/{work_order_id}/clock-out", response_model=TimeEntryResponse)
async def clock_out(
    work_order_id: int,
    data: Optional[ClockOutRequest] = None,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_time_entry(service.clock_out(work_order_id, data or ClockOutRequest(), current_user))


# ============================================================================
# TEAM
# ============================================================================


@router.get("/{work_order_id}/team", response_model=list[TeamMemberResponse])
async def get_work_order_team(
    work_order_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return [serialize_team_member(m) for m in service.get_team(work_order_id, current_user)]


@router.post("/{work_order_id}/team", response_model=TeamMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_work_order_team_member(
    work_order_id: int,
    data: TeamMemberCreate,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_team_member(service.add_team_member(work_order_id, data, current_user))


@router.patch("/{work_order_id}/team/{member_id}", response_model=TeamMemberResponse)
async def update_work_order_team_member(
    work_order_id: int,
    member_id: int,
    data: TeamMemberUpdate,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return serialize_team_member(service.update_team_member(work_order_id, member_id, data, current_user))


@router.delete("/{work_order_id}/team/{member_id}")
async def remove_work_order_team_member(
    work_order_id: int,
    member_id: int,
    current_user: User = Depends(get_staff_user),
    service: WorkOrderService = Depends(get_work_order_service),
):
    return service.remove_team_member(work_order_id, member_id, current_user)


__all__ = ["router", "get_staff_user"]
