"""Maintenance router - FastAPI endpoints for visits and recurring orders"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import require_permission
from ...database import get_db
from ...models import User
from ..work_orders.router import get_staff_user
from ..work_orders.service import serialize_work_order
from .schemas import (
    GenerateVisitsRequest,
    MaintenanceCreate,
    MaintenanceOrderCreate,
    MaintenanceOrderUpdate,
    MaintenanceUpdate,
    TechnicianAssignment,
)
from .service import (
    MaintenanceOrderService,
    MaintenanceService,
    serialize_maintenance,
    serialize_maintenance_order,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/maintenances", tags=["Maintenance"])
# Recurring agreements are internal scheduling; client portal logins are refused
orders_router = APIRouter(
    prefix="/api/maintenance-orders",
    tags=["Maintenance Orders"],
    dependencies=[Depends(get_staff_user)],
)


def get_maintenance_service(db: Session = Depends(get_db)) -> MaintenanceService:
    """Dependency injection for MaintenanceService"""
    return MaintenanceService(db)


def get_maintenance_order_service(db: Session = Depends(get_db)) -> MaintenanceOrderService:
    """Dependency injection for MaintenanceOrderService"""
    return MaintenanceOrderService(db)


# ============================================================================
# MAINTENANCE VISITS
# ============================================================================


@router.get("")
async def get_maintenances(
    status_filter: Optional[str] = Query(None, alias="status"),
    technicianId: Optional[int] = Query(None),
    startDate: Optional[date] = Query(None),
    endDate: Optional[date] = Query(None),
    current_user: User = Depends(require_permission("maintenance", "view")),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    maintenances = service.get_maintenances(current_user, status_filter, technicianId, startDate, endDate)
    return [serialize_maintenance(m) for m in maintenances]


@router.get("/{maintenance_id}")
async def get_maintenance(
    maintenance_id: int,
    current_user: User = Depends(require_permission("maintenance", "view")),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    return serialize_maintenance(service.get_maintenance(maintenance_id, current_user))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_maintenance(
    data: MaintenanceCreate,
    current_user: User = Depends(require_permission("maintenance", "create")),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    return serialize_maintenance(service.create_maintenance(data, current_user))


@router.patch("/{maintenance_id}")
async def update_maintenance(
    maintenance_id: int,
    data: MaintenanceUpdate,
    current_user: User = Depends(require_permission("maintenance", "edit")),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    return serialize_maintenance(service.update_maintenance(maintenance_id, data, current_user))


@router.patch("/{maintenance_id}/technician")
async def assign_maintenance_technician(
    maintenance_id: int,
    data: TechnicianAssignment,
    current_user: User = Depends(require_permission("maintenance", "edit")),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    return serialize_maintenance(service.assign_technician(maintenance_id, data.technicianId, current_user))


@router.delete("/{maintenance_id}")
async def delete_maintenance(
    maintenance_id: int,
    current_user: User = Depends(require_permission("maintenance", "delete")),
    service: MaintenanceService = Depends(get_maintenance_service),
):
    return service.delete_maintenance(maintenance_id, current_user)


# ============================================================================
# RECURRING MAINTENANCE ORDERS
# ============================================================================


@orders_router.get("")
async def get_maintenance_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    clientId: Optional[int] = Query(None),
    technicianId: Optional[int] = Query(None),
    current_user: User = Depends(require_permission("maintenance", "view")),
    service: MaintenanceOrderService = Depends(get_maintenance_order_service),
):
    orders = service.get_orders(current_user, status_filter, clientId, technicianId)
    return [serialize_maintenance_order(o) for o in orders]


@orders_router.get("/{order_id}")
async def get_maintenance_order(
    order_id: int,
    current_user: User = Depends(require_permission("maintenance", "view")),
    service: MaintenanceOrderService = Depends(get_maintenance_order_service),
):
    return serialize_maintenance_order(service.get_order(order_id, current_user))


@orders_router.post("", status_code=status.HTTP_201_CREATED)
async def create_maintenance_order(
    data: MaintenanceOrderCreate,
    current_user: User = Depends(require_permission("maintenance", "create")),
    service: MaintenanceOrderService = Depends(get_maintenance_order_service),
):
    return serialize_maintenance_order(service.create_order(data, current_user))


@orders_router.patch("/{order_id}")
async def update_maintenance_order(
    order_id: int,
    data: MaintenanceOrderUpdate,
    current_user: User = Depends(require_permission("maintenance", "edit")),
    service: MaintenanceOrderService = Depends(get_maintenance_order_service),
):
    return serialize_maintenance_order(service.update_order(order_id, data, current_user))


@orders_router.delete("/{order_id}")
async def delete_maintenance_order(
    order_id: int,
    current_user: User = Depends(require_permission("maintenance", "delete")),
    service: MaintenanceOrderService = Depends(get_maintenance_order_service),
):
    return service.delete_order(order_id, current_user)


@orders_router.get("/{order_id}/work-orders")
async def get_maintenance_order_visits(
    order_id: int,
    current_user: User = Depends(require_permission("maintenance", "view")),
    service: MaintenanceOrderService = Depends(get_maintenance_order_service),
):
    """Visits (maintenance work orders) generated from this order"""
    return [serialize_work_order(v) for v in service.get_visits(order_id, current_user)]


@orders_router.post("/{order_id}/generate-visits", status_code=status.HTTP_201_CREATED)
async def generate_maintenance_visits(
    order_id: int,
    data: Optional[GenerateVisitsRequest] = None,
    current_user: User = Depends(require_permission("maintenance", "create")),
    service: MaintenanceOrderService = Depends(get_maintenance_order_service),
):
    return service.generate_visits(order_id, data or GenerateVisitsRequest(), current_user)


__all__ = ["router", "orders_router"]
