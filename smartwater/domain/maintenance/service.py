"""Maintenance service - Business logic for visits and recurring orders"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import Maintenance, User
from ...models_work_order import MaintenanceOrder, WorkOrder
from ...shared.serializers import isoformat
from ..clients.repository import ClientRepository
from ..clients.service import client_display_name, require_client
from ..technicians.service import require_technician, serialize_technician_summary
from ..work_orders.service import serialize_work_order
from .recurrence import generate_recurring_dates
from .repository import MaintenanceOrderRepository, MaintenanceRepository
from .schemas import (
    GenerateVisitsRequest,
    MaintenanceCreate,
    MaintenanceOrderCreate,
    MaintenanceOrderUpdate,
    MaintenanceUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_VISIT_WINDOW_DAYS = 30

MAINTENANCE_FIELDS = {
    "clientId": "client_id",
    "scheduledDate": "scheduled_date",
    "scheduledTime": "scheduled_time",
    "status": "status",
    "type": "type",
    "description": "description",
    "technicianId": "technician_id",
    "notes": "notes",
}

ORDER_FIELDS = {
    "clientId": "client_id",
    "title": "title",
    "description": "description",
    "frequency": "frequency",
    "dayOfWeek": "day_of_week",
    "startDate": "start_date",
    "endDate": "end_date",
    "technicianId": "technician_id",
    "address": "address",
    "estimatedDuration": "estimated_duration",
    "status": "status",
    "notes": "notes",
}

REQUIRED_COLUMNS = {"client_id", "scheduled_date", "status", "type", "title", "frequency", "start_date"}


def _updates(data, field_map: dict) -> dict:
    return {
        field_map[field]: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if field in field_map and not (value is None and field_map[field] in REQUIRED_COLUMNS)
    }


def serialize_maintenance(maintenance: Maintenance) -> dict:
    return {
        "id": maintenance.id,
        "organizationId": maintenance.organization_id,
        "clientId": maintenance.client_id,
        "clientName": client_display_name(maintenance.client),
        "scheduledDate": isoformat(maintenance.scheduled_date),
        "scheduledTime": maintenance.scheduled_time.strftime("%H:%M") if maintenance.scheduled_time else None,
        "status": maintenance.status,
        "type": maintenance.type,
        "description": maintenance.description,
        "technicianId": maintenance.technician_id,
        "technician": serialize_technician_summary(maintenance.technician),
        "completed": maintenance.completed,
        "notes": maintenance.notes,
        "createdAt": isoformat(maintenance.created_at),
    }


def serialize_maintenance_order(order: MaintenanceOrder) -> dict:
    return {
        "id": order.id,
        "organizationId": order.organization_id,
        "clientId": order.client_id,
        "clientName": client_display_name(order.client),
        "title": order.title,
        "description": order.description,
        "frequency": order.frequency,
        "dayOfWeek": order.day_of_week,
        "startDate": isoformat(order.start_date),
        "endDate": isoformat(order.end_date),
        "technicianId": order.technician_id,
        "address": order.address,
        "estimatedDuration": order.estimated_duration,
        "status": order.status,
        "notes": order.notes,
        "createdBy": order.created_by,
        "createdAt": isoformat(order.created_at),
    }


class MaintenanceService:
    """Service layer for one-off maintenance visits"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = MaintenanceRepository()

    def get_maintenances(
        self,
        user: User,
        status: Optional[str] = None,
        technician_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Maintenance]:
        client_ids = None
        if user.role == "client":
            client_ids = ClientRepository.get_client_ids_for_user(self.db, user.id)
        return self.repo.get_maintenances(
            self.db, get_org_filter(user), status, technician_id, start_date, end_date, client_ids
        )

    def get_maintenance(self, maintenance_id: int, user: User) -> Maintenance:
        maintenance = self.repo.get_maintenance_by_id(self.db, maintenance_id, get_org_filter(user))
        if not maintenance:
            raise HTTPException(status_code=404, detail="Maintenance not found")
        if user.role == "client" and maintenance.client_id not in ClientRepository.get_client_ids_for_user(
            self.db, user.id
        ):
            raise HTTPException(status_code=404, detail="Maintenance not found")
        return maintenance

    def create_maintenance(self, data: MaintenanceCreate, user: User) -> Maintenance:
        organization_id = require_organization_id(user)
        require_client(self.db, data.clientId, organization_id)
        require_technician(self.db, data.technicianId, organization_id)

        values = {column: getattr(data, field) for field, column in MAINTENANCE_FIELDS.items()}
        values["status"] = values["status"] or "scheduled"
        values["completed"] = values["status"] == "completed"

        maintenance = self.repo.create_maintenance(self.db, organization_id=organization_id, **values)
        logger.info(f"✅ Maintenance {maintenance.id} scheduled for {maintenance.scheduled_date}")
        return maintenance

    def update_maintenance(self, maintenance_id: int, data: MaintenanceUpdate, user: User) -> Maintenance:
        maintenance = self.get_maintenance(maintenance_id, user)
        updates = _updates(data, MAINTENANCE_FIELDS)

        if "client_id" in updates:
            require_client(self.db, updates["client_id"], maintenance.organization_id)
        if updates.get("technician_id") is not None:
            require_technician(self.db, updates["technician_id"], maintenance.organization_id)
        if "status" in updates:
            updates["completed"] = updates["status"] == "completed"
            if updates["completed"]:
                logger.info(f"✅ Maintenance {maintenance_id} completed")

        return self.repo.update_maintenance(self.db, maintenance, **updates)

    def assign_technician(self, maintenance_id: int, technician_id: Optional[int], user: User) -> Maintenance:
        maintenance = self.get_maintenance(maintenance_id, user)
        require_technician(self.db, technician_id, maintenance.organization_id)
        logger.info(f"🔄 Maintenance {maintenance_id} technician -> {technician_id}")
        return self.repo.update_maintenance(self.db, maintenance, technician_id=technician_id)

    def delete_maintenance(self, maintenance_id: int, user: User) -> dict:
        maintenance = self.get_maintenance(maintenance_id, user)
        try:
            self.repo.delete_maintenance(self.db, maintenance)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Maintenance {maintenance_id} still has related records: {e}")
            raise HTTPException(
                status_code=409, detail="Maintenance visit has related records and cannot be deleted"
            ) from e
        logger.info(f"🗑️ Maintenance {maintenance_id} deleted")
        return {"success": True}


class MaintenanceOrderService:
    """Service layer for recurring maintenance orders"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = MaintenanceOrderRepository()

    def get_orders(
        self,
        user: User,
        status: Optional[str] = None,
        client_id: Optional[int] = None,
        technician_id: Optional[int] = None,
    ) -> list[MaintenanceOrder]:
        return self.repo.get_orders(self.db, get_org_filter(user), status, client_id, technician_id)

    def get_order(self, order_id: int, user: User) -> MaintenanceOrder:
        order = self.repo.get_order_by_id(self.db, order_id)
        if not order:
            raise HTTPException(status_code=404, detail="Maintenance order not found")
        org_filter = get_org_filter(user)
        if org_filter is not None and order.organization_id != org_filter:
            logger.warning(f"🚫 User {user.id} denied access to maintenance order {order_id}")
            raise HTTPException(status_code=403, detail="Access denied")
        return order

    def create_order(self, data: MaintenanceOrderCreate, user: User) -> MaintenanceOrder:
        organization_id = require_organization_id(user)
        require_client(self.db, data.clientId, organization_id)
        require_technician(self.db, data.technicianId, organization_id)

        values = {column: getattr(data, field) for field, column in ORDER_FIELDS.items()}
        values["status"] = values["status"] or "active"

        order = self.repo.create_order(
            self.db, organization_id=organization_id, created_by=user.id, **values
        )
        logger.info(f"✅ Maintenance order {order.id} created ({order.frequency})")
        return order

    def update_order(self, order_id: int, data: MaintenanceOrderUpdate, user: User) -> MaintenanceOrder:
        order = self.get_order(order_id, user)
        updates = _updates(data, ORDER_FIELDS)
        if "client_id" in updates:
            require_client(self.db, updates["client_id"], order.organization_id)
        if updates.get("technician_id") is not None:
            require_technician(self.db, updates["technician_id"], order.organization_id)
        return self.repo.update_order(self.db, order, **updates)

    def delete_order(self, order_id: int, user: User) -> dict:
        order = self.get_order(order_id, user)
        self.repo.delete_order(self.db, order)
        logger.info(f"🗑️ Maintenance order {order_id} deleted")
        return {"success": True}

    def get_visits(self, order_id: int, user: User) -> list[WorkOrder]:
        order = self.get_order(order_id, user)
        return self.repo.get_visits(self.db, order.id)

    def generate_visits(self, order_id: int, data: GenerateVisitsRequest, user: User) -> dict:
        """Create a maintenance work order for each scheduled date without one"""
        order = self.get_order(order_id, user)

        if order.status != "active":
            raise HTTPException(
                status_code=400, detail="Can only generate visits for active maintenance orders"
            )

        start = data.fromDate or order.start_date
        end = data.toDate or order.end_date or date.today() + timedelta(days=DEFAULT_VISIT_WINDOW_DAYS)

        existing_dates = {v.scheduled_date for v in self.repo.get_visits(self.db, order.id)}
        visit_dates = generate_recurring_dates(start, end, order.frequency or "weekly", order.day_of_week)

        visits = [
            WorkOrder(
                organization_id=order.organization_id,
                title=order.title or "Maintenance Service",
                description=order.description,
                category="maintenance",
                status="pending",
                priority="medium",
                scheduled_date=visit_date,
                technician_id=order.technician_id,
                client_id=order.client_id,
                maintenance_order_id=order.id,
                location=order.address,
                estimated_duration=order.estimated_duration,
                created_by=user.id,
            )
            for visit_date in visit_dates
            if visit_date not in existing_dates
        ]
        if visits:
            self.repo.create_visits(self.db, visits)

        logger.info(
            f"📅 Generated {len(visits)} visits for maintenance order {order.id} "
            f"({start} to {end}, {len(visit_dates) - len(visits)} already scheduled)"
        )
        return {"generated": len(visits), "visits": [serialize_work_order(v) for v in visits]}
