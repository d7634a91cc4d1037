"""Work order service - Business logic for work orders, parts, time and crew"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import Client, User
from ...models_work_order import (
    MaintenanceOrder,
    WorkOrder,
    WorkOrderAuditLog,
    WorkOrderItem,
    WorkOrderNote,
    WorkOrderTeamMember,
    WorkOrderTimeEntry,
)
from ...shared.serializers import isoformat
from ..clients.service import require_client
from ..inventory.stock import adjust_stock, deduct_stock, require_inventory_item, return_stock
from ..projects.repository import ProjectRepository
from ..repairs.repository import RepairRepository
from ..technicians.service import require_technician, serialize_technician_summary
from ..users.repository import UserRepository
from .audit import TRACKED_FIELDS, diff_work_order
from .hours import calculate_duration, summarize_technician_hours
from .repository import WorkOrderRepository
from .schemas import (
    ClockInRequest,
    ClockOutRequest,
    ItemCreate,
    ItemUpdate,
    NoteCreate,
    TeamMemberCreate,
    TeamMemberUpdate,
    TimeEntryCreate,
    TimeEntryUpdate,
    WorkOrderCreate,
    WorkOrderUpdate,
)

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"

FIELD_MAP = {
    **TRACKED_FIELDS,
    "clientId": "client_id",
    "repairId": "repair_id",
    "maintenanceOrderId": "maintenance_order_id",
    "location": "location",
    "estimatedDuration": "estimated_duration",
}

REQUIRED_COLUMNS = {"title", "category", "status", "priority"}


def serialize_client_summary(client: Optional[Client]) -> Optional[dict]:
    if not client:
        return None
    return {
        "id": client.id,
        "companyName": client.company_name,
        "contactName": client.contact_name,
        "email": client.email,
        "phone": client.phone,
        "address": client.address,
        "latitude": client.latitude,
        "longitude": client.longitude,
    }


def serialize_work_order(work_order: WorkOrder, include_client: bool = False, detail: bool = False) -> dict:
    data = {
        "id": work_order.id,
        "organizationId": work_order.organization_id,
        "title": work_order.title,
        "description": work_order.description,
        "category": work_order.category,
        "status": work_order.status,
        "priority": work_order.priority,
        "scheduledDate": isoformat(work_order.scheduled_date),
        "technicianId": work_order.technician_id,
        "clientId": work_order.client_id,
        "projectId": work_order.project_id,
        "projectPhaseId": work_order.project_phase_id,
        "repairId": work_order.repair_id,
        "maintenanceOrderId": work_order.maintenance_order_id,
        "checklist": work_order.checklist or [],
        "location": work_order.location,
        "estimatedDuration": work_order.estimated_duration,
        "notes": work_order.notes,
        "createdBy": work_order.created_by,
        "createdAt": isoformat(work_order.created_at),
        "updatedAt": isoformat(work_order.updated_at),
    }
    if include_client or detail:
        data["client"] = serialize_client_summary(work_order.client)
        data["technician"] = serialize_technician_summary(work_order.technician)
    if detail:
        project, phase, repair, order = (
            work_order.project,
            work_order.project_phase,
            work_order.repair,
            work_order.maintenance_order,
        )
        data["project"] = {"id": project.id, "name": project.name} if project else None
        data["projectPhase"] = {"id": phase.id, "name": phase.name} if phase else None
        data["repair"] = (
            {"id": repair.id, "issueType": repair.issue_type, "description": repair.description}
            if repair
            else None
        )
        data["maintenanceOrder"] = (
            {"id": order.id, "title": order.title, "frequency": order.frequency} if order else None
        )
    return data


def serialize_note(note: WorkOrderNote) -> dict:
    return {
        "id": note.id,
        "workOrderId": note.work_order_id,
        "userId": note.user_id,
        "userName": note.user.name if note.user else UNKNOWN_USER,
        "content": note.content,
        "createdAt": isoformat(note.created_at),
    }


def serialize_audit_log(log: WorkOrderAuditLog) -> dict:
    return {
        "id": log.id,
        "workOrderId": log.work_order_id,
        "userId": log.user_id,
        "userName": log.user.name if log.user else UNKNOWN_USER,
        "action": log.action,
        "description": log.description,
        "fieldName": log.field_name,
        "oldValue": log.old_value,
        "newValue": log.new_value,
        "createdAt": isoformat(log.created_at),
    }


def serialize_item(item: WorkOrderItem) -> dict:
    return {
        "id": item.id,
        "workOrderId": item.work_order_id,
        "itemType": item.item_type,
        "description": item.description,
        "quantity": item.quantity,
        "unitPrice": item.unit_price,
        "totalPrice": item.total_price,
        "inventoryItemId": item.inventory_item_id,
        "notes": item.notes,
        "createdAt": isoformat(item.created_at),
    }


def serialize_time_entry(entry: WorkOrderTimeEntry) -> dict:
    return {
        "id": entry.id,
        "workOrderId": entry.work_order_id,
        "userId": entry.user_id,
        "userName": entry.user.name if entry.user else UNKNOWN_USER,
        "clockIn": isoformat(entry.clock_in),
        "clockOut": isoformat(entry.clock_out),
        "breakMinutes": entry.break_minutes,
        "duration": entry.duration,
        "notes": entry.notes,
    }


def serialize_team_member(member: WorkOrderTeamMember) -> dict:
    user = member.user
    return {
        "id": member.id,
        "workOrderId": member.work_order_id,
        "userId": member.user_id,
        "role": member.role,
        "isActive": member.is_active,
        "userName": user.name if user else UNKNOWN_USER,
        "userEmail": user.email if user else None,
        "userRole": user.role if user else None,
        "createdAt": isoformat(member.created_at),
    }


def _line_total(quantity: Optional[float], unit_price: Optional[int]) -> int:
    return round((quantity if quantity is not None else 1) * (unit_price or 0))


def _stock_link(item_type: Optional[str], inventory_item_id: Optional[int]) -> Optional[int]:
    """Only parts move stock"""
    return inventory_item_id if item_type == "part" else None


class WorkOrderService:
    """Service layer for work order business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = WorkOrderRepository()

    # ========================================================================
    # Lookups and validation
    # ========================================================================

    def get_work_order(self, work_order_id: int, user: User) -> WorkOrder:
        work_order = self.repo.get_work_order_by_id(self.db, work_order_id, get_org_filter(user))
        if not work_order:
            raise HTTPException(status_code=404, detail="Work order not found")
        return work_order

    def _require_org_user(self, user_id: int, organization_id: int) -> User:
        member = UserRepository.get_by_id(self.db, user_id)
        if not member or member.organization_id != organization_id:
            raise HTTPException(status_code=400, detail="User must belong to your organization")
        return member

    def _validate_links(self, values: dict, organization_id: int, current: Optional[WorkOrder] = None) -> None:
        """Every referenced record must belong to the same organization"""
        if values.get("technician_id") is not None:
            require_technician(self.db, values["technician_id"], organization_id)
        if values.get("client_id") is not None:
            require_client(self.db, values["client_id"], organization_id)
        if values.get("project_id") is not None:
            if not ProjectRepository.get_project_by_id(self.db, values["project_id"], organization_id):
                raise HTTPException(status_code=404, detail="Project not found")
        if values.get("project_phase_id") is not None:
            phase = ProjectRepository.get_phase_by_id(self.db, values["project_phase_id"], organization_id)
            if not phase:
                raise HTTPException(status_code=404, detail="Phase not found")
            project_id = values.get("project_id", current.project_id if current else None)
            if project_id is not None and phase.project_id != project_id:
                raise HTTPException(status_code=400, detail="Phase does not belong to the work order's project")
        if values.get("repair_id") is not None:
            if not RepairRepository.get_repair_by_id(self.db, values["repair_id"], organization_id):
                raise HTTPException(status_code=404, detail="Repair not found")
        if values.get("maintenance_order_id") is not None:
            order = (
                self.db.query(MaintenanceOrder)
                .filter(
                    MaintenanceOrder.id == values["maintenance_order_id"],
                    MaintenanceOrder.organization_id == organization_id,
                )
                .first()
            )
            if not order:
                raise HTTPException(status_code=404, detail="Maintenance order not found")

    # ========================================================================
    # Work orders
    # ========================================================================

    def get_work_orders(
        self,
        user: User,
        category: Optional[str] = None,
        status: Optional[str] = None,
        technician_id: Optional[int] = None,
        project_id: Optional[int] = None,
        repair_id: Optional[int] = None,
    ) -> list[WorkOrder]:
        return self.repo.get_work_orders(
            self.db, get_org_filter(user), category, status, technician_id, project_id, repair_id
        )

    def create_work_order(self, data: WorkOrderCreate, user: User) -> WorkOrder:
        organization_id = require_organization_id(user)
        payload = data.model_dump()
        values = {column: payload[field] for field, column in FIELD_MAP.items()}
        values["category"] = values["category"] or "other"
        values["status"] = values["status"] or "pending"
        values["priority"] = values["priority"] or "medium"
        self._validate_links(values, organization_id)

        work_order = WorkOrder(organization_id=organization_id, created_by=user.id, **values)
        self.repo.add(self.db, work_order)
        self.db.flush()
        self.repo.add(
            self.db,
            WorkOrderAuditLog(
                work_order_id=work_order.id,
                user_id=user.id,
                action="created",
                description=f'Work order "{work_order.title}" created',
            ),
        )
        self.repo.save(self.db, work_order)
        logger.info(f"✅ Work order {work_order.id} '{work_order.title}' created ({work_order.category})")
        return work_order

    def update_work_order(self, work_order_id: int, data: WorkOrderUpdate, user: User) -> WorkOrder:
        work_order = self.get_work_order(work_order_id, user)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if field in FIELD_MAP and not (value is None and FIELD_MAP[field] in REQUIRED_COLUMNS)
        }
        if changes.get("checklist") is not None:
            # Keep defaulted flags such as completed=False
            changes["checklist"] = [item.model_dump() for item in data.checklist]
        values = {FIELD_MAP[field]: value for field, value in changes.items()}
        self._validate_links(values, work_order.organization_id, current=work_order)

        audit_entries = diff_work_order(work_order, changes)

        for column, value in values.items():
            setattr(work_order, column, value)
        for entry in audit_entries:
            self.repo.add(self.db, WorkOrderAuditLog(work_order_id=work_order.id, user_id=user.id, **entry))

        self.repo.save(self.db, work_order)
        if audit_entries:
            logger.info(
                f"🔄 Work order {work_order.id} updated: "
                f"{', '.join(e['field_name'] for e in audit_entries)}"
            )
        return work_order

    def delete_work_order(self, work_order_id: int, user: User) -> dict:
        work_order = self.get_work_order(work_order_id, user)
        try:
            self.repo.delete_work_order(self.db, work_order)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Work order {work_order_id} is still referenced: {e}")
            raise HTTPException(
                status_code=409, detail="Work order is still referenced by other records"
            ) from e
        logger.info(f"🗑️ Work order {work_order_id} deleted")
        return {"success": True}

    def get_technician_hours(
        self,
        user: User,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        technician_id: Optional[int] = None,
    ) -> list[dict]:
        work_orders = self.repo.get_assigned_with_time_entries(self.db, get_org_filter(user))
        return summarize_technician_hours(work_orders, start_date, end_date, technician_id)

    # ========================================================================
    # Notes and audit trail
    # ========================================================================

    def get_notes(self, work_order_id: int, user: User) -> list[WorkOrderNote]:
        work_order = self.get_work_order(work_order_id, user)
        return self.repo.get_notes(self.db, work_order.id)

    def add_note(self, work_order_id: int, data: NoteCreate, user: User) -> WorkOrderNote:
        work_order = self.get_work_order(work_order_id, user)
        note = WorkOrderNote(work_order_id=work_order.id, user_id=user.id, content=data.content)
        self.repo.add(self.db, note)
        return self.repo.save(self.db, note)

    def get_audit_logs(self, work_order_id: int, user: User) -> list[WorkOrderAuditLog]:
        work_order = self.get_work_order(work_order_id, user)
        return self.repo.get_audit_logs(self.db, work_order.id)

    # ========================================================================
    # Parts and labor
    # ========================================================================

    def get_items(self, work_order_id: int, user: User) -> list[WorkOrderItem]:
        work_order = self.get_work_order(work_order_id, user)
        return self.repo.get_items(self.db, work_order.id)

    def _get_item(self, work_order: WorkOrder, item_id: int) -> WorkOrderItem:
        item = self.repo.get_item(self.db, work_order.id, item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Item not found")
        return item

    def add_item(self, work_order_id: int, data: ItemCreate, user: User) -> WorkOrderItem:
        work_order = self.get_work_order(work_order_id, user)
        quantity = data.quantity if data.quantity is not None else 1
        require_inventory_item(self.db, data.inventoryItemId, work_order.organization_id)

        item = WorkOrderItem(
            work_order_id=work_order.id,
            item_type=data.itemType,
            description=data.description,
            quantity=quantity,
            unit_price=data.unitPrice,
            total_price=_line_total(quantity, data.unitPrice),
            inventory_item_id=data.inventoryItemId,
            notes=data.notes,
        )
        self.repo.add(self.db, item)
        deduct_stock(
            self.db, _stock_link(item.item_type, item.inventory_item_id), work_order.organization_id, quantity
        )
        return self.repo.save(self.db, item)

    def update_item(self, work_order_id: int, item_id: int, data: ItemUpdate, user: User) -> WorkOrderItem:
        work_order = self.get_work_order(work_order_id, user)
        item = self._get_item(work_order, item_id)

        old_link = _stock_link(item.item_type, item.inventory_item_id)
        old_quantity = item.quantity or 0

        updates = data.model_dump(exclude_unset=True)
        if updates.get("itemType"):
            item.item_type = updates["itemType"]
        if updates.get("description"):
            item.description = updates["description"]
        if updates.get("quantity") is not None:
            item.quantity = updates["quantity"]
        if updates.get("unitPrice") is not None:
            item.unit_price = updates["unitPrice"]
        if "inventoryItemId" in updates:
            require_inventory_item(self.db, updates["inventoryItemId"], work_order.organization_id)
            item.inventory_item_id = updates["inventoryItemId"]
        if "notes" in updates:
            item.notes = updates["notes"]
        item.total_price = _line_total(item.quantity, item.unit_price)

        new_link = _stock_link(item.item_type, item.inventory_item_id)
        if old_link or new_link:
            adjust_stock(
                self.db, work_order.organization_id, old_link, old_quantity, new_link, item.quantity or 0
            )
        return self.repo.save(self.db, item)

    def delete_item(self, work_order_id: int, item_id: int, user: User) -> dict:
        work_order = self.get_work_order(work_order_id, user)
        item = self._get_item(work_order, item_id)
        return_stock(
            self.db,
            _stock_link(item.item_type, item.inventory_item_id),
            work_order.organization_id,
            item.quantity if item.quantity is not None else 1,
        )
        self.repo.delete(self.db, item)
        return {"success": True}

    # ========================================================================
    # Time tracking
    # ========================================================================

    def get_time_entries(self, work_order_id: int, user: User) -> list[WorkOrderTimeEntry]:
        work_order = self.get_work_order(work_order_id, user)
        return self.repo.get_time_entries(self.db, work_order.id)

    def _get_time_entry(self, work_order: WorkOrder, entry_id: int) -> WorkOrderTimeEntry:
        entry = self.repo.get_time_entry(self.db, work_order.id, entry_id)
        if not entry:
            raise HTTPException(status_code=404, detail="Time entry not found")
        return entry

    def add_time_entry(self, work_order_id: int, data: TimeEntryCreate, user: User) -> WorkOrderTimeEntry:
        work_order = self.get_work_order(work_order_id, user)
        user_id = data.userId or user.id
        if user_id != user.id:
            self._require_org_user(user_id, work_order.organization_id)

        clock_in = data.clockIn or datetime.utcnow()
        entry = WorkOrderTimeEntry(
            work_order_id=work_order.id,
            user_id=user_id,
            clock_in=clock_in,
            clock_out=data.clockOut,
            break_minutes=data.breakMinutes or 0,
            notes=data.notes,
        )
        if data.clockOut:
            entry.duration = calculate_duration(clock_in, data.clockOut, entry.break_minutes)
        self.repo.add(self.db, entry)
        return self.repo.save(self.db, entry)

    def update_time_entry(
        self, work_order_id: int, entry_id: int, data: TimeEntryUpdate, user: User
    ) -> WorkOrderTimeEntry:
        work_order = self.get_work_order(work_order_id, user)
        entry = self._get_time_entry(work_order, entry_id)

        updates = data.model_dump(exclude_unset=True)
        if updates.get("clockIn"):
            entry.clock_in = updates["clockIn"]
        if "clockOut" in updates:
            entry.clock_out = updates["clockOut"]
        if updates.get("breakMinutes") is not None:
            entry.break_minutes = updates["breakMinutes"]
        if "notes" in updates:
            entry.notes = updates["notes"]

        entry.duration = (
            calculate_duration(entry.clock_in, entry.clock_out, entry.break_minutes)
            if entry.clock_out
            else None
        )
        return self.repo.save(self.db, entry)

    def delete_time_entry(self, work_order_id: int, entry_id: int, user: User) -> dict:
        work_order = self.get_work_order(work_order_id, user)
        self.repo.delete(self.db, self._get_time_entry(work_order, entry_id))
        return {"success": True}

    def clock_in(self, work_order_id: int, data: ClockInRequest, user: User) -> WorkOrderTimeEntry:
        work_order = self.get_work_order(work_order_id, user)
        entry = WorkOrderTimeEntry(
            work_order_id=work_order.id,
            user_id=user.id,
            clock_in=datetime.utcnow(),
            break_minutes=0,
            notes=data.notes,
        )
        self.repo.add(self.db, entry)
        self.repo.save(self.db, entry)
        logger.info(f"⏱️ User {user.id} clocked in on work order {work_order.id}")
        return entry

    def clock_out(self, work_order_id: int, data: ClockOutRequest, user: User) -> WorkOrderTimeEntry:
        work_order = self.get_work_order(work_order_id, user)
        entry = self.repo.get_open_time_entry(self.db, work_order.id, user.id)
        if not entry:
            raise HTTPException(status_code=400, detail="No open time entry found. Please clock in first.")

        entry.clock_out = datetime.utcnow()
        entry.break_minutes = data.breakMinutes or 0
        entry.duration = calculate_duration(entry.clock_in, entry.clock_out, entry.break_minutes)
        entry.notes = data.notes or entry.notes
        self.repo.save(self.db, entry)
        logger.info(f"⏱️ User {user.id} clocked out of work order {work_order.id} ({entry.duration} min)")
        return entry

    # ========================================================================
    # Crew
    # ========================================================================

    def get_team(self, work_order_id: int, user: User) -> list[WorkOrderTeamMember]:
        work_order = self.get_work_order(work_order_id, user)
        return self.repo.get_team_members(self.db, work_order.id)

    def _get_member(self, work_order: WorkOrder, member_id: int) -> WorkOrderTeamMember:
        member = self.repo.get_team_member(self.db, work_order.id, member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Team member not found")
        return member

    def add_team_member(self, work_order_id: int, data: TeamMemberCreate, user: User) -> WorkOrderTeamMember:
        work_order = self.get_work_order(work_order_id, user)
        self._require_org_user(data.userId, work_order.organization_id)
        member = WorkOrderTeamMember(
            work_order_id=work_order.id,
            user_id=data.userId,
            role=data.role or "helper",
            is_active=data.isActive,
        )
        self.repo.add(self.db, member)
        return self.repo.save(self.db, member)

    def update_team_member(
        self, work_order_id: int, member_id: int, data: TeamMemberUpdate, user: User
    ) -> WorkOrderTeamMember:
        work_order = self.get_work_order(work_order_id, user)
        member = self._get_member(work_order, member_id)
        if data.role:
            member.role = data.role
        if data.isActive is not None:
            member.is_active = data.isActive
        return self.repo.save(self.db, member)

    def remove_team_member(self, work_order_id: int, member_id: int, user: User) -> dict:
        work_order = self.get_work_order(work_order_id, user)
        self.repo.delete(self.db, self._get_member(work_order, member_id))
        return {"success": True}
