"""Repair service - Business logic for repair requests"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import Repair, User
from ...shared.serializers import isoformat
from ..clients.repository import ClientRepository
from ..clients.service import client_display_name, require_client
from ..technicians.service import require_technician, serialize_technician_summary
from .repository import RepairRepository
from .schemas import RepairCreate, RepairUpdate

logger = logging.getLogger(__name__)

FIELD_MAP = {
    "issueType": "issue_type",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "technicianId": "technician_id",
    "scheduledDate": "scheduled_date",
    "scheduledTime": "scheduled_time",
    "notes": "notes",
}

REQUIRED_COLUMNS = {"issue_type", "description", "status", "priority"}


def serialize_repair(repair: Repair) -> dict:
    return {
        "id": repair.id,
        "organizationId": repair.organization_id,
        "clientId": repair.client_id,
        "clientName": client_display_name(repair.client),
        "issueType": repair.issue_type,
        "description": repair.description,
        "reportedDate": isoformat(repair.reported_date),
        "status": repair.status,
        "priority": repair.priority,
        "technicianId": repair.technician_id,
        "technician": serialize_technician_summary(repair.technician),
        "scheduledDate": isoformat(repair.scheduled_date),
        "scheduledTime": repair.scheduled_time.strftime("%H:%M") if repair.scheduled_time else None,
        "completionDate": isoformat(repair.completion_date),
        "notes": repair.notes,
    }


class RepairService:
    """Service layer for repair business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RepairRepository()

    def _own_client_ids(self, user: User) -> Optional[list[int]]:
        if user.role != "client":
            return None
        return ClientRepository.get_client_ids_for_user(self.db, user.id)

    def get_repairs(self, user: User, status: Optional[str] = None, priority: Optional[str] = None):
        return self.repo.get_repairs(
            self.db, get_org_filter(user), status, priority, self._own_client_ids(user)
        )

    def get_repair(self, repair_id: int, user: User) -> Repair:
        repair = self.repo.get_repair_by_id(self.db, repair_id, get_org_filter(user))
        own = self._own_client_ids(user)
        if not repair or (own is not None and repair.client_id not in own):
            raise HTTPException(status_code=404, detail="Repair not found")
        return repair

    def create_repair(self, data: RepairCreate, user: User) -> Repair:
        organization_id = require_organization_id(user)
        require_client(self.db, data.clientId, organization_id)

        values = {column: getattr(data, field) for field, column in FIELD_MAP.items()}

        if user.role == "client":
            if data.clientId not in self._own_client_ids(user):
                logger.warning(f"🚫 Client user {user.id} tried to file a repair for client {data.clientId}")
                raise HTTPException(status_code=403, detail="You can only request repairs for your own account")
            # Requests from clients always start unassigned
            values.update(status="pending", technician_id=None, scheduled_date=None, scheduled_time=None)
        else:
            require_technician(self.db, data.technicianId, organization_id)

        values["status"] = values["status"] or "pending"
        values["priority"] = values["priority"] or "medium"
        if values["technician_id"] and values["status"] == "pending":
            values["status"] = "assigned"

        repair = self.repo.create_repair(
            self.db, organization_id=organization_id, client_id=data.clientId, **values
        )
        logger.info(f"✅ Repair {repair.id} reported ({repair.issue_type}, {repair.priority})")
        return repair

    def update_repair(self, repair_id: int, data: RepairUpdate, user: User) -> Repair:
        repair = self.get_repair(repair_id, user)
        updates = {
            FIELD_MAP[field]: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if field in FIELD_MAP and not (value is None and FIELD_MAP[field] in REQUIRED_COLUMNS)
        }

        if updates.get("technician_id") is not None:
            require_technician(self.db, updates["technician_id"], repair.organization_id)
            if repair.status == "pending" and "status" not in updates:
                updates["status"] = "assigned"

        if updates.get("status") == "completed" and repair.status != "completed":
            updates["completion_date"] = datetime.utcnow()
            logger.info(f"✅ Repair {repair_id} completed")

        return self.repo.update_repair(self.db, repair, **updates)

    def delete_repair(self, repair_id: int, user: User) -> dict:
        repair = self.get_repair(repair_id, user)
        try:
            self.repo.delete_repair(self.db, repair)
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Repair is linked to work orders") from e
        logger.info(f"🗑️ Repair {repair_id} deleted")
        return {"success": True}
