"""Repair router - FastAPI endpoints for repair requests"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import require_permission
from ...database import get_db
from ...models import User
from .schemas import RepairCreate, RepairUpdate
from .service import RepairService, serialize_repair

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/repairs", tags=["Repairs"])


def get_repair_service(db: Session = Depends(get_db)) -> RepairService:
    """Dependency injection for RepairService"""
    return RepairService(db)


@router.get("")
async def get_repairs(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    current_user: User = Depends(require_permission("repairs", "view")),
    service: RepairService = Depends(get_repair_service),
):
    return [serialize_repair(r) for r in service.get_repairs(current_user, status_filter, priority)]


@router.get("/{repair_id}")
async def get_repair(
    repair_id: int,
    current_user: User = Depends(require_permission("repairs", "view")),
    service: RepairService = Depends(get_repair_service),
):
    return serialize_repair(service.get_repair(repair_id, current_user))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_repair(
    data: RepairCreate,
    current_user: User = Depends(require_permission("repairs", "create")),
    service: RepairService = Depends(get_repair_service),
):
    return serialize_repair(service.create_repair(data, current_user))


@router.patch("/{repair_id}")
async def update_repair(
    repair_id: int,
    data: RepairUpdate,
    current_user: User = Depends(require_permission("repairs", "edit")),
    service: RepairService = Depends(get_repair_service),
):
    return serialize_repair(service.update_repair(repair_id, data, current_user))


@router.delete("/{repair_id}")
async def delete_repair(
    repair_id: int,
    current_user: User = Depends(require_permission("repairs", "delete")),
    service: RepairService = Depends(get_repair_service),
):
    return service.delete_repair(repair_id, current_user)


__all__ = ["router"]
