"""Inventory router - FastAPI endpoints for stock items"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import require_permission
from ...database import get_db
from ...models import User
from .schemas import InventoryItemCreate, InventoryItemUpdate
from .service import InventoryService, serialize_inventory_item

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inventory", tags=["Inventory"])


def get_inventory_service(db: Session = Depends(get_db)) -> InventoryService:
    """Dependency injection for InventoryService"""
    return InventoryService(db)


@router.get("")
async def get_inventory(
    category: Optional[str] = Query(None),
    activeOnly: bool = Query(False),
    current_user: User = Depends(require_permission("inventory", "view")),
    service: InventoryService = Depends(get_inventory_service),
):
    return [serialize_inventory_item(i) for i in service.get_items(current_user, category, activeOnly)]


@router.get("/low-stock")
async def get_low_stock(
    current_user: User = Depends(require_permission("inventory", "view")),
    service: InventoryService = Depends(get_inventory_service),
):
    """Active items at or below their minimum stock level"""
    return [serialize_inventory_item(i) for i in service.get_low_stock(current_user)]


@router.get("/{item_id}")
async def get_inventory_item(
    item_id: int,
    current_user: User = Depends(require_permission("inventory", "view")),
    service: InventoryService = Depends(get_inventory_service),
):
    return serialize_inventory_item(service.get_item(item_id, current_user))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    data: InventoryItemCreate,
    current_user: User = Depends(require_permission("inventory", "create")),
    service: InventoryService = Depends(get_inventory_service),
):
    return serialize_inventory_item(service.create_item(data, current_user))


@router.patch("/{item_id}")
async def update_inventory_item(
    item_id: int,
    data: InventoryItemUpdate,
    current_user: User = Depends(require_permission("inventory", "edit")),
    service: InventoryService = Depends(get_inventory_service),
):
    return serialize_inventory_item(service.update_item(item_id, data, current_user))


@router.delete("/{item_id}")
async def delete_inventory_item(
    item_id: int,
    current_user: User = Depends(require_permission("inventory", "delete")),
    service: InventoryService = Depends(get_inventory_service),
):
    return service.delete_item(item_id, current_user)


__all__ = ["router"]
