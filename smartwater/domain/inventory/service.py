"""Inventory service - Business logic for stock items"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import User
from ...models_business import InventoryItem, Vendor
from ...shared.serializers import isoformat
from .repository import InventoryRepository
from .schemas import InventoryItemCreate, InventoryItemUpdate

logger = logging.getLogger(__name__)

FIELD_MAP = {
    "name": "name",
    "sku": "sku",
    "category": "category",
    "unit": "unit",
    "quantity": "quantity",
    "minStockLevel": "min_stock_level",
    "unitCost": "unit_cost",
    "vendorId": "vendor_id",
    "isActive": "is_active",
}


def serialize_inventory_item(item: InventoryItem) -> dict:
    return {
        "id": item.id,
        "organizationId": item.organization_id,
        "name": item.name,
        "sku": item.sku,
        "category": item.category,
        "unit": item.unit,
        "quantity": item.quantity,
        "minStockLevel": item.min_stock_level,
        "unitCost": item.unit_cost,
        "vendorId": item.vendor_id,
        "isActive": item.is_active,
        "isLowStock": (item.quantity or 0) <= (item.min_stock_level or 0),
        "createdAt": isoformat(item.created_at),
    }


class InventoryService:
    """Service layer for inventory business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InventoryRepository()

    def _check_vendor(self, vendor_id: Optional[int], organization_id: int) -> None:
        if vendor_id is None:
            return
        vendor = (
            self.db.query(Vendor)
            .filter(Vendor.id == vendor_id, Vendor.organization_id == organization_id)
            .first()
        )
        if not vendor:
            raise HTTPException(status_code=400, detail="Vendor not found")

    def get_items(self, user: User, category: Optional[str] = None, active_only: bool = False):
        return self.repo.get_items(self.db, get_org_filter(user), category, active_only)

    def get_low_stock(self, user: User):
        return self.repo.get_low_stock(self.db, get_org_filter(user))

    def get_item(self, item_id: int, user: User) -> InventoryItem:
        item = self.repo.get_item_by_id(self.db, item_id, get_org_filter(user))
        if not item:
            raise HTTPException(status_code=404, detail="Inventory item not found")
        return item

    def create_item(self, data: InventoryItemCreate, user: User) -> InventoryItem:
        organization_id = require_organization_id(user)
        self._check_vendor(data.vendorId, organization_id)

        values = {column: getattr(data, field) for field, column in FIELD_MAP.items()}
        values["unit"] = values["unit"] or "each"
        if values["is_active"] is None:
            values["is_active"] = True

        item = self.repo.create_item(self.db, organization_id=organization_id, **values)
        logger.info(f"✅ Inventory item {item.id} ({item.name}) created")
        return item

    def update_item(self, item_id: int, data: InventoryItemUpdate, user: User) -> InventoryItem:
        item = self.get_item(item_id, user)
        updates = {
            FIELD_MAP[field]: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if field in FIELD_MAP
        }
        if updates.get("vendor_id") is not None:
            self._check_vendor(updates["vendor_id"], item.organization_id)
        return self.repo.update_item(self.db, item, **updates)

    def delete_item(self, item_id: int, user: User) -> dict:
        item = self.get_item(item_id, user)
        try:
            self.repo.delete_item(self.db, item)
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=409, detail="Inventory item is referenced by other records"
            ) from e
        logger.info(f"🗑️ Inventory item {item_id} deleted")
        return {"success": True}
