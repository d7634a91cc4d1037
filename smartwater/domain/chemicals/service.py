"""Chemical tracking service - Price list and per-visit chemical usage"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import Maintenance, User
from ...models_business import ChemicalPrice, ChemicalUsage, Vendor
from ...models_work_order import WorkOrder
from ...shared.serializers import isoformat
from .repository import ChemicalPriceRepository, ChemicalUsageRepository
from .schemas import ChemicalPriceCreate, ChemicalPriceUpdate, ChemicalUsageCreate

logger = logging.getLogger(__name__)

PRICE_FIELDS = {
    "chemicalType": "chemical_type",
    "name": "name",
    "unit": "unit",
    "unitCost": "unit_cost",
    "vendorId": "vendor_id",
    "isActive": "is_active",
}

# Columns a PATCH may not null out
REQUIRED_PRICE_COLUMNS = {"chemical_type", "name", "unit", "unit_cost", "is_active"}


def serialize_chemical_price(price: ChemicalPrice) -> dict:
    return {
        "id": price.id,
        "organizationId": price.organization_id,
        "chemicalType": price.chemical_type,
        "name": price.name,
        "unit": price.unit,
        "unitCost": price.unit_cost,
        "vendorId": price.vendor_id,
        "vendorName": price.vendor.name if price.vendor else None,
        "isActive": price.is_active,
        "createdAt": isoformat(price.created_at),
    }


def serialize_chemical_usage(usage: ChemicalUsage) -> dict:
    return {
        "id": usage.id,
        "maintenanceId": usage.maintenance_id,
        "workOrderId": usage.work_order_id,
        "chemicalType": usage.chemical_type,
        "amount": usage.amount,
        "unit": usage.unit,
        "unitCost": usage.unit_cost,
        "totalCost": usage.total_cost,
        "reason": usage.reason,
        "notes": usage.notes,
        "recordedBy": usage.recorded_by,
        "createdAt": isoformat(usage.created_at),
    }


def usage_total_cost(amount: float, unit_cost: Optional[int]) -> Optional[int]:
    """Cost in cents of an applied amount, rounded to the nearest cent"""
    if unit_cost is None:
        return None
    return int(round(amount * unit_cost))


class ChemicalService:
    """Service layer for chemical prices and usage"""

    def __init__(self, db: Session):
        self.db = db
        self.prices = ChemicalPriceRepository()
        self.usage = ChemicalUsageRepository()

    # ------------------------------------------------------------------ prices

    def _check_vendor(self, vendor_id: Optional[int], organization_id: int) -> None:
        if vendor_id is None:
            return
        vendor = (
            self.db.query(Vendor)
            .filter(Vendor.id == vendor_id, Vendor.organization_id == organization_id)
            .first()
        )
        if not vendor:
            raise HTTPException(status_code=400, detail="Vendor not found in your organization")

    def get_prices(self, user: User) -> list[ChemicalPrice]:
        return self.prices.get_prices(self.db, get_org_filter(user))

    def get_price(self, price_id: int, user: User) -> ChemicalPrice:
        price = self.prices.get_price_by_id(self.db, price_id, get_org_filter(user))
        if not price:
            raise HTTPException(status_code=404, detail="Chemical price not found")
        return price

    def create_price(self, data: ChemicalPriceCreate, user: User) -> ChemicalPrice:
        organization_id = require_organization_id(user)
        self._check_vendor(data.vendorId, organization_id)
        values = {column: getattr(data, field) for field, column in PRICE_FIELDS.items()}
        if values["is_active"] is None:
            values["is_active"] = True
        price = self.prices.create_price(self.db, organization_id=organization_id, **values)
        logger.info(f"✅ Chemical price {price.id} ({price.chemical_type}) created")
        return price

    def update_price(self, price_id: int, data: ChemicalPriceUpdate, user: User) -> ChemicalPrice:
        price = self.get_price(price_id, user)
        updates = {}
        for field, value in data.model_dump(exclude_unset=True).items():
            column = PRICE_FIELDS.get(field)
            if column is None or (value is None and column in REQUIRED_PRICE_COLUMNS):
                continue
            updates[column] = value
        if updates.get("vendor_id") is not None:
            self._check_vendor(updates["vendor_id"], price.organization_id)
        return self.prices.update_price(self.db, price, **updates)

    def delete_price(self, price_id: int, user: User) -> dict:
        price = self.get_price(price_id, user)
        self.prices.delete_price(self.db, price)
        logger.info(f"🗑️ Chemical price {price_id} deleted")
        return {"success": True}

    # ------------------------------------------------------------------- usage

    def _require_maintenance(self, maintenance_id: int, organization_id: int) -> Maintenance:
        maintenance = (
            self.db.query(Maintenance)
            .filter(Maintenance.id == maintenance_id, Maintenance.organization_id == organization_id)
            .first()
        )
        if not maintenance:
            raise HTTPException(status_code=404, detail="Maintenance not found")
        return maintenance

    def _require_work_order(self, work_order_id: int, organization_id: int) -> WorkOrder:
        work_order = (
            self.db.query(WorkOrder)
            .filter(WorkOrder.id == work_order_id, WorkOrder.organization_id == organization_id)
            .first()
        )
        if not work_order:
            raise HTTPException(status_code=404, detail="Work order not found")
        return work_order

    def record_usage(self, data: ChemicalUsageCreate, user: User) -> ChemicalUsage:
        organization_id = require_organization_id(user)
        if data.maintenanceId is None and data.workOrderId is None:
            raise HTTPException(status_code=400, detail="Either maintenanceId or workOrderId is required")
        if data.maintenanceId is not None:
            self._require_maintenance(data.maintenanceId, organization_id)
        if data.workOrderId is not None:
            self._require_work_order(data.workOrderId, organization_id)

        unit = data.unit
        unit_cost = data.unitCost
        if unit_cost is None or not unit:
            price = self.prices.get_active_price(self.db, organization_id, data.chemicalType)
            if price:
                if unit_cost is None:
                    unit_cost = price.unit_cost
                unit = unit or price.unit
        if not unit:
            raise HTTPException(status_code=400, detail="Unit is required")

        usage = self.usage.create_usage(
            self.db,
            organization_id=organization_id,
            maintenance_id=data.maintenanceId,
            work_order_id=data.workOrderId,
            chemical_type=data.chemicalType,
            amount=data.amount,
            unit=unit,
            unit_cost=unit_cost,
            total_cost=usage_total_cost(data.amount, unit_cost),
            reason=data.reason,
            notes=data.notes,
            recorded_by=user.id,
        )
        logger.info(f"🧪 Recorded {usage.amount} {usage.unit} of {usage.chemical_type} (usage {usage.id})")
        return usage

    def get_maintenance_usage(self, maintenance_id: int, user: User) -> list[ChemicalUsage]:
        organization_id = require_organization_id(user)
        self._require_maintenance(maintenance_id, organization_id)
        return self.usage.get_usage(self.db, organization_id, maintenance_id=maintenance_id)

    def get_work_order_usage(self, work_order_id: int, user: User) -> list[ChemicalUsage]:
        organization_id = require_organization_id(user)
        self._require_work_order(work_order_id, organization_id)
        return self.usage.get_usage(self.db, organization_id, work_order_id=work_order_id)
