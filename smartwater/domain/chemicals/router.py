"""Chemical tracking router - price list and usage endpoints"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import require_permission
from ...database import get_db
from ...models import User
from .schemas import ChemicalPriceCreate, ChemicalPriceUpdate, ChemicalUsageCreate
from .service import ChemicalService, serialize_chemical_price, serialize_chemical_usage

logger = logging.getLogger(__name__)

prices_router = APIRouter(prefix="/api/chemical-prices", tags=["Chemicals"])
usage_router = APIRouter(prefix="/api/chemical-usage", tags=["Chemicals"])


def get_chemical_service(db: Session = Depends(get_db)) -> ChemicalService:
    """Dependency injection for ChemicalService"""
    return ChemicalService(db)


# ============================================================================
# PRICE LIST
# ============================================================================


@prices_router.get("")
async def get_chemical_prices(
    current_user: User = Depends(require_permission("maintenance", "view")),
    service: ChemicalService = Depends(get_chemical_service),
):
    return [serialize_chemical_price(p) for p in service.get_prices(current_user)]


@prices_router.post("", status_code=status.HTTP_201_CREATED)
async def create_chemical_price(
    data: ChemicalPriceCreate,
    current_user: User = Depends(require_permission("maintenance", "create")),
    service: ChemicalService = Depends(get_chemical_service),
):
    return serialize_chemical_price(service.create_price(data, current_user))


@prices_router.patch("/{price_id}")
async def update_chemical_price(
    price_id: int,
    data: ChemicalPriceUpdate,
    current_user: User = Depends(require_permission("maintenance", "edit")),
    service: ChemicalService = Depends(get_chemical_service),
):
    return serialize_chemical_price(service.update_price(price_id, data, current_user))


@prices_router.delete("/{price_id}")
async def delete_chemical_price(
    price_id: int,
    current_user: User = Depends(require_permission("maintenance", "delete")),
    service: ChemicalService = Depends(get_chemical_service),
):
    return service.delete_price(price_id, current_user)


# ============================================================================
# USAGE LOG
# ============================================================================


@usage_router.post("", status_code=status.HTTP_201_CREATED)
async def record_chemical_usage(
    data: ChemicalUsageCreate,
    current_user: User = Depends(require_permission("maintenance", "edit")),
    service: ChemicalService = Depends(get_chemical_service),
):
    return serialize_chemical_usage(service.record_usage(data, current_user))


@usage_router.get("/maintenance/{maintenance_id}")
async def get_maintenance_chemical_usage(
    maintenance_id: int,
    current_user: User = Depends(require_permission("maintenance", "view")),
    service: ChemicalService = Depends(get_chemical_service),
):
    return [serialize_chemical_usage(u) for u in service.get_maintenance_usage(maintenance_id, current_user)]


@usage_router.get("/work-order/{work_order_id}")
async def get_work_order_chemical_usage(
    work_order_id: int,
    current_user: User = Depends(require_permission("maintenance", "view")),
    service: ChemicalService = Depends(get_chemical_service),
):
    return [serialize_chemical_usage(u) for u in service.get_work_order_usage(work_order_id, current_user)]


__all__ = ["prices_router", "usage_router"]
