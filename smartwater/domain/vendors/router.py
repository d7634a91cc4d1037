"""Vendor router - FastAPI endpoints for suppliers"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import require_permission
from ...database import get_db
from ...models import User
from .schemas import CommunicationLinkCreate, VendorCreate, VendorUpdate
from .service import VendorService, serialize_communication_link, serialize_vendor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vendors", tags=["Vendors"])


def get_vendor_service(db: Session = Depends(get_db)) -> VendorService:
    """Dependency injection for VendorService"""
    return VendorService(db)


@router.get("")
async def get_vendors(
    active: Optional[bool] = Query(None),
    current_user: User = Depends(require_permission("inventory", "view")),
    service: VendorService = Depends(get_vendor_service),
):
    return [serialize_vendor(v) for v in service.get_vendors(current_user, active)]


@router.get("/{vendor_id}")
async def get_vendor(
    vendor_id: int,
    current_user: User = Depends(require_permission("inventory", "view")),
    service: VendorService = Depends(get_vendor_service),
):
    return serialize_vendor(service.get_vendor(vendor_id, current_user))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_vendor(
    data: VendorCreate,
    current_user: User = Depends(require_permission("inventory", "create")),
    service: VendorService = Depends(get_vendor_service),
):
    return serialize_vendor(service.create_vendor(data, current_user))


@router.patch("/{vendor_id}")
async def update_vendor(
    vendor_id: int,
    data: VendorUpdate,
    current_user: User = Depends(require_permission("inventory", "edit")),
    service: VendorService = Depends(get_vendor_service),
):
    return serialize_vendor(service.update_vendor(vendor_id, data, current_user))


@router.delete("/{vendor_id}")
async def delete_vendor(
    vendor_id: int,
    current_user: User = Depends(require_permission("inventory", "delete")),
    service: VendorService = Depends(get_vendor_service),
):
    return service.delete_vendor(vendor_id, current_user)


# ============================================================================
# COMMUNICATION LOG
# ============================================================================


@router.get("/{vendor_id}/communications")
async def get_vendor_communications(
    vendor_id: int,
    current_user: User = Depends(require_permission("communications", "view")),
    service: VendorService = Depends(get_vendor_service),
):
    return [serialize_communication_link(c) for c in service.get_communications(vendor_id, current_user)]


@router.post("/{vendor_id}/communications", status_code=status.HTTP_201_CREATED)
async def log_vendor_communication(
    vendor_id: int,
    data: CommunicationLinkCreate,
    current_user: User = Depends(require_permission("communications", "create")),
    service: VendorService = Depends(get_vendor_service),
):
    return serialize_communication_link(service.log_communication(vendor_id, data, current_user))


__all__ = ["router"]
