"""Vendor service - Business logic for suppliers and their communication log"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import User
from ...models_business import Vendor
from ...models_communication import CommunicationLink
from ...shared.serializers import isoformat
from .repository import CommunicationLinkRepository, VendorRepository
from .schemas import CommunicationLinkCreate, VendorCreate, VendorUpdate

logger = logging.getLogger(__name__)

FIELD_MAP = {
    "name": "name",
    "category": "category",
    "contactName": "contact_name",
    "email": "email",
    "phone": "phone",
    "address": "address",
    "website": "website",
    "notes": "notes",
    "isActive": "is_active",
}


def serialize_vendor(vendor: Vendor) -> dict:
    return {
        "id": vendor.id,
        "organizationId": vendor.organization_id,
        "name": vendor.name,
        "category": vendor.category,
        "contactName": vendor.contact_name,
        "email": vendor.email,
        "phone": vendor.phone,
        "address": vendor.address,
        "website": vendor.website,
        "notes": vendor.notes,
        "isActive": vendor.is_active,
        "createdAt": isoformat(vendor.created_at),
    }


def serialize_communication_link(link: CommunicationLink) -> dict:
    return {
        "id": link.id,
        "entityType": link.entity_type,
        "entityId": link.entity_id,
        "channel": link.channel,
        "subject": link.subject,
        "summary": link.summary,
        "externalId": link.external_id,
        "occurredAt": isoformat(link.occurred_at),
        "createdBy": link.created_by,
        "createdAt": isoformat(link.created_at),
    }


class VendorService:
    """Service layer for vendor business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = VendorRepository()

    def get_vendors(self, user: User, active: Optional[bool] = None) -> list[Vendor]:
        return self.repo.get_vendors(self.db, get_org_filter(user), active)

    def get_vendor(self, vendor_id: int, user: User) -> Vendor:
        vendor = self.repo.get_vendor_by_id(self.db, vendor_id, get_org_filter(user))
        if not vendor:
            raise HTTPException(status_code=404, detail="Vendor not found")
        return vendor

    def create_vendor(self, data: VendorCreate, user: User) -> Vendor:
        organization_id = require_organization_id(user)
        values = {column: getattr(data, field) for field, column in FIELD_MAP.items()}
        if values["is_active"] is None:
            values["is_active"] = True
        vendor = self.repo.create_vendor(self.db, organization_id=organization_id, **values)
        logger.info(f"✅ Vendor {vendor.id} '{vendor.name}' created")
        return vendor

    def update_vendor(self, vendor_id: int, data: VendorUpdate, user: User) -> Vendor:
        vendor = self.get_vendor(vendor_id, user)
        updates = {
            FIELD_MAP[field]: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if field in FIELD_MAP and not (value is None and field in ("name", "isActive"))
        }
        return self.repo.update_vendor(self.db, vendor, **updates)

    def delete_vendor(self, vendor_id: int, user: User) -> dict:
        vendor = self.get_vendor(vendor_id, user)
        try:
            self.repo.delete_vendor(self.db, vendor)
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=409,
                detail="Vendor is referenced by inventory or chemical prices; deactivate it instead",
            ) from e
        logger.info(f"🗑️ Vendor {vendor_id} deleted")
        return {"success": True}

    def get_communications(self, vendor_id: int, user: User) -> list[CommunicationLink]:
        vendor = self.get_vendor(vendor_id, user)
        return CommunicationLinkRepository.get_links(self.db, vendor.organization_id, "vendor", vendor.id)

    def log_communication(self, vendor_id: int, data: CommunicationLinkCreate, user: User) -> CommunicationLink:
        vendor = self.get_vendor(vendor_id, user)
        link = CommunicationLinkRepository.create_link(
            self.db,
            organization_id=vendor.organization_id,
            entity_type="vendor",
            entity_id=vendor.id,
            channel=data.channel,
            subject=data.subject,
            summary=data.summary,
            external_id=data.externalId,
            occurred_at=data.occurredAt or datetime.utcnow(),
            created_by=user.id,
        )
        logger.info(f"📨 Logged {data.channel} with vendor {vendor.id}")
        return link
