"""Vendor repository - Database operations for vendors and their communication log"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models_business import Vendor
from ...models_communication import CommunicationLink


class VendorRepository:
    """Repository for vendor database operations"""

    @staticmethod
    def get_vendors(
        db: Session, organization_id: Optional[int], active: Optional[bool] = None
    ) -> list[Vendor]:
        query = db.query(Vendor)
        if organization_id is not None:
            query = query.filter(Vendor.organization_id == organization_id)
        if active is not None:
            query = query.filter(Vendor.is_active.is_(active))
        return query.order_by(Vendor.name).all()

    @staticmethod
    def get_vendor_by_id(db: Session, vendor_id: int, organization_id: Optional[int]) -> Optional[Vendor]:
        query = db.query(Vendor).filter(Vendor.id == vendor_id)
        if organization_id is not None:
            query = query.filter(Vendor.organization_id == organization_id)
        return query.first()

    @staticmethod
    def create_vendor(db: Session, **data) -> Vendor:
        vendor = Vendor(**data)
        db.add(vendor)
        db.commit()
        db.refresh(vendor)
        return vendor

    @staticmethod
    def update_vendor(db: Session, vendor: Vendor, **updates) -> Vendor:
        for key, value in updates.items():
            if hasattr(vendor, key):
                setattr(vendor, key, value)
        db.commit()
        db.refresh(vendor)
        return vendor

    @staticmethod
    def delete_vendor(db: Session, vendor: Vendor) -> None:
        db.delete(vendor)
        db.commit()


class CommunicationLinkRepository:
    """Repository for logged communications attached to any entity"""

    @staticmethod
    def get_links(
        db: Session, organization_id: Optional[int], entity_type: str, entity_id: int
    ) -> list[CommunicationLink]:
        query = db.query(CommunicationLink).filter(
            CommunicationLink.entity_type == entity_type,
            CommunicationLink.entity_id == entity_id,
        )
        if organization_id is not None:
            query = query.filter(CommunicationLink.organization_id == organization_id)
        return query.order_by(CommunicationLink.created_at.desc(), CommunicationLink.id.desc()).all()

    @staticmethod
    def create_link(db: Session, **data) -> CommunicationLink:
        link = CommunicationLink(**data)
        db.add(link)
        db.commit()
        db.refresh(link)
        return link
