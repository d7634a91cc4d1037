"""Technician service - Business logic for field staff"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import Technician, User
from ...shared.serializers import isoformat
from ..users.repository import UserRepository
from .repository import TechnicianRepository
from .schemas import TechnicianCreate, TechnicianUpdate

logger = logging.getLogger(__name__)


def serialize_technician_summary(technician: Optional[Technician]) -> Optional[dict]:
    """Compact technician reference embedded in other resources"""
    if not technician:
        return None
    user = technician.user
    return {
        "id": technician.id,
        "user": {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
        }
        if user
        else None,
    }


def serialize_technician(technician: Technician, include_user: bool = False) -> dict:
    data = {
        "id": technician.id,
        "userId": technician.user_id,
        "organizationId": technician.organization_id,
        "specialization": technician.specialization,
        "certifications": technician.certifications,
        "active": technician.active,
        "createdAt": isoformat(technician.created_at),
    }
    if include_user:
        user = technician.user
        data["user"] = (
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "phone": user.phone,
                "address": user.address,
                "role": user.role,
            }
            if user
            else None
        )
    return data


class TechnicianService:
    """Service layer for technician business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TechnicianRepository()

    def get_technicians(self, user: User, active_only: bool = False) -> list[Technician]:
        return self.repo.get_technicians(self.db, get_org_filter(user), active_only)

    def get_technician(self, technician_id: int, user: User) -> Technician:
        technician = self.repo.get_technician_by_id(self.db, technician_id, get_org_filter(user))
        if not technician:
            raise HTTPException(status_code=404, detail="Technician not found")
        return technician

    def create_technician(self, data: TechnicianCreate, user: User) -> Technician:
        organization_id = require_organization_id(user)

        tech_user = UserRepository.get_by_id(self.db, data.userId)
        if not tech_user or tech_user.organization_id != organization_id:
            raise HTTPException(status_code=400, detail="User must belong to your organization")

        if self.repo.get_by_user_id(self.db, data.userId):
            raise HTTPException(status_code=409, detail="User is already a technician")

        technician = self.repo.create_technician(
            self.db,
            user_id=data.userId,
            organization_id=organization_id,
            specialization=data.specialization,
            certifications=data.certifications,
            active=True,
        )
        logger.info(f"✅ Technician {technician.id} created for user {data.userId}")
        return technician

    def update_technician(self, technician_id: int, data: TechnicianUpdate, user: User) -> Technician:
        technician = self.get_technician(technician_id, user)
        return self.repo.update_technician(
            self.db,
            technician,
            specialization=data.specialization,
            certifications=data.certifications,
            active=data.active,
        )

    def delete_technician(self, technician_id: int, user: User) -> dict:
        technician = self.get_technician(technician_id, user)
        try:
            self.repo.delete_technician(self.db, technician)
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=409,
                detail="Technician has assigned work; deactivate instead of deleting",
            ) from e
        logger.info(f"🗑️ Technician {technician_id} deleted")
        return {"success": True}


def require_technician(db: Session, technician_id: Optional[int], organization_id: int) -> Optional[Technician]:
    """Load a technician of the organization or fail with 400"""
    if technician_id is None:
        return None
    technician = TechnicianRepository.get_technician_by_id(db, technician_id, organization_id)
    if not technician:
        raise HTTPException(status_code=400, detail="Technician not found in your organization")
    return technician
