"""User and organization service - Business logic for tenant membership"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import get_org_filter
from ...models import Organization, User
from ...security_utils import hash_password
from ...shared.serializers import isoformat
from .repository import OrganizationRepository, UserRepository
from .schemas import OrganizationUpdate, UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def serialize_user(user: User) -> dict:
    """Public representation of a user (never includes the password)"""
    return {
        "id": user.id,
        "username": user.username,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "phone": user.phone,
        "address": user.address,
        "organizationId": user.organization_id,
        "active": user.active,
        "photoUrl": user.photo_url,
        "authProvider": user.auth_provider,
        "googleConnected": bool(user.google_id),
        "createdAt": isoformat(user.created_at),
    }


def serialize_organization(organization: Organization) -> dict:
    return {
        "id": organization.id,
        "name": organization.name,
        "slug": organization.slug,
        "address": organization.address,
        "phone": organization.phone,
        "email": organization.email,
        "website": organization.website,
        "logoUrl": organization.logo_url,
        "active": organization.active,
        "createdAt": isoformat(organization.created_at),
    }


class UserService:
    """Service layer for user management within an organization"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def get_users(self, current_user: User, role: Optional[str] = None) -> list[User]:
        return self.repo.get_users(self.db, get_org_filter(current_user), role)

    def get_user(self, user_id: int, current_user: User) -> User:
        user = self.repo.get_by_id(self.db, user_id)
        org_filter = get_org_filter(current_user)
        if not user or (org_filter is not None and user.organization_id != org_filter):
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def create_user(self, data: UserCreate, current_user: User) -> User:
        logger.info(f"📥 Creating user '{data.username}' by admin {current_user.id}")

        if data.role == "system_admin" and current_user.role != "system_admin":
            raise HTTPException(status_code=403, detail="Only system admins can create system admins")

        if current_user.role == "system_admin" and data.organizationId:
            if not OrganizationRepository.get_by_id(self.db, data.organizationId):
                raise HTTPException(status_code=404, detail="Organization not found")
            organization_id = data.organizationId
        else:
            organization_id = current_user.organization_id

        if self.repo.get_by_username(self.db, data.username):
            raise HTTPException(status_code=409, detail="Username already exists")
        if self.repo.get_by_email(self.db, data.email):
            raise HTTPException(status_code=409, detail="A user with this email already exists")

        user = self.repo.create_user(
            self.db,
            username=data.username,
            password=hash_password(data.password),
            name=data.name,
            email=data.email,
            role=data.role,
            phone=data.phone,
            address=data.address,
            organization_id=organization_id,
            active=True,
            auth_provider="local",
        )
        logger.info(f"✅ User {user.id} created in organization {organization_id}")
        return user

    def update_user(self, user_id: int, data: UserUpdate, current_user: User) -> User:
        user = self.get_user(user_id, current_user)

        if data.role == "system_admin" and current_user.role != "system_admin":
            raise HTTPException(status_code=403, detail="Only system admins can grant system admin")

        updates = data.model_dump(exclude_unset=True, exclude={"password"})
        updates = {key: value for key, value in updates.items() if value is not None}

        if data.email and data.email != user.email:
            existing = self.repo.get_by_email(self.db, data.email)
            if existing and existing.id != user.id:
                raise HTTPException(status_code=409, detail="A user with this email already exists")

        if data.password:
            updates["password"] = hash_password(data.password)

        if data.active is False and user.id == current_user.id:
            raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

        return self.repo.update_user(self.db, user, **updates)

    def deactivate_user(self, user_id: int, current_user: User) -> dict:
        """Soft delete: the account is kept for audit history but can no longer sign in"""
        user = self.get_user(user_id, current_user)
        if user.id == current_user.id:
            raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

        self.repo.update_user(self.db, user, active=False)
        logger.info(f"🗑️ User {user.id} deactivated by {current_user.id}")
        return {"success": True, "message": "User deactivated"}


class OrganizationService:
    """Service layer for organization access"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrganizationRepository()

    def get_organizations(self, current_user: User) -> list[Organization]:
        if current_user.role == "system_admin":
            return self.repo.get_organizations(self.db)

        organization = self.repo.get_by_id(self.db, current_user.organization_id)
        return [organization] if organization else []

    def get_organization(self, organization_id: int, current_user: User) -> Organization:
        if current_user.role != "system_admin" and organization_id != current_user.organization_id:
            raise HTTPException(status_code=403, detail="Access denied")

        organization = self.repo.get_by_id(self.db, organization_id)
        if not organization:
            raise HTTPException(status_code=404, detail="Organization not found")
        return organization

    def update_organization(
        self, organization_id: int, data: OrganizationUpdate, current_user: User
    ) -> Organization:
        organization = self.get_organization(organization_id, current_user)
        return self.repo.update_organization(
            self.db,
            organization,
            name=data.name,
            address=data.address,
            phone=data.phone,
            email=data.email,
            website=data.website,
            logo_url=data.logoUrl,
        )
