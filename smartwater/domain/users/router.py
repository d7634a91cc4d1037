"""User and organization routers - FastAPI endpoints for tenant membership"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_admin, get_current_user, require_permission
from ...database import get_db
from ...models import User
from .schemas import OrganizationResponse, OrganizationUpdate, UserCreate, UserResponse, UserUpdate
from .service import OrganizationService, UserService, serialize_organization, serialize_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])
organizations_router = APIRouter(prefix="/api/organizations", tags=["Organizations"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


def get_organization_service(db: Session = Depends(get_db)) -> OrganizationService:
    """Dependency injection for OrganizationService"""
    return OrganizationService(db)


# ============================================================================
# USERS
# ============================================================================


@router.get("", response_model=list[UserResponse])
async def get_users(
    role: Optional[str] = Query(None),
    current_user: User = Depends(require_permission("users", "view")),
    service: UserService = Depends(get_user_service),
):
    """List users in the current organization"""
    return [serialize_user(u) for u in service.get_users(current_user, role)]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: User = Depends(require_permission("users", "view")),
    service: UserService = Depends(get_user_service),
):
    return serialize_user(service.get_user(user_id, current_user))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    current_user: User = Depends(get_current_admin),
    service: UserService = Depends(get_user_service),
):
    """Create a user in the admin's organization"""
    return serialize_user(service.create_user(data, current_user))


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: User = Depends(get_current_admin),
    service: UserService = Depends(get_user_service),
):
    return serialize_user(service.update_user(user_id, data, current_user))


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    current_user: User = Depends(get_current_admin),
    service: UserService = Depends(get_user_service),
):
    """Deactivate a user"""
    return service.deactivate_user(user_id, current_user)


# ============================================================================
# ORGANIZATIONS
# ============================================================================


@organizations_router.get("", response_model=list[OrganizationResponse])
async def get_organizations(
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    """System admins see every organization, everyone else only their own"""
    return [serialize_organization(o) for o in service.get_organizations(current_user)]


@organizations_router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    return serialize_organization(service.get_organization(organization_id, current_user))


@organizations_router.patch("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: int,
    data: OrganizationUpdate,
    current_user: User = Depends(require_permission("organization", "edit")),
    service: OrganizationService = Depends(get_organization_service),
):
    return serialize_organization(
        service.update_organization(organization_id, data, current_user)
    )


__all__ = [
    "router",
    "organizations_router",
    "get_users",
    "get_user",
    "create_user",
    "update_user",
    "delete_user",
    "get_organizations",
    "get_organization",
    "update_organization",
]
