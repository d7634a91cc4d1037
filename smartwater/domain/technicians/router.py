"""Technician router - FastAPI endpoints for field staff"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import require_permission
from ...database import get_db
from ...models import User
from .schemas import TechnicianCreate, TechnicianUpdate
from .service import TechnicianService, serialize_technician

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Technicians"])


def get_technician_service(db: Session = Depends(get_db)) -> TechnicianService:
    """Dependency injection for TechnicianService"""
    return TechnicianService(db)


@router.get("/technicians")
async def get_technicians(
    activeOnly: bool = Query(False),
    current_user: User = Depends(require_permission("technicians", "view")),
    service: TechnicianService = Depends(get_technician_service),
):
    return [serialize_technician(t) for t in service.get_technicians(current_user, activeOnly)]


@router.get("/technicians-with-users")
async def get_technicians_with_users(
    current_user: User = Depends(require_permission("technicians", "view")),
    service: TechnicianService = Depends(get_technician_service),
):
    """Technicians joined with their user profile (name, email, phone)"""
    return [
        serialize_technician(t, include_user=True) for t in service.get_technicians(current_user)
    ]


@router.get("/technicians/{technician_id}")
async def get_technician(
    technician_id: int,
    current_user: User = Depends(require_permission("technicians", "view")),
    service: TechnicianService = Depends(get_technician_service),
):
    return serialize_technician(service.get_technician(technician_id, current_user), include_user=True)


@router.post("/technicians", status_code=status.HTTP_201_CREATED)
async def create_technician(
    data: TechnicianCreate,
    current_user: User = Depends(require_permission("technicians", "create")),
    service: TechnicianService = Depends(get_technician_service),
):
    return serialize_technician(service.create_technician(data, current_user), include_user=True)


@router.patch("/technicians/{technician_id}")
async def update_technician(
    technician_id: int,
    data: TechnicianUpdate,
    current_user: User = Depends(require_permission("technicians", "edit")),
    service: TechnicianService = Depends(get_technician_service),
):
    return serialize_technician(service.update_technician(technician_id, data, current_user))


@router.delete("/technicians/{technician_id}")
async def delete_technician(
    technician_id: int,
    current_user: User = Depends(require_permission("technicians", "delete")),
    service: TechnicianService = Depends(get_technician_service),
):
    return service.delete_technician(technician_id, current_user)


__all__ = [
    "router",
    "get_technicians",
    "get_technicians_with_users",
    "get_technician",
    "create_technician",
    "update_technician",
    "delete_technician",
]
