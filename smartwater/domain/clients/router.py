"""Client router - FastAPI endpoints for client operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import require_permission
from ...database import get_db
from ...models import User
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService, serialize_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    search: Optional[str] = Query(None),
    contractType: Optional[str] = Query(None),
    current_user: User = Depends(require_permission("clients", "view")),
    service: ClientService = Depends(get_client_service),
):
    """Get all clients for the current organization"""
    return [serialize_client(c) for c in service.get_clients(current_user, search, contractType)]


@router.get("/export")
async def export_clients_csv(
    search: Optional[str] = Query(None),
    contractType: Optional[str] = Query(None),
    current_user: User = Depends(require_permission("clients", "view")),
    service: ClientService = Depends(get_client_service),
):
    """Export clients as CSV with optional filters"""
    return service.export_clients_csv(current_user, search, contractType)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    current_user: User = Depends(require_permission("clients", "view")),
    service: ClientService = Depends(get_client_service),
):
    return serialize_client(service.get_client(client_id, current_user))


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    current_user: User = Depends(require_permission("clients", "create")),
    service: ClientService = Depends(get_client_service),
):
    return serialize_client(service.create_client(data, current_user))


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    current_user: User = Depends(require_permission("clients", "edit")),
    service: ClientService = Depends(get_client_service),
):
    return serialize_client(service.update_client(client_id, data, current_user))


@router.delete("/{client_id}")
async def delete_client(
    client_id: int,
    current_user: User = Depends(require_permission("clients", "delete")),
    service: ClientService = Depends(get_client_service),
):
    return service.delete_client(client_id, current_user)


__all__ = [
    "router",
    "get_clients",
    "get_client",
    "create_client",
    "update_client",
    "delete_client",
    "export_clients_csv",
]
