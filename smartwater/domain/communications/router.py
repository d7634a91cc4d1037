"""Communication provider router - admin management of email/SMS credentials"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import User
from .schemas import ProviderCreate, ProviderUpdate
from .service import ProviderService, serialize_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/communication-providers", tags=["Communication Providers"])


def get_provider_service(db: Session = Depends(get_db)) -> ProviderService:
    """Dependency injection for ProviderService"""
    return ProviderService(db)


@router.get("")
async def get_providers(
    current_user: User = Depends(get_current_admin),
    service: ProviderService = Depends(get_provider_service),
):
    providers = service.get_providers(current_user)
    return {
        "success": True,
        "providers": [serialize_provider(p) for p in providers],
        "count": len(providers),
    }


@router.get("/{provider_id}")
async def get_provider(
    provider_id: int,
    current_user: User = Depends(get_current_admin),
    service: ProviderService = Depends(get_provider_service),
):
    return {"success": True, "provider": serialize_provider(service.get_provider(provider_id, current_user))}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_provider(
    data: ProviderCreate,
    current_user: User = Depends(get_current_admin),
    service: ProviderService = Depends(get_provider_service),
):
    provider = service.create_provider(data, current_user)
    return {
        "success": True,
        "provider": serialize_provider(provider),
        "message": "Communication provider created successfully",
    }


@router.patch("/{provider_id}")
async def update_provider(
    provider_id: int,
    data: ProviderUpdate,
    current_user: User = Depends(get_current_admin),
    service: ProviderService = Depends(get_provider_service),
):
    provider = service.update_provider(provider_id, data, current_user)
    return {
        "success": True,
        "provider": serialize_provider(provider),
        "message": "Communication provider updated successfully",
    }


@router.delete("/{provider_id}")
async def delete_provider(
    provider_id: int,
    current_user: User = Depends(get_current_admin),
    service: ProviderService = Depends(get_provider_service),
):
    return service.delete_provider(provider_id, current_user)


__all__ = ["router"]
