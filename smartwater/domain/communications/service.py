"""
Communication provider service

Stores email/SMS provider credentials per organization. Client secret, API key
and auth token are Fernet-encrypted at rest and never returned in responses.
"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import User
from ...models_communication import CommunicationProvider
from ...security_utils import encrypt_secret
from ...shared.serializers import isoformat, mask_prefix, mask_secret
from .repository import ProviderRepository
from .schemas import PROVIDER_TYPES, ProviderCreate, ProviderUpdate

logger = logging.getLogger(__name__)

PLAIN_FIELDS = {
    "name": "name",
    "clientId": "client_id",
    "accountSid": "account_sid",
    "email": "email",
    "phoneNumber": "phone_number",
    "settings": "settings",
}

SECRET_FIELDS = {
    "clientSecret": "client_secret",
    "apiKey": "api_key",
    "authToken": "auth_token",
}


def serialize_provider(provider: CommunicationProvider) -> dict:
    return {
        "id": provider.id,
        "organizationId": provider.organization_id,
        "type": provider.type,
        "name": provider.name,
        "isDefault": provider.is_default,
        "isActive": provider.is_active,
        "clientId": mask_prefix(provider.client_id),
        "clientSecret": mask_secret(provider.client_secret),
        "apiKey": mask_secret(provider.api_key),
        "accountSid": mask_prefix(provider.account_sid),
        "authToken": mask_secret(provider.auth_token),
        "email": provider.email,
        "phoneNumber": provider.phone_number,
        "settings": mask_secret(provider.settings),
        "createdAt": isoformat(provider.created_at),
        "updatedAt": isoformat(provider.updated_at),
    }


class ProviderService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProviderRepository()

    def get_providers(self, user: User) -> list[CommunicationProvider]:
        return self.repo.get_providers(self.db, get_org_filter(user))

    def get_provider(self, provider_id: int, user: User) -> CommunicationProvider:
        provider = self.repo.get_provider_by_id(self.db, provider_id)
        if not provider:
            raise HTTPException(status_code=404, detail="Communication provider not found")
        org_filter = get_org_filter(user)
        if org_filter is not None and provider.organization_id != org_filter:
            raise HTTPException(status_code=403, detail="Access denied")
        return provider

    def create_provider(self, data: ProviderCreate, user: User) -> CommunicationProvider:
        organization_id = require_organization_id(user)

        if not data.type or not data.name:
            raise HTTPException(status_code=400, detail="Invalid provider data. Type and name are required.")
        if data.type not in PROVIDER_TYPES:
            raise HTTPException(
                status_code=400, detail=f"Provider type must be one of: {', '.join(PROVIDER_TYPES)}"
            )
        if data.type == "gmail" and not (data.email and data.clientId and data.clientSecret):
            raise HTTPException(
                status_code=400, detail="Gmail provider requires email, clientId, and clientSecret fields"
            )

        provider = CommunicationProvider(
            organization_id=organization_id,
            type=data.type,
            is_default=bool(data.isDefault),
            is_active=data.isActive if data.isActive is not None else True,
        )
        for field, column in PLAIN_FIELDS.items():
            setattr(provider, column, getattr(data, field) or None)
        for field, column in SECRET_FIELDS.items():
            setattr(provider, column, encrypt_secret(getattr(data, field) or None))

        self.db.add(provider)
        self.db.flush()
        if provider.is_default:
            self.repo.clear_other_defaults(self.db, provider)
        self.db.commit()
        self.db.refresh(provider)
        logger.info(f"✅ Communication provider {provider.id} ({provider.type}) created for org {organization_id}")
        return provider

    def update_provider(self, provider_id: int, data: ProviderUpdate, user: User) -> CommunicationProvider:
        """Blank values keep what is stored, so secrets need not be resent"""
        provider = self.get_provider(provider_id, user)

        for field, column in PLAIN_FIELDS.items():
            value = getattr(data, field)
            if value:
                setattr(provider, column, value)
        for field, column in SECRET_FIELDS.items():
            value = getattr(data, field)
            if value:
                setattr(provider, column, encrypt_secret(value))
        if data.isActive is not None:
            provider.is_active = data.isActive
        if data.isDefault is not None:
            provider.is_default = data.isDefault

        if provider.is_default:
            self.repo.clear_other_defaults(self.db, provider)
        self.db.commit()
        self.db.refresh(provider)
        logger.info(f"✏️ Communication provider {provider.id} updated")
        return provider

    def delete_provider(self, provider_id: int, user: User) -> dict:
        provider = self.get_provider(provider_id, user)
        self.repo.delete_provider(self.db, provider)
        logger.info(f"🗑️ Communication provider {provider_id} deleted")
        return {"success": True, "message": "Communication provider deleted"}
