"""Client service - Business logic for client operations"""

import csv
import logging
from io import StringIO
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import Client, User
from ...permissions import check_resource_ownership
from ...shared.serializers import isoformat
from ..users.repository import UserRepository
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)

# Request field -> column
FIELD_MAP = {
    "companyName": "company_name",
    "contactName": "contact_name",
    "email": "email",
    "phone": "phone",
    "address": "address",
    "city": "city",
    "state": "state",
    "zipCode": "zip_code",
    "latitude": "latitude",
    "longitude": "longitude",
    "contractType": "contract_type",
    "poolType": "pool_type",
    "poolSize": "pool_size",
    "notes": "notes",
    "userId": "user_id",
}


def serialize_client(client: Client) -> dict:
    return {
        "id": client.id,
        "organizationId": client.organization_id,
        "userId": client.user_id,
        "companyName": client.company_name,
        "contactName": client.contact_name,
        "email": client.email,
        "phone": client.phone,
        "address": client.address,
        "city": client.city,
        "state": client.state,
        "zipCode": client.zip_code,
        "latitude": client.latitude,
        "longitude": client.longitude,
        "contractType": client.contract_type,
        "poolType": client.pool_type,
        "poolSize": client.pool_size,
        "notes": client.notes,
        "createdAt": isoformat(client.created_at),
    }


def client_display_name(client: Optional[Client]) -> Optional[str]:
    if not client:
        return None
    return client.company_name or client.contact_name or (client.user.name if client.user else None)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(
        self, user: User, search: Optional[str] = None, contract_type: Optional[str] = None
    ) -> list[Client]:
        """Clients in the user's organization; client logins only see their own record"""
        user_id = user.id if user.role == "client" else None
        return self.repo.search_clients(
            self.db, get_org_filter(user), search, contract_type, user_id=user_id
        )

    def get_client(self, client_id: int, user: User) -> Client:
        client = self.repo.get_client_by_id(self.db, client_id, get_org_filter(user))
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        if user.role == "client":
            check_resource_ownership(user, client.user_id)
        return client

    def _validate_portal_user(self, user_id: Optional[int], organization_id: int) -> None:
        if user_id is None:
            return
        portal_user = UserRepository.get_by_id(self.db, user_id)
        if not portal_user or portal_user.organization_id != organization_id:
            raise HTTPException(status_code=400, detail="Linked user must belong to the organization")

    def create_client(self, data: ClientCreate, user: User) -> Client:
        """Create a new client with validation"""
        organization_id = require_organization_id(user)
        logger.info(f"📥 Creating client in organization {organization_id}")

        if not (data.companyName or data.contactName):
            raise HTTPException(status_code=400, detail="Company name or contact name is required")

        self._validate_portal_user(data.userId, organization_id)

        client_data = {
            column: getattr(data, field) for field, column in FIELD_MAP.items()
        }
        client = self.repo.create_client(self.db, organization_id, **client_data)
        logger.info(f"✅ Client {client.id} created")
        return client

    def update_client(self, client_id: int, data: ClientUpdate, user: User) -> Client:
        client = self.get_client(client_id, user)

        updates = {
            FIELD_MAP[field]: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if field in FIELD_MAP
        }
        if user.role == "client":
            # Clients may edit their contact details but not relink the record
            updates.pop("user_id", None)
        elif "user_id" in updates:
            self._validate_portal_user(updates["user_id"], client.organization_id)

        return self.repo.update_client(self.db, client, **updates)

    def delete_client(self, client_id: int, user: User) -> dict:
        client = self.get_client(client_id, user)
        try:
            self.repo.delete_client(self.db, client)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Client {client_id} still has related records: {e}")
            raise HTTPException(
                status_code=409,
                detail="Client has related records (projects, invoices or visits) and cannot be deleted",
            ) from e

        logger.info(f"🗑️ Client {client_id} deleted")
        return {"success": True, "message": "Client deleted"}

    def export_clients_csv(
        self, user: User, search: Optional[str] = None, contract_type: Optional[str] = None
    ) -> StreamingResponse:
        """Export clients as CSV"""
        logger.info(f"📊 CSV Export requested by user {user.id} ({user.email})")
        clients = self.get_clients(user, search, contract_type)
        logger.info(f"Found {len(clients)} clients to export")

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            [
                "ID",
                "Company Name",
                "Contact Name",
                "Email",
                "Phone",
                "Address",
                "City",
                "State",
                "ZIP",
                "Contract Type",
                "Pool Type",
                "Pool Size (gal)",
                "Notes",
                "Created At",
            ]
        )
        for client in clients:
            writer.writerow(
                [
                    client.id,
                    client.company_name or "",
                    client.contact_name or "",
                    client.email or "",
                    client.phone or "",
                    client.address or "",
                    client.city or "",
                    client.state or "",
                    client.zip_code or "",
                    client.contract_type or "",
                    client.pool_type or "",
                    client.pool_size or "",
                    client.notes or "",
                    isoformat(client.created_at) or "",
                ]
            )

        output.seek(0)
        return StreamingResponse(
            iter([output.getvalue()]),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=clients.csv"},
        )


def require_client(db: Session, client_id: Optional[int], organization_id: int) -> Optional[Client]:
    """Load a client of the organization or fail with 404"""
    if client_id is None:
        return None
    client = ClientRepository.get_client_by_id(db, client_id, organization_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client
