"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Client


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def search_clients(
        db: Session,
        organization_id: Optional[int],
        search: Optional[str] = None,
        contract_type: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> list[Client]:
        """Search and filter clients within an organization (None = all organizations)"""
        query = db.query(Client)
        if organization_id is not None:
            query = query.filter(Client.organization_id == organization_id)

        if user_id is not None:
            query = query.filter(Client.user_id == user_id)

        if contract_type:
            query = query.filter(Client.contract_type == contract_type)

        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    Client.company_name.ilike(search_term),
                    Client.contact_name.ilike(search_term),
                    Client.email.ilike(search_term),
                    Client.address.ilike(search_term),
                )
            )

        return query.order_by(Client.created_at.desc(), Client.id.desc()).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int, organization_id: Optional[int]) -> Optional[Client]:
        query = db.query(Client).filter(Client.id == client_id)
        if organization_id is not None:
            query = query.filter(Client.organization_id == organization_id)
        return query.first()

    @staticmethod
    def get_client_for_user(db: Session, user_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.user_id == user_id).first()

    @staticmethod
    def create_client(db: Session, organization_id: int, **client_data) -> Client:
        client = Client(organization_id=organization_id, **client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(client, key):
                setattr(client, key, value)

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def delete_client(db: Session, client: Client) -> None:
        db.delete(client)
        db.commit()

    @staticmethod
    def get_client_ids_for_user(db: Session, user_id: int) -> list[int]:
        """Client records a portal login is linked to"""
        return [row.id for row in db.query(Client.id).filter(Client.user_id == user_id).all()]
