"""Communication provider repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models_communication import CommunicationProvider


class ProviderRepository:
    @staticmethod
    def get_providers(db: Session, organization_id: Optional[int]) -> list[CommunicationProvider]:
        query = db.query(CommunicationProvider)
        if organization_id is not None:
            query = query.filter(CommunicationProvider.organization_id == organization_id)
        return query.order_by(CommunicationProvider.is_default.desc(), CommunicationProvider.id).all()

    @staticmethod
    def get_provider_by_id(db: Session, provider_id: int) -> Optional[CommunicationProvider]:
        return db.query(CommunicationProvider).filter(CommunicationProvider.id == provider_id).first()

    @staticmethod
    def clear_other_defaults(db: Session, provider: CommunicationProvider) -> int:
        """Unset is_default on every other provider of the same organization and type"""
        return (
            db.query(CommunicationProvider)
            .filter(
                CommunicationProvider.organization_id == provider.organization_id,
                CommunicationProvider.type == provider.type,
                CommunicationProvider.id != provider.id,
                CommunicationProvider.is_default.is_(True),
            )
            .update({CommunicationProvider.is_default: False}, synchronize_session="fetch")
        )

    @staticmethod
    def delete_provider(db: Session, provider: CommunicationProvider) -> None:
        db.delete(provider)
        db.commit()
