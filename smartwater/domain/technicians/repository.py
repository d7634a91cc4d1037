"""Technician repository - Database operations for technicians"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Technician


class TechnicianRepository:
    """Repository for technician database operations"""

    @staticmethod
    def get_technicians(
        db: Session, organization_id: Optional[int], active_only: bool = False
    ) -> list[Technician]:
        query = db.query(Technician).options(joinedload(Technician.user))
        if organization_id is not None:
            query = query.filter(Technician.organization_id == organization_id)
        if active_only:
            query = query.filter(Technician.active.is_(True))
        return query.order_by(Technician.id).all()

    @staticmethod
    def get_technician_by_id(
        db: Session, technician_id: int, organization_id: Optional[int]
    ) -> Optional[Technician]:
        query = (
            db.query(Technician)
            .options(joinedload(Technician.user))
            .filter(Technician.id == technician_id)
        )
        if organization_id is not None:
            query = query.filter(Technician.organization_id == organization_id)
        return query.first()

    @staticmethod
    def get_by_user_id(db: Session, user_id: int) -> Optional[Technician]:
        return db.query(Technician).filter(Technician.user_id == user_id).first()

    @staticmethod
    def create_technician(db: Session, **data) -> Technician:
        technician = Technician(**data)
        db.add(technician)
        db.commit()
        db.refresh(technician)
        return technician

    @staticmethod
    def update_technician(db: Session, technician: Technician, **updates) -> Technician:
        for key, value in updates.items():
            if value is not None and hasattr(technician, key):
                setattr(technician, key, value)
        db.commit()
        db.refresh(technician)
        return technician

    @staticmethod
    def delete_technician(db: Session, technician: Technician) -> None:
        db.delete(technician)
        db.commit()
