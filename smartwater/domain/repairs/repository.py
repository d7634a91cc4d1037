"""Repair repository - Database operations for repair requests"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Repair


class RepairRepository:
    """Repository for repair database operations"""

    @staticmethod
    def get_repairs(
        db: Session,
        organization_id: Optional[int],
        status: Optional[str] = None,
        priority: Optional[str] = None,
        client_ids: Optional[list[int]] = None,
    ) -> list[Repair]:
        query = db.query(Repair)
        if organization_id is not None:
            query = query.filter(Repair.organization_id == organization_id)
        if status:
            query = query.filter(Repair.status == status)
        if priority:
            query = query.filter(Repair.priority == priority)
        if client_ids is not None:
            query = query.filter(Repair.client_id.in_(client_ids))
        return query.order_by(Repair.reported_date.desc(), Repair.id.desc()).all()

    @staticmethod
    def get_repair_by_id(db: Session, repair_id: int, organization_id: Optional[int]) -> Optional[Repair]:
        query = db.query(Repair).filter(Repair.id == repair_id)
        if organization_id is not None:
            query = query.filter(Repair.organization_id == organization_id)
        return query.first()

    @staticmethod
    def create_repair(db: Session, **data) -> Repair:
        repair = Repair(**data)
        db.add(repair)
        db.commit()
        db.refresh(repair)
        return repair

    @staticmethod
    def update_repair(db: Session, repair: Repair, **updates) -> Repair:
        for key, value in updates.items():
            if hasattr(repair, key):
                setattr(repair, key, value)
        db.commit()
        db.refresh(repair)
        return repair

    @staticmethod
    def delete_repair(db: Session, repair: Repair) -> None:
        db.delete(repair)
        db.commit()
