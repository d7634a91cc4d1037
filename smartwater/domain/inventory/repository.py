"""Inventory repository - Database operations for stock items"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models_business import InventoryItem


class InventoryRepository:
    """Repository for inventory database operations"""

    @staticmethod
    def get_items(
        db: Session,
        organization_id: Optional[int],
        category: Optional[str] = None,
        active_only: bool = False,
    ) -> list[InventoryItem]:
        query = db.query(InventoryItem)
        if organization_id is not None:
            query = query.filter(InventoryItem.organization_id == organization_id)
        if category:
            query = query.filter(InventoryItem.category == category)
        if active_only:
            query = query.filter(InventoryItem.is_active.is_(True))
        return query.order_by(InventoryItem.name).all()

    @staticmethod
    def get_low_stock(db: Session, organization_id: Optional[int]) -> list[InventoryItem]:
        query = db.query(InventoryItem).filter(
            InventoryItem.is_active.is_(True),
            InventoryItem.quantity <= InventoryItem.min_stock_level,
        )
        if organization_id is not None:
            query = query.filter(InventoryItem.organization_id == organization_id)
        return query.order_by(InventoryItem.quantity).all()

    @staticmethod
    def get_item_by_id(
        db: Session, item_id: int, organization_id: Optional[int]
    ) -> Optional[InventoryItem]:
        query = db.query(InventoryItem).filter(InventoryItem.id == item_id)
        if organization_id is not None:
            query = query.filter(InventoryItem.organization_id == organization_id)
        return query.first()

    @staticmethod
    def create_item(db: Session, **data) -> InventoryItem:
        item = InventoryItem(**data)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def update_item(db: Session, item: InventoryItem, **updates) -> InventoryItem:
        for key, value in updates.items():
            if hasattr(item, key):
                setattr(item, key, value)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def delete_item(db: Session, item: InventoryItem) -> None:
        db.delete(item)
        db.commit()
