"""Chemical tracking repository - Database operations for the price list and usage log"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models_business import ChemicalPrice, ChemicalUsage


class ChemicalPriceRepository:
    @staticmethod
    def get_prices(db: Session, organization_id: Optional[int]) -> list[ChemicalPrice]:
        query = db.query(ChemicalPrice)
        if organization_id is not None:
            query = query.filter(ChemicalPrice.organization_id == organization_id)
        return query.order_by(ChemicalPrice.chemical_type, ChemicalPrice.name).all()

    @staticmethod
    def get_price_by_id(db: Session, price_id: int, organization_id: Optional[int]) -> Optional[ChemicalPrice]:
        query = db.query(ChemicalPrice).filter(ChemicalPrice.id == price_id)
        if organization_id is not None:
            query = query.filter(ChemicalPrice.organization_id == organization_id)
        return query.first()

    @staticmethod
    def get_active_price(db: Session, organization_id: int, chemical_type: str) -> Optional[ChemicalPrice]:
        """Most recently added active price for a chemical type"""
        return (
            db.query(ChemicalPrice)
            .filter(
                ChemicalPrice.organization_id == organization_id,
                ChemicalPrice.chemical_type == chemical_type,
                ChemicalPrice.is_active.is_(True),
            )
            .order_by(ChemicalPrice.id.desc())
            .first()
        )

    @staticmethod
    def create_price(db: Session, **data) -> ChemicalPrice:
        price = ChemicalPrice(**data)
        db.add(price)
        db.commit()
        db.refresh(price)
        return price

    @staticmethod
    def update_price(db: Session, price: ChemicalPrice, **updates) -> ChemicalPrice:
        for key, value in updates.items():
            if hasattr(price, key):
                setattr(price, key, value)
        db.commit()
        db.refresh(price)
        return price

    @staticmethod
    def delete_price(db: Session, price: ChemicalPrice) -> None:
        db.delete(price)
        db.commit()


class ChemicalUsageRepository:
    @staticmethod
    def get_usage(
        db: Session,
        organization_id: int,
        maintenance_id: Optional[int] = None,
        work_order_id: Optional[int] = None,
    ) -> list[ChemicalUsage]:
        query = db.query(ChemicalUsage).filter(ChemicalUsage.organization_id == organization_id)
        if maintenance_id is not None:
            query = query.filter(ChemicalUsage.maintenance_id == maintenance_id)
        if work_order_id is not None:
            query = query.filter(ChemicalUsage.work_order_id == work_order_id)
        return query.order_by(ChemicalUsage.created_at, ChemicalUsage.id).all()

    @staticmethod
    def create_usage(db: Session, **data) -> ChemicalUsage:
        usage = ChemicalUsage(**data)
        db.add(usage)
        db.commit()
        db.refresh(usage)
        return usage
