"""Maintenance repository - Database operations for visits and recurring orders"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Maintenance
from ...models_business import ChemicalUsage
from ...models_work_order import MaintenanceOrder, WorkOrder


class MaintenanceRepository:
    """Repository for one-off maintenance visits"""

    @staticmethod
    def get_maintenances(
        db: Session,
        organization_id: Optional[int],
        status: Optional[str] = None,
        technician_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        client_ids: Optional[list[int]] = None,
    ) -> list[Maintenance]:
        query = db.query(Maintenance)
        if organization_id is not None:
            query = query.filter(Maintenance.organization_id == organization_id)
        if status:
            query = query.filter(Maintenance.status == status)
        if technician_id is not None:
            query = query.filter(Maintenance.technician_id == technician_id)
        if start_date:
            query = query.filter(Maintenance.scheduled_date >= start_date)
        if end_date:
            query = query.filter(Maintenance.scheduled_date <= end_date)
        if client_ids is not None:
            query = query.filter(Maintenance.client_id.in_(client_ids))
        return query.order_by(Maintenance.scheduled_date, Maintenance.id).all()

    @staticmethod
    def get_maintenance_by_id(
        db: Session, maintenance_id: int, organization_id: Optional[int]
    ) -> Optional[Maintenance]:
        query = db.query(Maintenance).filter(Maintenance.id == maintenance_id)
        if organization_id is not None:
            query = query.filter(Maintenance.organization_id == organization_id)
        return query.first()

    @staticmethod
    def create_maintenance(db: Session, **data) -> Maintenance:
        maintenance = Maintenance(**data)
        db.add(maintenance)
        db.commit()
        db.refresh(maintenance)
        return maintenance

    @staticmethod
    def update_maintenance(db: Session, maintenance: Maintenance, **updates) -> Maintenance:
        for key, value in updates.items():
            if hasattr(maintenance, key):
                setattr(maintenance, key, value)
        db.commit()
        db.refresh(maintenance)
        return maintenance

    @staticmethod
    def delete_maintenance(db: Session, maintenance: Maintenance) -> None:
        db.query(ChemicalUsage).filter(ChemicalUsage.maintenance_id == maintenance.id).delete(
            synchronize_session=False
        )
        db.delete(maintenance)
        db.commit()


class MaintenanceOrderRepository:
    """Repository for recurring maintenance orders"""

    @staticmethod
    def get_orders(
        db: Session,
        organization_id: Optional[int],
        status: Optional[str] = None,
        client_id: Optional[int] = None,
        technician_id: Optional[int] = None,
    ) -> list[MaintenanceOrder]:
        query = db.query(MaintenanceOrder)
        if organization_id is not None:
            query = query.filter(MaintenanceOrder.organization_id == organization_id)
        if status:
            query = query.filter(MaintenanceOrder.status == status)
        if client_id is not None:
            query = query.filter(MaintenanceOrder.client_id == client_id)
        if technician_id is not None:
            query = query.filter(MaintenanceOrder.technician_id == technician_id)
        return query.order_by(MaintenanceOrder.created_at.desc(), MaintenanceOrder.id.desc()).all()

    @staticmethod
    def get_order_by_id(db: Session, order_id: int) -> Optional[MaintenanceOrder]:
        return db.query(MaintenanceOrder).filter(MaintenanceOrder.id == order_id).first()

    @staticmethod
    def create_order(db: Session, **data) -> MaintenanceOrder:
        order = MaintenanceOrder(**data)
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    def update_order(db: Session, order: MaintenanceOrder, **updates) -> MaintenanceOrder:
        for key, value in updates.items():
            if hasattr(order, key):
                setattr(order, key, value)
        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    def delete_order(db: Session, order: MaintenanceOrder) -> None:
        # Generated visits outlive the agreement
        for work_order in order.work_orders:
            work_order.maintenance_order_id = None
        db.delete(order)
        db.commit()

    @staticmethod
    def get_visits(db: Session, order_id: int) -> list[WorkOrder]:
        return (
            db.query(WorkOrder)
            .filter(WorkOrder.maintenance_order_id == order_id)
            .order_by(WorkOrder.scheduled_date, WorkOrder.id)
            .all()
        )

    @staticmethod
    def create_visits(db: Session, visits: list[WorkOrder]) -> list[WorkOrder]:
        db.add_all(visits)
        db.commit()
        for visit in visits:
            db.refresh(visit)
        return visits
