"""Work order repository - Database operations for work orders and their children"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models_business import ChemicalUsage
from ...models_invoice import Invoice
from ...models_work_order import (
    WorkOrder,
    WorkOrderAuditLog,
    WorkOrderItem,
    WorkOrderNote,
    WorkOrderTeamMember,
    WorkOrderTimeEntry,
)


class WorkOrderRepository:
    """Repository for work order database operations"""

    @staticmethod
    def get_work_orders(
        db: Session,
        organization_id: Optional[int],
        category: Optional[str] = None,
        status: Optional[str] = None,
        technician_id: Optional[int] = None,
        project_id: Optional[int] = None,
        repair_id: Optional[int] = None,
    ) -> list[WorkOrder]:
        query = db.query(WorkOrder)
        if organization_id is not None:
            query = query.filter(WorkOrder.organization_id == organization_id)
        if category:
            query = query.filter(WorkOrder.category == category)
        if status:
            query = query.filter(WorkOrder.status == status)
        if technician_id is not None:
            query = query.filter(WorkOrder.technician_id == technician_id)
        if project_id is not None:
            query = query.filter(WorkOrder.project_id == project_id)
        if repair_id is not None:
            query = query.filter(WorkOrder.repair_id == repair_id)
        return query.order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()).all()

    @staticmethod
    def get_assigned_with_time_entries(db: Session, organization_id: Optional[int]) -> list[WorkOrder]:
        query = (
            db.query(WorkOrder)
            .options(selectinload(WorkOrder.time_entries))
            .filter(WorkOrder.technician_id.isnot(None))
        )
        if organization_id is not None:
            query = query.filter(WorkOrder.organization_id == organization_id)
        return query.order_by(WorkOrder.id).all()

    @staticmethod
    def get_work_order_by_id(
        db: Session, work_order_id: int, organization_id: Optional[int]
    ) -> Optional[WorkOrder]:
        query = db.query(WorkOrder).filter(WorkOrder.id == work_order_id)
        if organization_id is not None:
            query = query.filter(WorkOrder.organization_id == organization_id)
        return query.first()

    @staticmethod
    def add(db: Session, *rows) -> None:
        db.add_all(rows)

    @staticmethod
    def save(db: Session, *rows):
        """Commit pending changes and refresh the given rows"""
        db.commit()
        for row in rows:
            db.refresh(row)
        return rows[0] if rows else None

    @staticmethod
    def delete(db: Session, row) -> None:
        db.delete(row)
        db.commit()

    @staticmethod
    def delete_work_order(db: Session, work_order: WorkOrder) -> None:
        # Chemical usage goes with the job; invoices are kept and unlinked
        db.query(ChemicalUsage).filter(ChemicalUsage.work_order_id == work_order.id).delete(
            synchronize_session=False
        )
        db.query(Invoice).filter(Invoice.work_order_id == work_order.id).update(
            {Invoice.work_order_id: None}, synchronize_session=False
        )
        db.delete(work_order)
        db.commit()

    # Children

    @staticmethod
    def get_notes(db: Session, work_order_id: int) -> list[WorkOrderNote]:
        return (
            db.query(WorkOrderNote)
            .filter(WorkOrderNote.work_order_id == work_order_id)
            .order_by(WorkOrderNote.created_at.desc(), WorkOrderNote.id.desc())
            .all()
        )

    @staticmethod
    def get_audit_logs(db: Session, work_order_id: int) -> list[WorkOrderAuditLog]:
        return (
            db.query(WorkOrderAuditLog)
            .filter(WorkOrderAuditLog.work_order_id == work_order_id)
            .order_by(WorkOrderAuditLog.created_at.desc(), WorkOrderAuditLog.id.desc())
            .all()
        )

    @staticmethod
    def get_items(db: Session, work_order_id: int) -> list[WorkOrderItem]:
        return (
            db.query(WorkOrderItem)
            .filter(WorkOrderItem.work_order_id == work_order_id)
            .order_by(WorkOrderItem.id)
            .all()
        )

    @staticmethod
    def get_item(db: Session, work_order_id: int, item_id: int) -> Optional[WorkOrderItem]:
        return (
            db.query(WorkOrderItem)
            .filter(WorkOrderItem.id == item_id, WorkOrderItem.work_order_id == work_order_id)
            .first()
        )

    @staticmethod
    def get_time_entries(db: Session, work_order_id: int) -> list[WorkOrderTimeEntry]:
        return (
            db.query(WorkOrderTimeEntry)
            .filter(WorkOrderTimeEntry.work_order_id == work_order_id)
            .order_by(WorkOrderTimeEntry.clock_in.desc(), WorkOrderTimeEntry.id.desc())
            .all()
        )

    @staticmethod
    def get_time_entry(db: Session, work_order_id: int, entry_id: int) -> Optional[WorkOrderTimeEntry]:
        return (
            db.query(WorkOrderTimeEntry)
            .filter(WorkOrderTimeEntry.id == entry_id, WorkOrderTimeEntry.work_order_id == work_order_id)
            .first()
        )

    @staticmethod
    def get_open_time_entry(db: Session, work_order_id: int, user_id: int) -> Optional[WorkOrderTimeEntry]:
        return (
            db.query(WorkOrderTimeEntry)
            .filter(
                WorkOrderTimeEntry.work_order_id == work_order_id,
                WorkOrderTimeEntry.user_id == user_id,
                WorkOrderTimeEntry.clock_out.is_(None),
            )
            .order_by(WorkOrderTimeEntry.clock_in.desc())
            .first()
        )

    @staticmethod
    def get_team_members(db: Session, work_order_id: int) -> list[WorkOrderTeamMember]:
        return (
            db.query(WorkOrderTeamMember)
            .filter(WorkOrderTeamMember.work_order_id == work_order_id)
            .order_by(WorkOrderTeamMember.id)
            .all()
        )

    @staticmethod
    def get_team_member(db: Session, work_order_id: int, member_id: int) -> Optional[WorkOrderTeamMember]:
        return (
            db.query(WorkOrderTeamMember)
            .filter(WorkOrderTeamMember.id == member_id, WorkOrderTeamMember.work_order_id == work_order_id)
            .first()
        )
