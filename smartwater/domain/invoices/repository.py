"""Invoice repository - Database operations for invoices, lines and payments"""

import re
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models_invoice import Invoice, InvoiceItem, InvoicePayment

INVOICE_NUMBER_PATTERN = re.compile(r"^INV-(\d+)$")


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_invoices(
        db: Session,
        organization_id: Optional[int],
        status: Optional[str] = None,
        client_id: Optional[int] = None,
        client_ids: Optional[list[int]] = None,
    ) -> list[Invoice]:
        query = db.query(Invoice)
        if organization_id is not None:
            query = query.filter(Invoice.organization_id == organization_id)
        if status:
            query = query.filter(Invoice.status == status)
        if client_id is not None:
            query = query.filter(Invoice.client_id == client_id)
        if client_ids is not None:
            query = query.filter(Invoice.client_id.in_(client_ids))
        return query.order_by(Invoice.issue_date.desc(), Invoice.id.desc()).all()

    @staticmethod
    def get_invoice_by_id(db: Session, invoice_id: int) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.id == invoice_id).first()

    @staticmethod
    def get_by_number(db: Session, organization_id: int, invoice_number: str) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .filter(Invoice.organization_id == organization_id, Invoice.invoice_number == invoice_number)
            .first()
        )

    @staticmethod
    def get_next_invoice_number(db: Session, organization_id: int) -> str:
        """INV-00001, INV-00002, ... per organization"""
        numbers = (
            db.query(Invoice.invoice_number).filter(Invoice.organization_id == organization_id).all()
        )
        highest = 0
        for (number,) in numbers:
            match = INVOICE_NUMBER_PATTERN.match(number or "")
            if match:
                highest = max(highest, int(match.group(1)))
        return f"INV-{highest + 1:05d}"

    @staticmethod
    def get_overdue_candidates(db: Session, organization_id: Optional[int], today: date) -> list[Invoice]:
        query = db.query(Invoice).filter(
            Invoice.status.in_(("sent", "partial")),
            Invoice.due_date < today,
        )
        if organization_id is not None:
            query = query.filter(Invoice.organization_id == organization_id)
        return query.all()

    @staticmethod
    def get_item(db: Session, invoice_id: int, item_id: int) -> Optional[InvoiceItem]:
        return (
            db.query(InvoiceItem)
            .filter(InvoiceItem.id == item_id, InvoiceItem.invoice_id == invoice_id)
            .first()
        )

    @staticmethod
    def get_payment(db: Session, invoice_id: int, payment_id: int) -> Optional[InvoicePayment]:
        return (
            db.query(InvoicePayment)
            .filter(InvoicePayment.id == payment_id, InvoicePayment.invoice_id == invoice_id)
            .first()
        )

    @staticmethod
    def add(db: Session, *rows) -> None:
        db.add_all(rows)

    @staticmethod
    def save(db: Session, row):
        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def delete(db: Session, row) -> None:
        db.delete(row)
        db.commit()
