"""Invoice service - Business logic for client invoicing"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import get_org_filter, require_organization_id
from ...models import User
from ...models_invoice import Invoice, InvoiceItem, InvoicePayment
from ...shared.serializers import isoformat
from ..clients.repository import ClientRepository
from ..clients.service import client_display_name, require_client
from ..inventory.stock import deduct_stock, require_inventory_item
from ..work_orders.repository import WorkOrderRepository
from .repository import InvoiceRepository
from .schemas import InvoiceCreate, InvoiceItemInput, InvoiceUpdate, PaymentCreate
from .totals import calculate_invoice_totals, line_amount, parse_quantity

logger = logging.getLogger(__name__)


def serialize_invoice_item(item: InvoiceItem) -> dict:
    return {
        "id": item.id,
        "invoiceId": item.invoice_id,
        "description": item.description,
        "quantity": item.quantity,
        "unitPrice": item.unit_price,
        "amount": item.amount,
        "sortOrder": item.sort_order,
        "inventoryItemId": item.inventory_item_id,
    }


def serialize_payment(payment: InvoicePayment) -> dict:
    return {
        "id": payment.id,
        "invoiceId": payment.invoice_id,
        "amount": payment.amount,
        "paymentMethod": payment.payment_method,
        "paymentDate": isoformat(payment.payment_date),
        "reference": payment.reference,
        "notes": payment.notes,
        "recordedBy": payment.recorded_by,
        "createdAt": isoformat(payment.created_at),
    }


def serialize_invoice(invoice: Invoice, detail: bool = False) -> dict:
    data = {
        "id": invoice.id,
        "organizationId": invoice.organization_id,
        "clientId": invoice.client_id,
        "clientName": client_display_name(invoice.client),
        "workOrderId": invoice.work_order_id,
        "invoiceNumber": invoice.invoice_number,
        "issueDate": isoformat(invoice.issue_date),
        "dueDate": isoformat(invoice.due_date),
        "status": invoice.status,
        "taxRate": invoice.tax_rate,
        "discountPercent": invoice.discount_percent,
        "discountAmount": invoice.discount_amount,
        "subtotal": invoice.subtotal,
        "taxAmount": invoice.tax_amount,
        "total": invoice.total,
        "amountPaid": invoice.amount_paid,
        "amountDue": invoice.amount_due,
        "notes": invoice.notes,
        "terms": invoice.terms,
        "sentAt": isoformat(invoice.sent_at),
        "paidDate": isoformat(invoice.paid_date),
        "createdBy": invoice.created_by,
        "createdAt": isoformat(invoice.created_at),
    }
    if detail:
        data["items"] = [serialize_invoice_item(i) for i in invoice.items]
        data["payments"] = [serialize_payment(p) for p in invoice.payments]
    return data


def _build_items(items: list[InvoiceItemInput], start: int = 0) -> list[InvoiceItem]:
    return [
        InvoiceItem(
            description=item.description,
            quantity=item.quantity or "1",
            unit_price=item.unitPrice,
            amount=line_amount(item.quantity, item.unitPrice),
            sort_order=start + index,
            inventory_item_id=item.inventoryItemId,
        )
        for index, item in enumerate(items)
    ]


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()

    # ========================================================================
    # Helpers
    # ========================================================================

    def get_invoice(self, invoice_id: int, user: User) -> Invoice:
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")

        org_filter = get_org_filter(user)
        if org_filter is not None and invoice.organization_id != org_filter:
            logger.warning(f"🚫 User {user.id} denied access to invoice {invoice_id}")
            raise HTTPException(status_code=403, detail="Access denied")
        if user.role == "client" and invoice.client_id not in ClientRepository.get_client_ids_for_user(
            self.db, user.id
        ):
            raise HTTPException(status_code=403, detail="Access denied")
        return invoice

    def _validate_links(
        self, organization_id: int, work_order_id: Optional[int], items: list[InvoiceItemInput]
    ) -> None:
        if work_order_id and not WorkOrderRepository.get_work_order_by_id(
            self.db, work_order_id, organization_id
        ):
            raise HTTPException(status_code=404, detail="Work order not found")
        for item in items:
            require_inventory_item(self.db, item.inventoryItemId, organization_id)

    def _recalculate(self, invoice: Invoice) -> None:
        """Refresh totals from the current lines; amount due tracks payments"""
        totals = calculate_invoice_totals(
            [{"quantity": i.quantity, "unit_price": i.unit_price} for i in invoice.items],
            invoice.tax_rate,
            invoice.discount_percent,
            invoice.discount_amount,
        )
        invoice.subtotal = totals["subtotal"]
        invoice.discount_amount = totals["discount_amount"]
        invoice.tax_amount = totals["tax_amount"]
        invoice.total = totals["total"]
        invoice.amount_due = invoice.total - (invoice.amount_paid or 0)

    def _deduct_inventory_once(self, invoice: Invoice) -> None:
        if invoice.inventory_deducted:
            return
        for item in invoice.items:
            deduct_stock(
                self.db, item.inventory_item_id, invoice.organization_id, parse_quantity(item.quantity)
            )
        invoice.inventory_deducted = True
        logger.info(f"📦 Inventory deducted for invoice {invoice.invoice_number}")

    def _set_status(self, invoice: Invoice, status: str) -> None:
        previous = invoice.status
        invoice.status = status
        if previous == "draft" and status != "draft":
            self._deduct_inventory_once(invoice)

    # ========================================================================
    # Invoices
    # ========================================================================

    def get_next_invoice_number(self, user: User) -> str:
        return self.repo.get_next_invoice_number(self.db, require_organization_id(user))

    def get_invoices(self, user: User, status: Optional[str] = None, client_id: Optional[int] = None):
        client_ids = None
        if user.role == "client":
            client_ids = ClientRepository.get_client_ids_for_user(self.db, user.id)
        return self.repo.get_invoices(self.db, get_org_filter(user), status, client_id, client_ids)

    def create_invoice(self, data: InvoiceCreate, user: User) -> Invoice:
        organization_id = require_organization_id(user)

        if not data.clientId:
            raise HTTPException(status_code=400, detail="Client is required")
        if not data.issueDate:
            raise HTTPException(status_code=400, detail="Issue date is required")
        if not data.dueDate:
            raise HTTPException(status_code=400, detail="Due date is required")
        require_client(self.db, data.clientId, organization_id)
        self._validate_links(organization_id, data.workOrderId, data.items)

        invoice_number = data.invoiceNumber or self.repo.get_next_invoice_number(self.db, organization_id)
        if self.repo.get_by_number(self.db, organization_id, invoice_number):
            raise HTTPException(status_code=409, detail=f"Invoice number {invoice_number} already exists")

        invoice = Invoice(
            organization_id=organization_id,
            client_id=data.clientId,
            work_order_id=data.workOrderId,
            invoice_number=invoice_number,
            issue_date=data.issueDate,
            due_date=data.dueDate,
            status="draft",
            tax_rate=data.taxRate or "0",
            discount_percent=data.discountPercent,
            discount_amount=data.discountAmount or 0,
            amount_paid=0,
            notes=data.notes,
            terms=data.terms,
            created_by=user.id,
        )
        invoice.items = _build_items(data.items)
        self._recalculate(invoice)
        self.repo.add(self.db, invoice)
        if data.status and data.status != "draft":
            self._set_status(invoice, data.status)

        self.repo.save(self.db, invoice)
        logger.info(f"✅ Invoice {invoice.invoice_number} created (total {invoice.total} cents)")
        return invoice

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate, user: User) -> Invoice:
        invoice = self.get_invoice(invoice_id, user)
        updates = data.model_dump(exclude_unset=True)
        self._validate_links(invoice.organization_id, updates.get("workOrderId"), data.items or [])

        if updates.get("clientId"):
            require_client(self.db, updates["clientId"], invoice.organization_id)
            invoice.client_id = updates["clientId"]
        if updates.get("issueDate"):
            invoice.issue_date = updates["issueDate"]
        if updates.get("dueDate"):
            invoice.due_date = updates["dueDate"]
        if "workOrderId" in updates:
            invoice.work_order_id = updates["workOrderId"]
        if "notes" in updates:
            invoice.notes = updates["notes"]
        if "terms" in updates:
            invoice.terms = updates["terms"]

        pricing_changed = False
        if updates.get("taxRate") is not None:
            invoice.tax_rate = updates["taxRate"]
            pricing_changed = True
        if "discountPercent" in updates:
            invoice.discount_percent = updates["discountPercent"]
            pricing_changed = True
        if updates.get("discountAmount") is not None:
            invoice.discount_amount = updates["discountAmount"]
            pricing_changed = True
        if data.items is not None:
            invoice.items = _build_items(data.items)
            pricing_changed = True
        if pricing_changed:
            self._recalculate(invoice)

        if updates.get("status"):
            self._set_status(invoice, updates["status"])

        return self.repo.save(self.db, invoice)

    def delete_invoice(self, invoice_id: int, user: User) -> dict:
        invoice = self.get_invoice(invoice_id, user)
        self.repo.delete(self.db, invoice)
        logger.info(f"🗑️ Invoice {invoice.invoice_number} deleted")
        return {"success": True}

    def send_invoice(self, invoice_id: int, user: User) -> Invoice:
        invoice = self.get_invoice(invoice_id, user)
        self._set_status(invoice, "sent")
        invoice.sent_at = datetime.utcnow()
        self.repo.save(self.db, invoice)
        logger.info(f"📤 Invoice {invoice.invoice_number} marked as sent")
        return invoice

    def mark_overdue(self, user: User) -> dict:
        today = date.today()
        invoices = self.repo.get_overdue_candidates(self.db, get_org_filter(user), today)
        for invoice in invoices:
            invoice.status = "overdue"
        self.db.commit()
        logger.info(f"⏰ Marked {len(invoices)} invoices overdue")
        return {"success": True, "updated": len(invoices)}

    # ========================================================================
    # Lines
    # ========================================================================

    def add_item(self, invoice_id: int, data: InvoiceItemInput, user: User) -> InvoiceItem:
        invoice = self.get_invoice(invoice_id, user)
        self._validate_links(invoice.organization_id, None, [data])
        (item,) = _build_items([data], start=len(invoice.items))
        invoice.items.append(item)
        self._recalculate(invoice)
        self.repo.save(self.db, invoice)
        self.db.refresh(item)
        return item

    def delete_item(self, invoice_id: int, item_id: int, user: User) -> dict:
        invoice = self.get_invoice(invoice_id, user)
        item = self.repo.get_item(self.db, invoice.id, item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Invoice item not found")
        invoice.items.remove(item)
        self._recalculate(invoice)
        self.repo.save(self.db, invoice)
        return {"success": True}

    # ========================================================================
    # Payments
    # ========================================================================

    def record_payment(self, invoice_id: int, data: PaymentCreate, user: User) -> InvoicePayment:
        invoice = self.get_invoice(invoice_id, user)
        payment = InvoicePayment(
            organization_id=invoice.organization_id,
            amount=data.amount,
            payment_method=data.paymentMethod,
            payment_date=data.paymentDate or date.today(),
            reference=data.reference,
            notes=data.notes,
            recorded_by=user.id,
        )
        invoice.payments.append(payment)

        invoice.amount_paid = (invoice.amount_paid or 0) + payment.amount
        amount_due = (invoice.total or 0) - invoice.amount_paid
        invoice.amount_due = max(0, amount_due)
        if amount_due <= 0:
            self._set_status(invoice, "paid")
            invoice.paid_date = date.today()
        elif invoice.amount_paid > 0:
            self._set_status(invoice, "partial")

        self.repo.save(self.db, invoice)
        self.db.refresh(payment)
        logger.info(
            f"💰 Payment of {payment.amount} cents on invoice {invoice.invoice_number} "
            f"(status {invoice.status}, due {invoice.amount_due})"
        )
        return payment

    def delete_payment(self, invoice_id: int, payment_id: int, user: User) -> dict:
        invoice = self.get_invoice(invoice_id, user)
        payment = self.repo.get_payment(self.db, invoice.id, payment_id)
        if not payment:
            raise HTTPException(status_code=404, detail="Payment not found")

        invoice.payments.remove(payment)
        amount_paid = (invoice.amount_paid or 0) - payment.amount
        amount_due = (invoice.total or 0) - amount_paid

        if amount_paid <= 0:
            invoice.status = "sent" if invoice.sent_at else "draft"
        elif amount_due > 0:
            invoice.status = "partial"
        # Remaining payments may still cover the total
        if invoice.status != "paid":
            invoice.paid_date = None
        invoice.amount_paid = max(0, amount_paid)
        invoice.amount_due = max(0, amount_due)

        self.repo.save(self.db, invoice)
        logger.info(f"🗑️ Payment {payment_id} removed from invoice {invoice.invoice_number}")
        return {"success": True}
