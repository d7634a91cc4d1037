"""Invoice router - FastAPI endpoints for client invoicing"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_admin, require_permission
from ...database import get_db
from ...models import User
from .schemas import (
    InvoiceCreate,
    InvoiceDetailResponse,
    InvoiceItemInput,
    InvoiceItemResponse,
    InvoiceResponse,
    InvoiceUpdate,
    PaymentCreate,
    PaymentResponse,
)
from .service import InvoiceService, serialize_invoice, serialize_invoice_item, serialize_payment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


# ============================================================================
# INVOICES
# ============================================================================


@router.get("/next-number")
async def get_next_invoice_number(
    current_user: User = Depends(require_permission("invoices", "create")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return {"invoiceNumber": service.get_next_invoice_number(current_user)}


@router.get("", response_model=list[InvoiceResponse])
async def get_invoices(
    status_filter: Optional[str] = Query(None, alias="status"),
    clientId: Optional[int] = Query(None),
    current_user: User = Depends(require_permission("invoices", "view")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return [serialize_invoice(i) for i in service.get_invoices(current_user, status_filter, clientId)]


@router.post("/mark-overdue")
async def mark_overdue_invoices(
    current_user: User = Depends(get_current_admin),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Flag sent or partially paid invoices whose due date has passed"""
    return service.mark_overdue(current_user)


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
async def get_invoice(
    invoice_id: int,
    current_user: User = Depends(require_permission("invoices", "view")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return serialize_invoice(service.get_invoice(invoice_id, current_user), detail=True)


@router.post("", response_model=InvoiceDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    data: InvoiceCreate,
    current_user: User = Depends(require_permission("invoices", "create")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return serialize_invoice(service.create_invoice(data, current_user), detail=True)


@router.patch("/{invoice_id}", response_model=InvoiceDetailResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    current_user: User = Depends(require_permission("invoices", "edit")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return serialize_invoice(service.update_invoice(invoice_id, data, current_user), detail=True)


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: int,
    current_user: User = Depends(require_permission("invoices", "delete")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.delete_invoice(invoice_id, current_user)


@router.post("/{invoice_id}/send", response_model=InvoiceResponse)
async def send_invoice(
    invoice_id: int,
    current_user: User = Depends(require_permission("invoices", "edit")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return serialize_invoice(service.send_invoice(invoice_id, current_user))


# ============================================================================
# LINE ITEMS
# ============================================================================


@router.post("/{invoice_id}/items", response_model=InvoiceItemResponse, status_code=status.HTTP_201_CREATED)
async def add_invoice_item(
    invoice_id: int,
    data: InvoiceItemInput,
    current_user: User = Depends(require_permission("invoices", "edit")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return serialize_invoice_item(service.add_item(invoice_id, data, current_user))


@router.delete("/{invoice_id}/items/{item_id}")
async def delete_invoice_item(
    invoice_id: int,
    item_id: int,
    current_user: User = Depends(require_permission("invoices", "edit")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.delete_item(invoice_id, item_id, current_user)


# ============================================================================
# PAYMENTS
# ============================================================================


@router.post("/{invoice_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def record_invoice_payment(
    invoice_id: int,
    data: PaymentCreate,
    current_user: User = Depends(require_permission("invoices", "edit")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return serialize_payment(service.record_payment(invoice_id, data, current_user))


@router.delete("/{invoice_id}/payments/{payment_id}")
async def delete_invoice_payment(
    invoice_id: int,
    payment_id: int,
    current_user: User = Depends(require_permission("invoices", "edit")),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.delete_payment(invoice_id, payment_id, current_user)


__all__ = ["router"]
