"""Invoice schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_choice, validate_decimal_string

INVOICE_STATUSES = ("draft", "sent", "partial", "paid", "overdue", "cancelled")
PAYMENT_METHODS = ("cash", "check", "card", "ach", "other")


class InvoiceItemInput(BaseModel):
    description: str
    quantity: Optional[str] = "1"
    unitPrice: int  # cents
    inventoryItemId: Optional[int] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def validate_quantity(cls, v):
        return validate_decimal_string(v, "Quantity")


class InvoiceCreate(BaseModel):
    # Presence of client and dates is checked in the service so the
    # caller gets a specific 400 message
    clientId: Optional[int] = None
    issueDate: Optional[date] = None
    dueDate: Optional[date] = None
    invoiceNumber: Optional[str] = None
    workOrderId: Optional[int] = None
    status: Optional[str] = "draft"
    taxRate: Optional[str] = "0"
    discountPercent: Optional[str] = None
    discountAmount: Optional[int] = 0
    notes: Optional[str] = None
    terms: Optional[str] = None
    items: list[InvoiceItemInput] = []

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, INVOICE_STATUSES, "Status")

    @field_validator("taxRate", "discountPercent", mode="before")
    @classmethod
    def validate_percent(cls, v):
        return validate_decimal_string(v, "Percentage")


class InvoiceUpdate(BaseModel):
    clientId: Optional[int] = None
    issueDate: Optional[date] = None
    dueDate: Optional[date] = None
    workOrderId: Optional[int] = None
    status: Optional[str] = None
    taxRate: Optional[str] = None
    discountPercent: Optional[str] = None
    discountAmount: Optional[int] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    items: Optional[list[InvoiceItemInput]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, INVOICE_STATUSES, "Status")

    @field_validator("taxRate", "discountPercent", mode="before")
    @classmethod
    def validate_percent(cls, v):
        return validate_decimal_string(v, "Percentage")


class PaymentCreate(BaseModel):
    amount: int  # cents
    paymentMethod: str = "other"
    paymentDate: Optional[date] = None
    reference: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Payment amount must be greater than zero")
        return v

    @field_validator("paymentMethod")
    @classmethod
    def validate_method(cls, v):
        return validate_choice(v, PAYMENT_METHODS, "Payment method")


class InvoiceItemResponse(BaseModel):
    id: int
    invoiceId: int
    description: str
    quantity: Optional[str] = None
    unitPrice: int  # cents
    amount: int  # cents
    sortOrder: Optional[int] = None
    inventoryItemId: Optional[int] = None


class PaymentResponse(BaseModel):
    id: int
    invoiceId: int
    amount: int  # cents
    paymentMethod: str
    paymentDate: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    recordedBy: Optional[int] = None
    createdAt: Optional[str] = None


class InvoiceResponse(BaseModel):
    """Invoice header with totals in cents; dates are ISO strings"""

    id: int
    organizationId: int
    clientId: int
    clientName: Optional[str] = None
    workOrderId: Optional[int] = None
    invoiceNumber: str
    issueDate: Optional[str] = None
    dueDate: Optional[str] = None
    status: str
    taxRate: Optional[str] = None
    discountPercent: Optional[str] = None
    discountAmount: Optional[int] = None
    subtotal: Optional[int] = None
    taxAmount: Optional[int] = None
    total: Optional[int] = None
    amountPaid: Optional[int] = None
    amountDue: Optional[int] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    sentAt: Optional[str] = None
    paidDate: Optional[str] = None
    createdBy: Optional[int] = None
    createdAt: Optional[str] = None


class InvoiceDetailResponse(InvoiceResponse):
    items: list[InvoiceItemResponse] = []
    payments: list[PaymentResponse] = []
