"""
Invoice, Invoice Item and Payment Models for Client Invoicing

All monetary columns are integer cents.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Invoice(Base):
    """Invoice model for client billing"""

    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("organization_id", "invoice_number", name="uq_invoice_number_per_org"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id"), nullable=True)

    # Invoice details
    invoice_number = Column(String(50), nullable=False, index=True)
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(50), default="draft", nullable=False)  # draft, sent, partial, paid, overdue, cancelled

    # Pricing
    tax_rate = Column(String(20), default="0", nullable=False)  # percent, e.g. "8.25"
    discount_percent = Column(String(20), nullable=True)
    discount_amount = Column(Integer, default=0, nullable=False)
    subtotal = Column(Integer, default=0, nullable=False)
    tax_amount = Column(Integer, default=0, nullable=False)
    total = Column(Integer, default=0, nullable=False)
    amount_paid = Column(Integer, default=0, nullable=False)
    amount_due = Column(Integer, default=0, nullable=False)

    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    inventory_deducted = Column(Boolean, default=False, nullable=False)

    # Dates
    sent_at = Column(DateTime, nullable=True)
    paid_date = Column(Date, nullable=True)

    # Audit
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    client = relationship("Client")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.sort_order",
    )
    payments = relationship(
        "InvoicePayment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoicePayment.id",
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    quantity = Column(String(20), default="1", nullable=False)  # decimal string
    unit_price = Column(Integer, nullable=False)  # cents
    amount = Column(Integer, nullable=False)  # cents
    sort_order = Column(Integer, default=0, nullable=False)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=True)

    invoice = relationship("Invoice", back_populates="items")


class InvoicePayment(Base):
    """Payment recorded against an invoice"""

    __tablename__ = "invoice_payments"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False)
    amount = Column(Integer, nullable=False)  # cents
    payment_method = Column(String(50), nullable=False)  # cash, check, card, ach, other
    payment_date = Column(Date, nullable=False)
    reference = Column(String(255), nullable=True)  # check number, transaction id
    notes = Column(Text, nullable=True)
    recorded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    invoice = relationship("Invoice", back_populates="payments")
