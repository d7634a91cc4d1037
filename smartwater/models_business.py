"""
Business operations models: vendors, inventory and chemical tracking
"""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=True)  # chemicals, equipment, parts, service, utilities, other
    contact_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    website = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=True, index=True)
    category = Column(String(100), nullable=True)
    unit = Column(String(50), default="each", nullable=False)
    quantity = Column(Float, default=0, nullable=False)
    min_stock_level = Column(Float, default=0, nullable=False)
    unit_cost = Column(Integer, default=0, nullable=False)  # cents
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    vendor = relationship("Vendor")


class ChemicalPrice(Base):
    """Organization price list for pool chemicals"""

    __tablename__ = "chemical_prices"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    chemical_type = Column(String(50), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    unit = Column(String(50), nullable=False)  # gallon, lb, tablet, bag
    unit_cost = Column(Integer, nullable=False)  # cents
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    vendor = relationship("Vendor")


class ChemicalUsage(Base):
    """Chemicals applied during a maintenance visit or work order"""

    __tablename__ = "chemical_usage"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    maintenance_id = Column(Integer, ForeignKey("maintenances.id"), nullable=True, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id"), nullable=True, index=True)
    chemical_type = Column(String(50), nullable=False)
    amount = Column(Float, nullable=False)
    unit = Column(String(50), nullable=False)
    unit_cost = Column(Integer, nullable=True)  # cents
    total_cost = Column(Integer, nullable=True)  # cents
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    recorded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
