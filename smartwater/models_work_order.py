from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class MaintenanceOrder(Base):
    """Recurring service agreement; visits are generated as maintenance work orders"""

    __tablename__ = "maintenance_orders"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    frequency = Column(String(20), default="weekly", nullable=False)
    day_of_week = Column(Integer, nullable=True)  # 0=Sunday ... 6=Saturday
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    technician_id = Column(Integer, ForeignKey("technicians.id"), nullable=True)
    address = Column(Text, nullable=True)
    estimated_duration = Column(Integer, nullable=True)  # minutes
    status = Column(String(20), default="active", nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    client = relationship("Client")
    work_orders = relationship("WorkOrder", back_populates="maintenance_order")


class WorkOrder(Base):
    __tablename__ = "work_orders"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), default="other", nullable=False)
    status = Column(String(50), default="pending", nullable=False)
    priority = Column(String(20), default="medium", nullable=False)
    scheduled_date = Column(Date, nullable=True, index=True)
    technician_id = Column(Integer, ForeignKey("technicians.id"), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    project_phase_id = Column(Integer, ForeignKey("project_phases.id"), nullable=True)
    repair_id = Column(Integer, ForeignKey("repairs.id"), nullable=True, index=True)
    maintenance_order_id = Column(
        Integer, ForeignKey("maintenance_orders.id"), nullable=True, index=True
    )
    checklist = Column(JSON, nullable=True)  # [{"text": ..., "completed": bool}]
    location = Column(Text, nullable=True)
    estimated_duration = Column(Integer, nullable=True)  # minutes
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    technician = relationship("Technician")
    client = relationship("Client")
    project = relationship("Project")
    project_phase = relationship("ProjectPhase")
    repair = relationship("Repair")
    maintenance_order = relationship("MaintenanceOrder", back_populates="work_orders")

    notes_list = relationship(
        "WorkOrderNote", back_populates="work_order", cascade="all, delete-orphan"
    )
    audit_logs = relationship(
        "WorkOrderAuditLog", back_populates="work_order", cascade="all, delete-orphan"
    )
    items = relationship("WorkOrderItem", back_populates="work_order", cascade="all, delete-orphan")
    time_entries = relationship(
        "WorkOrderTimeEntry", back_populates="work_order", cascade="all, delete-orphan"
    )
    team_members = relationship(
        "WorkOrderTeamMember", back_populates="work_order", cascade="all, delete-orphan"
    )


class WorkOrderNote(Base):
    __tablename__ = "work_order_notes"

    id = Column(Integer, primary_key=True, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    work_order = relationship("WorkOrder", back_populates="notes_list")
    user = relationship("User")


class WorkOrderAuditLog(Base):
    __tablename__ = "work_order_audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    action = Column(String(50), nullable=False)  # created, updated, status_changed, assigned, ...
    description = Column(Text, nullable=False)
    field_name = Column(String(100), nullable=True)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    work_order = relationship("WorkOrder", back_populates="audit_logs")
    user = relationship("User")


class WorkOrderItem(Base):
    """Part or labor line on a work order"""

    __tablename__ = "work_order_items"

    id = Column(Integer, primary_key=True, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id"), nullable=False, index=True)
    item_type = Column(String(20), default="part", nullable=False)  # part, labor
    description = Column(String(500), nullable=False)
    quantity = Column(Float, default=1, nullable=False)
    unit_price = Column(Integer, default=0, nullable=False)  # cents
    total_price = Column(Integer, default=0, nullable=False)  # cents
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    work_order = relationship("WorkOrder", back_populates="items")


class WorkOrderTimeEntry(Base):
    __tablename__ = "work_order_time_entries"

    id = Column(Integer, primary_key=True, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    clock_in = Column(DateTime, nullable=False)
    clock_out = Column(DateTime, nullable=True)
    break_minutes = Column(Integer, default=0, nullable=False)
    duration = Column(Integer, nullable=True)  # minutes, net of breaks
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    work_order = relationship("WorkOrder", back_populates="time_entries")
    user = relationship("User")


class WorkOrderTeamMember(Base):
    __tablename__ = "work_order_team_members"

    id = Column(Integer, primary_key=True, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    role = Column(String(100), default="helper", nullable=False)  # lead, helper, ...
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    work_order = relationship("WorkOrder", back_populates="team_members")
    user = relationship("User")
