# app/models/garage/work_orders.py
import uuid
from datetime import date
from decimal import Decimal
from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base
from ..inventory.part_lines import PartLineMixin


class WorkOrder(Base):
    __tablename__ = "work_orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    work_order_number = Column(String(32), nullable=False, unique=True, index=True)
    vehicle_ref = Column(String(64), nullable=False, index=True)
    maintenance_schedule_id = Column(Uuid(as_uuid=True), ForeignKey(
        "maintenance_schedules.id", ondelete="SET NULL"), nullable=True)
    work_type = Column(String(24), nullable=False, default="repair")
    priority = Column(String(16), nullable=False, default="medium")
    status = Column(String(24), nullable=False, default="pending", index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    terminal = Column(String(16), nullable=False)

    scheduled_date = Column(Date, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    completed_date = Column(DateTime(timezone=True), nullable=True)
    actual_duration = Column(Numeric(8, 2), nullable=True)  # hours
    work_performed = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    labor_cost = Column(Numeric(12, 2), nullable=False, default=0)
    created_by = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    parts_used = relationship("WorkOrderPart", back_populates="work_order",
                              cascade="all, delete-orphan")

    @property
    def parts_cost(self) -> Decimal:
        return sum((p.total_cost for p in self.parts_used), Decimal(0))

    @property
    def total_cost(self) -> Decimal:
        return Decimal(self.labor_cost or 0) + self.parts_cost

    @property
    def age_days(self) -> int:
        if not self.created_at:
            return 0
        return (date.today() - self.created_at.date()).days


class WorkOrderPart(PartLineMixin, Base):
    __tablename__ = "work_order_parts"

    work_order_id = Column(Uuid(as_uuid=True), ForeignKey(
        "work_orders.id", ondelete="CASCADE"), nullable=False)

    work_order = relationship("WorkOrder", back_populates="parts_used")
