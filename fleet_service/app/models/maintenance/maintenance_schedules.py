# app/models/maintenance/maintenance_schedules.py
import uuid
from decimal import Decimal
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base
from ..inventory.part_lines import PartLineMixin


class MaintenanceSchedule(Base):
    __tablename__ = "maintenance_schedules"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vehicle_ref = Column(String(64), nullable=False, index=True)
    maintenance_type = Column(String(32), nullable=False, default="general_inspection")
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    frequency = Column(String(24), nullable=False, default="monthly")
    interval = Column(Integer, nullable=False, default=1)
    priority = Column(String(16), nullable=False, default="medium")
    terminal = Column(String(16), nullable=False)

    next_due = Column(Date, nullable=False, index=True)
    last_performed = Column(Date, nullable=True)
    # explicit states only: scheduled / in_progress / completed / cancelled
    status = Column(String(24), nullable=False, default="scheduled")

    reminder_days = Column(Integer, nullable=False, default=7)
    completed_count = Column(Integer, nullable=False, default=0)
    max_occurrences = Column(Integer, nullable=True)  # None -> recurs forever
    actual_cost = Column(Numeric(12, 2), nullable=False, default=0)

    created_by = Column(String(64), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    required_parts = relationship("MaintenanceSchedulePart", back_populates="schedule",
                                  cascade="all, delete-orphan")

    @property
    def estimated_cost(self) -> Decimal:
        return sum((p.total_cost for p in self.required_parts), Decimal(0))


class MaintenanceSchedulePart(PartLineMixin, Base):
    __tablename__ = "maintenance_schedule_parts"

    schedule_id = Column(Uuid(as_uuid=True), ForeignKey(
        "maintenance_schedules.id", ondelete="CASCADE"), nullable=False)

    schedule = relationship("MaintenanceSchedule", back_populates="required_parts")
