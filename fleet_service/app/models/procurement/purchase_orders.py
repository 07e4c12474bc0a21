# app/models/procurement/purchase_orders.py
import uuid
from datetime import date
from decimal import Decimal
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base
from ..inventory.part_lines import PartLineMixin


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    supplier_ref = Column(String(64), nullable=False)
    status = Column(String(16), nullable=False, default="pending", index=True)
    terminal = Column(String(16), nullable=False)
    order_date = Column(Date, nullable=False, default=date.today)
    expected_delivery = Column(Date, nullable=False)
    actual_delivery = Column(Date, nullable=True)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    shipping_amount = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    created_by = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    items = relationship("PurchaseOrderLine", back_populates="po",
                         cascade="all, delete-orphan")

    @property
    def total_amount(self) -> Decimal:
        return sum((line.total_cost for line in self.items), Decimal(0))

    @property
    def grand_total(self) -> Decimal:
        return self.total_amount + Decimal(self.tax_amount or 0) + Decimal(self.shipping_amount or 0)

    @property
    def days_until_delivery(self):
        if self.status != "pending" or not self.expected_delivery:
            return None
        return (self.expected_delivery - date.today()).days


class PurchaseOrderLine(PartLineMixin, Base):
    __tablename__ = "purchase_order_lines"

    po_id = Column(Uuid(as_uuid=True), ForeignKey(
        "purchase_orders.id", ondelete="CASCADE"), nullable=False)
    received_quantity = Column(Integer, nullable=False, default=0)

    po = relationship("PurchaseOrder", back_populates="items")
