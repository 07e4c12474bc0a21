# app/models/inventory/inventory_items.py
import uuid
from decimal import Decimal
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Numeric, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base
from ...enum.inventory_enum import StockStatus


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    sku = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    category = Column(String(64), nullable=False, default="Other")
    unit = Column(String(16), nullable=False, default="pieces")
    terminal = Column(String(16), nullable=True)

    # only the inventory ledger writes quantity / total_value
    quantity = Column(Integer, nullable=False, default=0)
    seed_quantity = Column(Integer, nullable=False, default=0)
    min_quantity = Column(Integer, nullable=False, default=0)
    reorder_point = Column(Integer, nullable=False, default=0)
    unit_cost = Column(Numeric(12, 2), nullable=False, default=0)
    total_value = Column(Numeric(14, 2), nullable=False, default=0)
    supplier_ref = Column(String(64), nullable=True)

    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    movements = relationship("StockMovement", back_populates="item",
                             order_by="StockMovement.occurred_at")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="chk_inventory_quantity_non_negative"),
        CheckConstraint("unit_cost >= 0", name="chk_inventory_unit_cost_non_negative"),
    )

    def refresh_total_value(self):
        self.total_value = Decimal(self.quantity or 0) * Decimal(self.unit_cost or 0)

    @property
    def stock_status(self) -> str:
        if not self.quantity:
            return StockStatus.out_of_stock.value
        if self.quantity <= (self.min_quantity or 0):
            return StockStatus.low_stock.value
        return StockStatus.in_stock.value

    @property
    def stock_level_percentage(self) -> float:
        if not self.reorder_point:
            return 100.0
        return min(100.0, self.quantity / self.reorder_point * 100)
