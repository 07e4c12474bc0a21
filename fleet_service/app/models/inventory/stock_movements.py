# app/models/inventory/stock_movements.py
import uuid
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class StockMovement(Base):
    """Append-only audit record of one inventory quantity change."""
    __tablename__ = "stock_movements"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    item_id = Column(Uuid(as_uuid=True), ForeignKey(
        "inventory_items.id"), nullable=False, index=True)
    delta = Column(Integer, nullable=False)  # signed, never 0
    reason = Column(String(32), nullable=False, index=True)
    reference = Column(String(100), nullable=True, index=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False,
                         server_default=func.now())

    # point-in-time context
    item_name = Column(String(100), nullable=False)
    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    unit_cost = Column(Numeric(12, 2), nullable=True)
    total_value = Column(Numeric(14, 2), nullable=True)
    terminal = Column(String(16), nullable=True)
    created_by = Column(String(64), nullable=True)  # plain user id, no FK
    notes = Column(Text, nullable=True)

    item = relationship("InventoryItem", back_populates="movements")

    __table_args__ = (
        CheckConstraint("delta <> 0", name="chk_stock_movement_delta_non_zero"),
        Index("ix_stock_movements_item_occurred", item_id, occurred_at),
    )

    def __repr__(self):
        return f"<StockMovement {self.id}: {self.reason} {self.delta:+d} on item {self.item_id}>"
