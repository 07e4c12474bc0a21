# app/models/inventory/part_lines.py
import uuid
from decimal import Decimal
from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import declared_attr


class PartLineMixin:
    """Quantity plus name/cost snapshot of one inventory item.

    Snapshots are taken when the owning record is created so later changes to
    the item's unit cost never rewrite historical costs.
    """

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quantity = Column(Integer, nullable=False)
    item_name_snapshot = Column(String(100), nullable=False)
    unit_cost_snapshot = Column(Numeric(12, 2), nullable=False, default=0)

    @declared_attr
    def item_id(cls):
        return Column(Uuid(as_uuid=True), ForeignKey("inventory_items.id"), nullable=False)

    @declared_attr
    def __table_args__(cls):
        return (
            CheckConstraint("quantity > 0", name=f"chk_{cls.__tablename__}_quantity_positive"),
        )

    @property
    def total_cost(self) -> Decimal:
        return Decimal(self.quantity or 0) * Decimal(self.unit_cost_snapshot or 0)
