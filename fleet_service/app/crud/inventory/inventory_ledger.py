# app/crud/inventory/inventory_ledger.py
import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.schemas import UserToken
from shared.helpers.lock_registry import LockRegistry
from ...core.errors import EngineError, InsufficientStock, NotFound, ResourceBusy, ValidationError
from ...enum.inventory_enum import MovementReason
from ...models.inventory.inventory_items import InventoryItem
from ...schemas.inventory.inventory_items_schemas import ReconciliationOut
from ...schemas.inventory.stock_movements_schemas import LedgerResult, StockMovementCreate
from .stock_movements_crud import movement_total_for_item, record_movement

logger = logging.getLogger(__name__)

ITEM_LOCKS = LockRegistry(
    settings.LOCK_TIMEOUT_SECONDS,
    on_timeout=lambda item_id: ResourceBusy(f"Inventory item {item_id} is busy, try again"),
)


def item_locks(item_ids: Iterable[UUID]):
    """Hold the lock of every item for the duration of a check-and-write."""
    return ITEM_LOCKS.hold(item_ids)


def _load_items_for_update(db: Session, item_ids: Sequence[UUID]) -> Dict[UUID, InventoryItem]:
    rows = (
        db.query(InventoryItem)
        .filter(InventoryItem.id.in_(item_ids), InventoryItem.is_deleted == False)
        .with_for_update()
        .populate_existing()
        .all()
    )
    items = {row.id: row for row in rows}
    for item_id in item_ids:
        if item_id not in items:
            raise NotFound("Inventory item", item_id)
    return items


def _normalize(deltas: Iterable[Tuple[UUID, int]]) -> List[Tuple[UUID, int]]:
    lines = []
    for item_id, delta in deltas:
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise ValidationError(f"Delta for item {item_id} must be a non-zero integer")
        lines.append((item_id, delta))
    return lines


# ---------------- Apply ----------------
def apply_deltas(
    db: Session,
    deltas: Iterable[Tuple[UUID, int]],
    reason: str,
    reference: Optional[str],
    created_by: Optional[str] = None,
    terminal: Optional[str] = None,
    notes: Optional[str] = None,
) -> List[LedgerResult]:
    """Apply signed quantity changes to one or more items as a single unit.

    Every line is checked before anything is written, with lines for the same
    item summed together. One movement is appended per line. Pending changes
    already in ``db`` (the owning work order, schedule or purchase order) are
    committed together with the stock changes, and rolled back with them when
    any line is rejected.
    """
    try:
        lines = _normalize(deltas)
        if not lines:
            raise ValidationError("At least one stock change is required")

        with item_locks(item_id for item_id, _ in lines) as ordered_ids:
            items = _load_items_for_update(db, ordered_ids)

            net: Dict[UUID, int] = OrderedDict()
            for item_id, delta in lines:
                net[item_id] = net.get(item_id, 0) + delta
            for item_id, change in net.items():
                item = items[item_id]
                if item.quantity + change < 0:
                    raise InsufficientStock(item.id, item.name, -change, item.quantity)

            results = []
            for item_id, delta in lines:
                item = items[item_id]
                item.quantity += delta
                item.refresh_total_value()
                movement_id = record_movement(
                    db, item, delta, reason, reference,
                    created_by=created_by, terminal=terminal, notes=notes,
                )
                results.append(LedgerResult(item_id=item.id, new_quantity=item.quantity,
                                            movement_id=movement_id))
            db.commit()
    except EngineError as exc:
        db.rollback()
        logger.warning("Stock change rejected (reason=%s, reference=%s): %s",
                       reason, reference, exc.message)
        raise
    except Exception:
        db.rollback()
        raise

    for result in results:
        logger.info("Stock changed: item %s now %d (reason=%s, reference=%s)",
                    result.item_id, result.new_quantity, reason, reference)
    return results


def apply_delta(
    db: Session,
    item_id: UUID,
    delta: int,
    reason: str,
    reference: Optional[str],
    created_by: Optional[str] = None,
    notes: Optional[str] = None,
) -> LedgerResult:
    return apply_deltas(db, [(item_id, delta)], reason, reference,
                        created_by=created_by, notes=notes)[0]


# ---------------- Reconcile ----------------
def reconcile(db: Session, item_id: UUID) -> ReconciliationOut:
    item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()
    if not item:
        raise NotFound("Inventory item", item_id)

    movement_total = movement_total_for_item(db, item_id)
    return ReconciliationOut(
        item_id=item.id,
        sku=item.sku,
        seed_quantity=item.seed_quantity,
        movement_total=movement_total,
        quantity=item.quantity,
        balanced=item.seed_quantity + movement_total == item.quantity,
    )


# ---------------- Manual Adjustment ----------------
MANUAL_REASONS = (MovementReason.manual_adjustment, MovementReason.loss)


def adjust_stock(db: Session, payload: StockMovementCreate,
                 current_user: Optional[UserToken] = None) -> LedgerResult:
    """Manual correction or loss write-off entered by staff.

    Maintenance consumption and purchase receipts only ever come from work
    orders, schedules and purchase orders.
    """
    if payload.reason not in MANUAL_REASONS:
        raise ValidationError(f"Stock movements with reason {payload.reason.value} "
                              f"cannot be entered manually")
    if payload.reason == MovementReason.loss and payload.delta > 0:
        raise ValidationError("A loss must reduce stock")

    return apply_delta(
        db, payload.item_id, payload.delta,
        reason=payload.reason.value,
        reference=payload.reference,
        created_by=current_user.user_id if current_user else None,
        notes=payload.notes,
    )
