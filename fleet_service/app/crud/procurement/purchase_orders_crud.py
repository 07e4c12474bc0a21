# app/crud/procurement/purchase_orders_crud.py
import logging
import threading
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Integer, cast, func, or_
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.schemas import Lookup, UserToken
from shared.helpers.lock_registry import LockRegistry
from ...core.errors import AlreadyReceived, InvalidStateTransition, NotFound, ResourceBusy
from ...enum.inventory_enum import MovementReason
from ...enum.procurement_enum import PurchaseOrderStatus
from ...models.procurement.purchase_orders import PurchaseOrder, PurchaseOrderLine
from ...schemas.procurement.purchase_orders_schemas import (
    MonthlyPurchaseSummary,
    PurchaseOrderCreate,
    PurchaseOrderListResponse,
    PurchaseOrderOut,
    PurchaseOrderOverviewResponse,
    PurchaseOrderRequest,
)
from ..inventory.inventory_items_crud import get_inventory_items_by_ids
from ..inventory.inventory_ledger import apply_deltas

logger = logging.getLogger(__name__)

_NUMBER_LOCK = threading.Lock()
_ORDER_LOCKS = LockRegistry(
    settings.LOCK_TIMEOUT_SECONDS,
    on_timeout=lambda po_id: ResourceBusy(f"Purchase order {po_id} is busy, try again"),
)


# numeric part of PO-NNNN; "PO-9999" sorts after "PO-10000" as text
_ORDER_SEQUENCE = cast(func.substr(PurchaseOrder.order_number, 4), Integer)


def generate_order_number(db: Session) -> str:
    # pending orders can be deleted, so continue from the highest number
    last = db.query(func.max(_ORDER_SEQUENCE)).scalar()
    return f"PO-{(last or 0) + 1:04d}"


# ---------------- Build Filters ----------------
def build_purchase_order_filters(params: PurchaseOrderRequest):
    filters = []

    if params.status and params.status.lower() != "all":
        filters.append(PurchaseOrder.status == params.status.lower())

    if params.supplier_ref:
        filters.append(PurchaseOrder.supplier_ref == params.supplier_ref)

    if params.terminal and params.terminal.lower() != "all":
        filters.append(func.lower(PurchaseOrder.terminal) == params.terminal.lower())

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(PurchaseOrder.order_number.ilike(search_term),
                           PurchaseOrder.supplier_ref.ilike(search_term)))

    return filters


# ---------------- Get All ----------------
def get_purchase_orders(db: Session, params: PurchaseOrderRequest) -> PurchaseOrderListResponse:
    base_query = db.query(PurchaseOrder).filter(*build_purchase_order_filters(params))
    total = base_query.with_entities(func.count(PurchaseOrder.id)).scalar()

    orders = (
        base_query
        .order_by(_ORDER_SEQUENCE.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return PurchaseOrderListResponse(
        purchase_orders=[PurchaseOrderOut.model_validate(po) for po in orders],
        total=total,
    )


def get_purchase_order_by_id(db: Session, po_id: UUID) -> PurchaseOrder:
    po = db.query(PurchaseOrder).filter(PurchaseOrder.id == po_id).first()
    if not po:
        raise NotFound("Purchase order", po_id)
    return po


# ---------------- Overview ----------------
MONTHLY_ORDER_LIMIT = 12


def get_purchase_orders_overview(db: Session, params: PurchaseOrderRequest) -> PurchaseOrderOverviewResponse:
    """Order counts per status; values cover every order that was not cancelled."""
    orders = db.query(PurchaseOrder).filter(*build_purchase_order_filters(params)).all()

    counts = defaultdict(int)
    monthly = defaultdict(lambda: [0, Decimal(0)])
    total_value = Decimal(0)
    for po in orders:
        counts[po.status] += 1
        if po.status == PurchaseOrderStatus.cancelled.value:
            continue
        total_value += po.total_amount
        bucket = monthly[(po.order_date.year, po.order_date.month)]
        bucket[0] += 1
        bucket[1] += po.total_amount

    valued = len(orders) - counts[PurchaseOrderStatus.cancelled.value]
    average = (total_value / valued).quantize(Decimal("0.01")) if valued else Decimal(0)

    return PurchaseOrderOverviewResponse(
        total_orders=len(orders),
        total_value=total_value,
        average_order_value=average,
        pending_orders=counts[PurchaseOrderStatus.pending.value],
        received_orders=counts[PurchaseOrderStatus.received.value],
        cancelled_orders=counts[PurchaseOrderStatus.cancelled.value],
        monthly=[
            MonthlyPurchaseSummary(year=year, month=month, count=count, total_value=value)
            for (year, month), (count, value) in sorted(monthly.items(), reverse=True)[:MONTHLY_ORDER_LIMIT]
        ],
    )


def purchase_order_status_lookup():
    return [Lookup(id=status.value, name=status.value.capitalize()) for status in PurchaseOrderStatus]


# ---------------- Create ----------------
def create_purchase_order(db: Session, payload: PurchaseOrderCreate,
                          current_user: Optional[UserToken] = None) -> PurchaseOrderOut:
    items = get_inventory_items_by_ids(db, [line.item_id for line in payload.items])

    with _NUMBER_LOCK:
        po = PurchaseOrder(
            order_number=generate_order_number(db),
            supplier_ref=payload.supplier_ref,
            status=PurchaseOrderStatus.pending.value,
            terminal=payload.terminal.value,
            order_date=payload.order_date or date.today(),
            expected_delivery=payload.expected_delivery,
            tax_amount=payload.tax_amount,
            shipping_amount=payload.shipping_amount,
            notes=payload.notes,
            created_by=current_user.user_id if current_user else None,
        )
        po.items = [
            PurchaseOrderLine(
                item_id=line.item_id,
                quantity=line.quantity,
                item_name_snapshot=items[line.item_id].name,
                unit_cost_snapshot=line.unit_cost if line.unit_cost is not None else items[line.item_id].unit_cost,
                received_quantity=0,
            )
            for line in payload.items
        ]
        db.add(po)
        db.commit()

    db.refresh(po)
    logger.info("Purchase order %s created for supplier %s (%d line(s))",
                po.order_number, po.supplier_ref, len(po.items))
    return PurchaseOrderOut.model_validate(po)


def _ensure_pending(po: PurchaseOrder, attempted: str):
    if po.status == PurchaseOrderStatus.received.value and attempted == PurchaseOrderStatus.received.value:
        logger.warning("Purchase order %s already received", po.order_number)
        raise AlreadyReceived(po.order_number)
    if po.status != PurchaseOrderStatus.pending.value:
        logger.warning("Purchase order %s: illegal transition %s -> %s",
                       po.order_number, po.status, attempted)
        raise InvalidStateTransition("purchase order", po.status, attempted)


# ---------------- Receive ----------------
def receive_purchase_order(db: Session, po_id: UUID,
                           current_user: Optional[UserToken] = None) -> PurchaseOrderOut:
    """Mark a pending order received and put every line into stock.

    A second receipt fails with AlreadyReceived and moves no stock.
    """
    with _ORDER_LOCKS.hold([po_id]):
        po = get_purchase_order_by_id(db, po_id)
        db.refresh(po)
        _ensure_pending(po, PurchaseOrderStatus.received.value)

        po.status = PurchaseOrderStatus.received.value
        po.actual_delivery = date.today()
        for line in po.items:
            line.received_quantity = line.quantity

        apply_deltas(
            db,
            [(line.item_id, line.quantity) for line in po.items],
            reason=MovementReason.purchase_receipt.value,
            reference=po.order_number,
            created_by=current_user.user_id if current_user else None,
            terminal=po.terminal,
        )

    db.refresh(po)
    logger.info("Purchase order %s received, %d line(s) stocked", po.order_number, len(po.items))
    return PurchaseOrderOut.model_validate(po)


# ---------------- Cancel ----------------
def cancel_purchase_order(db: Session, po_id: UUID) -> PurchaseOrderOut:
    with _ORDER_LOCKS.hold([po_id]):
        po = get_purchase_order_by_id(db, po_id)
        db.refresh(po)
        _ensure_pending(po, PurchaseOrderStatus.cancelled.value)
        po.status = PurchaseOrderStatus.cancelled.value
        db.commit()

    db.refresh(po)
    logger.info("Purchase order %s cancelled", po.order_number)
    return PurchaseOrderOut.model_validate(po)


# ---------------- Delete ----------------
def delete_purchase_order(db: Session, po_id: UUID) -> None:
    with _ORDER_LOCKS.hold([po_id]):
        po = get_purchase_order_by_id(db, po_id)
        db.refresh(po)
        if po.status != PurchaseOrderStatus.pending.value:
            raise InvalidStateTransition("purchase order", po.status, "deleted")
        order_number = po.order_number
        db.delete(po)
        db.commit()
    logger.info("Purchase order %s deleted", order_number)
