# app/crud/garage/work_order_crud.py
import logging
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.schemas import Lookup, UserToken
from shared.helpers.lock_registry import LockRegistry
from ...core.errors import InvalidStateTransition, NotFound, ResourceBusy
from ...enum.inventory_enum import MovementReason
from ...enum.maintenance_enum import Priority, WorkOrderStatus, WorkType
from ...models.garage.work_orders import WorkOrder, WorkOrderPart
from ...schemas.garage.work_order_schemas import (
    WorkOrderCreate,
    WorkOrderListResponse,
    WorkOrderOut,
    WorkOrderOverviewResponse,
    WorkOrderRequest,
    WorkOrderStatusUpdate,
)
from ..inventory.inventory_items_crud import get_inventory_items_by_ids
from ..inventory.inventory_ledger import apply_deltas
from ..maintenance.maintenance_schedule_crud import get_schedule_by_id

logger = logging.getLogger(__name__)

# current status -> statuses it may move to; completed and cancelled are final
WORK_ORDER_TRANSITIONS = {
    WorkOrderStatus.pending.value: {
        WorkOrderStatus.in_progress.value,
        WorkOrderStatus.cancelled.value,
        WorkOrderStatus.on_hold.value,
    },
    WorkOrderStatus.in_progress.value: {
        WorkOrderStatus.completed.value,
        WorkOrderStatus.on_hold.value,
        WorkOrderStatus.cancelled.value,
    },
    WorkOrderStatus.on_hold.value: {
        WorkOrderStatus.in_progress.value,
        WorkOrderStatus.cancelled.value,
    },
}

_NUMBER_LOCK = threading.Lock()
_WORK_ORDER_LOCKS = LockRegistry(
    settings.LOCK_TIMEOUT_SECONDS,
    on_timeout=lambda work_order_id: ResourceBusy(f"Work order {work_order_id} is busy, try again"),
)


def _user_id(current_user: Optional[UserToken]) -> Optional[str]:
    return current_user.user_id if current_user else None


def generate_work_order_number(db: Session, now: Optional[datetime] = None) -> str:
    """WO-YYYYMM-NNN, NNN counting the work orders raised in that month."""
    now = now or datetime.now(timezone.utc)
    prefix = f"WO-{now:%Y%m}-"
    count = db.query(func.count(WorkOrder.id)).filter(
        WorkOrder.work_order_number.like(f"{prefix}%")).scalar()
    return f"{prefix}{count + 1:03d}"


# ---------------- Build Filters ----------------
def build_work_orders_filters(params: WorkOrderRequest):
    filters = []

    if params.status and params.status.lower() != "all":
        filters.append(WorkOrder.status == params.status.lower())

    if params.priority and params.priority.lower() != "all":
        filters.append(WorkOrder.priority == params.priority.lower())

    if params.work_type and params.work_type.lower() != "all":
        filters.append(WorkOrder.work_type == params.work_type.lower())

    if params.terminal and params.terminal.lower() != "all":
        filters.append(func.lower(WorkOrder.terminal) == params.terminal.lower())

    if params.vehicle_ref:
        filters.append(WorkOrder.vehicle_ref == params.vehicle_ref)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(WorkOrder.work_order_number.ilike(search_term),
                           WorkOrder.title.ilike(search_term)))

    return filters


# ---------------- Overview ----------------
def get_work_orders_overview(db: Session, params: WorkOrderRequest) -> WorkOrderOverviewResponse:
    filters = build_work_orders_filters(params)

    counts = dict(
        db.query(WorkOrder.status, func.count(WorkOrder.id))
        .filter(*filters)
        .group_by(WorkOrder.status)
        .all()
    )

    parts_cost = (
        db.query(func.coalesce(func.sum(WorkOrderPart.quantity * WorkOrderPart.unit_cost_snapshot), 0))
        .join(WorkOrder, WorkOrder.id == WorkOrderPart.work_order_id)
        .filter(*filters, WorkOrder.status != WorkOrderStatus.cancelled.value)
        .scalar()
    )

    return WorkOrderOverviewResponse(
        total=sum(counts.values()),
        pending=counts.get(WorkOrderStatus.pending.value, 0),
        in_progress=counts.get(WorkOrderStatus.in_progress.value, 0),
        on_hold=counts.get(WorkOrderStatus.on_hold.value, 0),
        completed=counts.get(WorkOrderStatus.completed.value, 0),
        cancelled=counts.get(WorkOrderStatus.cancelled.value, 0),
        parts_cost=Decimal(parts_cost),
    )


# ---------------- Lookups ----------------
def _enum_lookup(enum_cls):
    return [
        Lookup(id=kind.value, name=kind.value.replace("_", " ").capitalize())
        for kind in enum_cls
    ]


def work_orders_status_lookup():
    return _enum_lookup(WorkOrderStatus)


def work_orders_priority_lookup():
    return _enum_lookup(Priority)


def work_orders_type_lookup():
    return _enum_lookup(WorkType)


# ---------------- Get All ----------------
def get_work_orders(db: Session, params: WorkOrderRequest) -> WorkOrderListResponse:
    base_query = db.query(WorkOrder).filter(*build_work_orders_filters(params))
    total = base_query.with_entities(func.count(WorkOrder.id)).scalar()

    work_orders = (
        base_query
        .order_by(WorkOrder.created_at.desc(), WorkOrder.work_order_number.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return WorkOrderListResponse(
        work_orders=[WorkOrderOut.model_validate(wo) for wo in work_orders],
        total=total,
    )


def get_work_order_by_id(db: Session, work_order_id: UUID) -> WorkOrder:
    work_order = db.query(WorkOrder).filter(WorkOrder.id == work_order_id).first()
    if not work_order:
        raise NotFound("Work order", work_order_id)
    return work_order


# ---------------- Create ----------------
def create_work_order(db: Session, payload: WorkOrderCreate,
                      current_user: Optional[UserToken] = None) -> WorkOrderOut:
    """Create a pending work order and take its parts out of stock.

    Either every part line is consumed and the order is stored, or nothing
    is written at all.
    """
    if payload.maintenance_schedule_id:
        get_schedule_by_id(db, payload.maintenance_schedule_id)
    items = get_inventory_items_by_ids(db, [line.item_id for line in payload.parts_used])

    with _NUMBER_LOCK:
        work_order = WorkOrder(
            **payload.model_dump(mode="json", exclude={"parts_used", "labor_cost",
                                                       "scheduled_date", "maintenance_schedule_id"}),
            scheduled_date=payload.scheduled_date,
            maintenance_schedule_id=payload.maintenance_schedule_id,
            labor_cost=payload.labor_cost,
            work_order_number=generate_work_order_number(db),
            status=WorkOrderStatus.pending.value,
            created_by=_user_id(current_user),
        )
        work_order.parts_used = [
            WorkOrderPart(
                item_id=line.item_id,
                quantity=line.quantity,
                item_name_snapshot=items[line.item_id].name,
                unit_cost_snapshot=items[line.item_id].unit_cost,
            )
            for line in payload.parts_used
        ]
        db.add(work_order)

        if work_order.parts_used:
            apply_deltas(
                db,
                [(line.item_id, -line.quantity) for line in payload.parts_used],
                reason=MovementReason.maintenance.value,
                reference=work_order.work_order_number,
                created_by=_user_id(current_user),
                terminal=work_order.terminal,
            )
        else:
            db.commit()

    db.refresh(work_order)
    logger.info("Work order %s created for vehicle %s with %d part line(s)",
                work_order.work_order_number, work_order.vehicle_ref, len(work_order.parts_used))
    return WorkOrderOut.model_validate(work_order)


# ---------------- Status ----------------
def update_work_order_status(db: Session, work_order_id: UUID, payload: WorkOrderStatusUpdate,
                             current_user: Optional[UserToken] = None) -> WorkOrderOut:
    with _WORK_ORDER_LOCKS.hold([work_order_id]):
        work_order = get_work_order_by_id(db, work_order_id)
        db.refresh(work_order)
        current = work_order.status
        target = payload.status.value

        if target not in WORK_ORDER_TRANSITIONS.get(current, set()):
            logger.warning("Work order %s: illegal transition %s -> %s",
                           work_order.work_order_number, current, target)
            raise InvalidStateTransition("work order", current, target)

        now = datetime.now(timezone.utc)
        work_order.status = target
        if target == WorkOrderStatus.in_progress.value and not work_order.start_date:
            work_order.start_date = now
        if target == WorkOrderStatus.completed.value:
            work_order.completed_date = now
        if payload.work_performed is not None:
            work_order.work_performed = payload.work_performed
        if payload.actual_duration is not None:
            work_order.actual_duration = payload.actual_duration
        if payload.notes is not None:
            work_order.notes = payload.notes

        restock = bool(target == WorkOrderStatus.cancelled.value
                       and settings.RESTOCK_ON_CANCEL and work_order.parts_used)
        if restock:
            apply_deltas(
                db,
                [(part.item_id, part.quantity) for part in work_order.parts_used],
                reason=MovementReason.manual_adjustment.value,
                reference=work_order.work_order_number,
                created_by=_user_id(current_user),
                terminal=work_order.terminal,
                notes="Restocked on work order cancellation",
            )
        else:
            db.commit()

    db.refresh(work_order)
    logger.info("Work order %s: %s -> %s%s", work_order.work_order_number, current, target,
                " (parts restocked)" if restock else "")
    return WorkOrderOut.model_validate(work_order)
