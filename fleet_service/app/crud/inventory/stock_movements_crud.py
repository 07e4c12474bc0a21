# app/crud/inventory/stock_movements_crud.py
from datetime import datetime, time, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import case, extract, func, or_
from sqlalchemy.orm import Session

from ...core.errors import NotFound, ValidationError
from ...enum.inventory_enum import MovementDirection
from ...models.inventory.inventory_items import InventoryItem
from ...models.inventory.stock_movements import StockMovement
from ...schemas.inventory.stock_movements_schemas import (
    MonthlyMovementSummary,
    MovementReasonSummary,
    StockMovementListResponse,
    StockMovementOut,
    StockMovementOverviewResponse,
    StockMovementRequest,
)


# ---------------- Record ----------------
def record_movement(
    db: Session,
    item: InventoryItem,
    delta: int,
    reason: str,
    reference: Optional[str],
    occurred_at: Optional[datetime] = None,
    created_by: Optional[str] = None,
    terminal: Optional[str] = None,
    notes: Optional[str] = None,
) -> UUID:
    """Append one movement for a change the ledger has already applied.

    ``item.quantity`` must already hold the post-change quantity. Movements are
    never updated or deleted afterwards.
    """
    if not delta:
        raise ValidationError("Stock movement delta must be non-zero")

    unit_cost = Decimal(item.unit_cost or 0)
    movement = StockMovement(
        item_id=item.id,
        item_name=item.name,
        delta=delta,
        reason=reason,
        reference=reference,
        occurred_at=occurred_at or datetime.now(timezone.utc),
        previous_quantity=item.quantity - delta,
        new_quantity=item.quantity,
        unit_cost=unit_cost,
        total_value=unit_cost * abs(delta),
        terminal=terminal or item.terminal,
        created_by=created_by,
        notes=notes,
    )
    db.add(movement)
    db.flush()
    return movement.id


# ---------------- Build Filters ----------------
def build_stock_movement_filters(params: StockMovementRequest):
    filters = []

    if params.item_id:
        filters.append(StockMovement.item_id == params.item_id)

    if params.reason and params.reason.lower() != "all":
        filters.append(StockMovement.reason == params.reason.lower())

    if params.reference:
        filters.append(StockMovement.reference == params.reference)

    if params.date_from:
        filters.append(StockMovement.occurred_at >= datetime.combine(params.date_from, time.min))

    if params.date_to:
        filters.append(StockMovement.occurred_at <= datetime.combine(params.date_to, time.max))

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(StockMovement.reference.ilike(search_term),
                           StockMovement.item_name.ilike(search_term),
                           StockMovement.notes.ilike(search_term)))

    return filters


# ---------------- Get All ----------------
def get_stock_movements(db: Session, params: StockMovementRequest) -> StockMovementListResponse:
    base_query = db.query(StockMovement).filter(*build_stock_movement_filters(params))
    total = base_query.with_entities(func.count(StockMovement.id)).scalar()

    movements = (
        base_query
        .order_by(StockMovement.occurred_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return StockMovementListResponse(
        movements=[StockMovementOut.model_validate(m) for m in movements],
        total=total,
    )


def get_stock_movement_by_id(db: Session, movement_id: UUID) -> StockMovement:
    movement = db.query(StockMovement).filter(StockMovement.id == movement_id).first()
    if not movement:
        raise NotFound("Stock movement", movement_id)
    return movement


def movement_total_for_item(db: Session, item_id: UUID) -> int:
    return db.query(func.coalesce(func.sum(StockMovement.delta), 0)).filter(
        StockMovement.item_id == item_id
    ).scalar()


# ---------------- Overview ----------------
MONTHLY_MOVEMENT_LIMIT = 24


def _monthly_totals(db: Session, filters, direction: MovementDirection):
    year = extract("year", StockMovement.occurred_at)
    month = extract("month", StockMovement.occurred_at)
    sign = StockMovement.delta > 0 if direction == MovementDirection.incoming else StockMovement.delta < 0

    rows = (
        db.query(year, month, func.count(StockMovement.id), func.sum(func.abs(StockMovement.delta)))
        .filter(*filters, sign)
        .group_by(year, month)
        .all()
    )
    return [
        MonthlyMovementSummary(year=int(y), month=int(m), direction=direction.value,
                               count=count, total_quantity=int(quantity))
        for y, m, count, quantity in rows
    ]


def get_stock_movements_overview(db: Session, params: StockMovementRequest) -> StockMovementOverviewResponse:
    """Quantities moved in and out, split per reason and per month."""
    filters = build_stock_movement_filters(params)

    total, total_in, total_out = (
        db.query(
            func.count(StockMovement.id),
            func.coalesce(func.sum(case((StockMovement.delta > 0, StockMovement.delta), else_=0)), 0),
            func.coalesce(func.sum(case((StockMovement.delta < 0, -StockMovement.delta), else_=0)), 0),
        )
        .filter(*filters)
        .one()
    )

    by_reason = (
        db.query(StockMovement.reason, func.count(StockMovement.id),
                 func.sum(func.abs(StockMovement.delta)))
        .filter(*filters)
        .group_by(StockMovement.reason)
        .order_by(StockMovement.reason)
        .all()
    )

    monthly = (_monthly_totals(db, filters, MovementDirection.incoming)
               + _monthly_totals(db, filters, MovementDirection.outgoing))
    monthly.sort(key=lambda row: (row.year, row.month), reverse=True)

    return StockMovementOverviewResponse(
        total_movements=total,
        total_in_quantity=int(total_in),
        total_out_quantity=int(total_out),
        net_quantity=int(total_in) - int(total_out),
        by_reason=[
            MovementReasonSummary(reason=reason, count=count, total_quantity=int(quantity))
            for reason, count, quantity in by_reason
        ],
        monthly=monthly[:MONTHLY_MOVEMENT_LIMIT],
    )
