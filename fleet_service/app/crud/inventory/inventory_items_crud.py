import logging
from typing import List
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.schemas import Lookup
from ...core.errors import NotFound, ValidationError
from ...enum.inventory_enum import InventoryCategory, InventoryUnit, StockStatus
from ...models.garage.work_orders import WorkOrder, WorkOrderPart
from ...models.inventory.inventory_items import InventoryItem
from ...models.procurement.purchase_orders import PurchaseOrder, PurchaseOrderLine
from ...schemas.inventory.inventory_items_schemas import (
    InventoryItemCreate,
    InventoryItemListResponse,
    InventoryItemOut,
    InventoryItemRequest,
    InventoryItemUpdate,
)
from .inventory_ledger import item_locks

logger = logging.getLogger(__name__)

OPEN_WORK_ORDER_STATUSES = ("pending", "in_progress", "on_hold")


# ---------------- Build Filters ----------------
def build_inventory_items_filters(params: InventoryItemRequest):
    filters = [InventoryItem.is_deleted == False]

    if params.category and params.category.lower() != "all":
        filters.append(func.lower(InventoryItem.category) == params.category.lower())

    if params.terminal and params.terminal.lower() != "all":
        filters.append(func.lower(InventoryItem.terminal) == params.terminal.lower())

    if params.stock_status and params.stock_status.lower() != "all":
        status = params.stock_status.lower()
        if status == StockStatus.out_of_stock.value:
            filters.append(InventoryItem.quantity == 0)
        elif status == StockStatus.low_stock.value:
            filters.append(InventoryItem.quantity > 0)
            filters.append(InventoryItem.quantity <= InventoryItem.min_quantity)
        elif status == StockStatus.in_stock.value:
            filters.append(InventoryItem.quantity > InventoryItem.min_quantity)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(InventoryItem.name.ilike(search_term),
                           InventoryItem.sku.ilike(search_term)))

    return filters


# ---------------- Get All ----------------
def get_inventory_items(db: Session, params: InventoryItemRequest) -> InventoryItemListResponse:
    base_query = db.query(InventoryItem).filter(*build_inventory_items_filters(params))
    total = base_query.with_entities(func.count(InventoryItem.id)).scalar()

    items = (
        base_query
        .order_by(InventoryItem.sku.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return InventoryItemListResponse(
        items=[InventoryItemOut.model_validate(item) for item in items],
        total=total,
    )


def get_inventory_item_by_id(db: Session, item_id: UUID) -> InventoryItem:
    item = db.query(InventoryItem).filter(
        InventoryItem.id == item_id,
        InventoryItem.is_deleted == False
    ).first()
    if not item:
        raise NotFound("Inventory item", item_id)
    return item


def get_inventory_items_by_ids(db: Session, item_ids: List[UUID]) -> dict:
    """Active items keyed by id; raises NotFound for the first unknown id."""
    rows = db.query(InventoryItem).filter(
        InventoryItem.id.in_(item_ids),
        InventoryItem.is_deleted == False
    ).all()
    items = {row.id: row for row in rows}
    for item_id in item_ids:
        if item_id not in items:
            raise NotFound("Inventory item", item_id)
    return items


# ---------------- Create ----------------
def create_inventory_item(db: Session, payload: InventoryItemCreate) -> InventoryItem:
    exists = db.query(InventoryItem.id).filter(
        func.upper(InventoryItem.sku) == payload.sku).first()
    if exists:
        raise ValidationError(f"Inventory item with SKU '{payload.sku}' already exists")

    item = InventoryItem(**payload.model_dump(mode="json", exclude={"unit_cost"}))
    item.unit_cost = payload.unit_cost
    item.seed_quantity = payload.quantity
    item.refresh_total_value()
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info("Inventory item %s created with quantity %d", item.sku, item.quantity)
    return item


# ---------------- Update ----------------
def update_inventory_item(db: Session, item_id: UUID, payload: InventoryItemUpdate) -> InventoryItem:
    with item_locks([item_id]):
        item = get_inventory_item_by_id(db, item_id)
        for key, value in payload.model_dump(exclude_unset=True, exclude_none=True, mode="json").items():
            if key == "unit_cost":
                value = payload.unit_cost
            setattr(item, key, value)
        item.refresh_total_value()
        db.commit()
    db.refresh(item)
    return item


# ---------------- Soft Delete ----------------
def delete_inventory_item(db: Session, item_id: UUID) -> None:
    item = get_inventory_item_by_id(db, item_id)

    open_work_orders = (
        db.query(func.count(WorkOrder.id))
        .join(WorkOrderPart, WorkOrderPart.work_order_id == WorkOrder.id)
        .filter(WorkOrderPart.item_id == item_id,
                WorkOrder.status.in_(OPEN_WORK_ORDER_STATUSES))
        .scalar()
    )
    pending_orders = (
        db.query(func.count(PurchaseOrder.id))
        .join(PurchaseOrderLine, PurchaseOrderLine.po_id == PurchaseOrder.id)
        .filter(PurchaseOrderLine.item_id == item_id,
                PurchaseOrder.status == "pending")
        .scalar()
    )
    if open_work_orders or pending_orders:
        raise ValidationError(
            f"Inventory item {item.sku} is referenced by open work orders or pending purchase orders",
            data={"open_work_orders": open_work_orders, "pending_purchase_orders": pending_orders},
        )

    item.is_deleted = True
    item.deleted_at = func.now()
    db.commit()
    logger.info("Inventory item %s deleted", item.sku)


# ---------------- Lookups ----------------
def inventory_category_lookup():
    return [Lookup(id=category.value, name=category.value) for category in InventoryCategory]


def inventory_unit_lookup():
    return [Lookup(id=unit.value, name=unit.name.capitalize()) for unit in InventoryUnit]
