from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from shared.core.auth import validate_current_token
from shared.core.database import get_fleet_db as get_db
from shared.core.schemas import JsonOutResult, Lookup
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...schemas.inventory.inventory_items_schemas import (
    InventoryItemCreate,
    InventoryItemListResponse,
    InventoryItemOut,
    InventoryItemRequest,
    InventoryItemUpdate,
    ReconciliationOut,
)
from ...crud.inventory import inventory_items_crud as crud
from ...crud.inventory.inventory_ledger import reconcile

router = APIRouter(
    prefix="/api/inventory-items",
    tags=["Inventory Items"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("", response_model=JsonOutResult[InventoryItemListResponse])
def get_inventory_items(
        params: InventoryItemRequest = Depends(),
        db: Session = Depends(get_db)):
    return success_response(crud.get_inventory_items(db, params))


# Keep static routes above the parameterized ones
@router.get("/category-lookup", response_model=JsonOutResult[List[Lookup]])
def inventory_category_lookup():
    return success_response(crud.inventory_category_lookup())


@router.get("/unit-lookup", response_model=JsonOutResult[List[Lookup]])
def inventory_unit_lookup():
    return success_response(crud.inventory_unit_lookup())


@router.get("/{item_id}", response_model=JsonOutResult[InventoryItemOut])
def get_inventory_item(item_id: UUID, db: Session = Depends(get_db)):
    item = crud.get_inventory_item_by_id(db, item_id)
    return success_response(InventoryItemOut.model_validate(item))


@router.get("/{item_id}/reconciliation", response_model=JsonOutResult[ReconciliationOut])
def get_item_reconciliation(item_id: UUID, db: Session = Depends(get_db)):
    return success_response(reconcile(db, item_id))


@router.post("", response_model=JsonOutResult[InventoryItemOut], status_code=201)
def create_inventory_item(
        item: InventoryItemCreate,
        db: Session = Depends(get_db)):
    db_item = crud.create_inventory_item(db, item)
    return success_response(InventoryItemOut.model_validate(db_item),
                            "Inventory item created successfully",
                            AppStatusCode.CREATED_SUCCESSFULLY)


@router.patch("/{item_id}", response_model=JsonOutResult[InventoryItemOut])
def update_inventory_item(
        item_id: UUID,
        item: InventoryItemUpdate,
        db: Session = Depends(get_db)):
    db_item = crud.update_inventory_item(db, item_id, item)
    return success_response(InventoryItemOut.model_validate(db_item),
                            "Inventory item updated successfully",
                            AppStatusCode.UPDATED_SUCCESSFULLY)


# ---------------- Delete Inventory Item (Soft Delete) ----------------
@router.delete("/{item_id}", response_model=JsonOutResult[None])
def delete_inventory_item(item_id: UUID, db: Session = Depends(get_db)):
    crud.delete_inventory_item(db, item_id)
    return success_response(None, "Inventory item deleted successfully",
                            AppStatusCode.DELETED_SUCCESSFULLY)
