from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from shared.core.auth import validate_current_token
from shared.core.database import get_fleet_db as get_db
from shared.core.schemas import JsonOutResult, Lookup, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...enum.procurement_enum import PurchaseOrderStatus
from ...schemas.procurement.purchase_orders_schemas import (
    PurchaseOrderCreate,
    PurchaseOrderListResponse,
    PurchaseOrderOut,
    PurchaseOrderOverviewResponse,
    PurchaseOrderRequest,
    PurchaseOrderStatusUpdate,
)
from ...crud.procurement import purchase_orders_crud as crud

router = APIRouter(
    prefix="/api/purchase-orders",
    tags=["Purchase Orders"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("", response_model=JsonOutResult[PurchaseOrderListResponse])
def get_purchase_orders(
        params: PurchaseOrderRequest = Depends(),
        db: Session = Depends(get_db)):
    return success_response(crud.get_purchase_orders(db, params))


@router.get("/overview", response_model=JsonOutResult[PurchaseOrderOverviewResponse])
def get_purchase_orders_overview(
        params: PurchaseOrderRequest = Depends(),
        db: Session = Depends(get_db)):
    return success_response(crud.get_purchase_orders_overview(db, params))


@router.get("/status-lookup", response_model=JsonOutResult[List[Lookup]])
def purchase_order_status_lookup():
    return success_response(crud.purchase_order_status_lookup())


@router.get("/{po_id}", response_model=JsonOutResult[PurchaseOrderOut])
def get_purchase_order(po_id: UUID, db: Session = Depends(get_db)):
    po = crud.get_purchase_order_by_id(db, po_id)
    return success_response(PurchaseOrderOut.model_validate(po))


@router.post("", response_model=JsonOutResult[PurchaseOrderOut], status_code=201)
def create_purchase_order(
        po: PurchaseOrderCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return success_response(crud.create_purchase_order(db, po, current_user),
                            "Purchase order created successfully",
                            AppStatusCode.CREATED_SUCCESSFULLY)


@router.patch("/{po_id}", response_model=JsonOutResult[PurchaseOrderOut])
def update_purchase_order_status(
        po_id: UUID,
        payload: PurchaseOrderStatusUpdate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    if payload.status == PurchaseOrderStatus.received.value:
        result = crud.receive_purchase_order(db, po_id, current_user)
        message = "Purchase order received"
    else:
        result = crud.cancel_purchase_order(db, po_id)
        message = "Purchase order cancelled"
    return success_response(result, message, AppStatusCode.UPDATED_SUCCESSFULLY)


@router.delete("/{po_id}", response_model=JsonOutResult[None])
def delete_purchase_order(po_id: UUID, db: Session = Depends(get_db)):
    crud.delete_purchase_order(db, po_id)
    return success_response(None, "Purchase order deleted successfully",
                            AppStatusCode.DELETED_SUCCESSFULLY)
