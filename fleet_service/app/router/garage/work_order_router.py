from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from shared.core.auth import validate_current_token
from shared.core.database import get_fleet_db as get_db
from shared.core.schemas import JsonOutResult, Lookup, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...schemas.garage.work_order_schemas import (
    WorkOrderCreate,
    WorkOrderListResponse,
    WorkOrderOut,
    WorkOrderOverviewResponse,
    WorkOrderRequest,
    WorkOrderStatusUpdate,
)
from ...crud.garage import work_order_crud as crud

router = APIRouter(
    prefix="/api/work-orders",
    tags=["Work Orders"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("", response_model=JsonOutResult[WorkOrderListResponse])
def get_work_orders(
        params: WorkOrderRequest = Depends(),
        db: Session = Depends(get_db)):
    return success_response(crud.get_work_orders(db, params))


# ---------------- Work Orders Overview ----------------
@router.get("/overview", response_model=JsonOutResult[WorkOrderOverviewResponse])
def overview(
        params: WorkOrderRequest = Depends(),
        db: Session = Depends(get_db)):
    return success_response(crud.get_work_orders_overview(db, params))


@router.get("/status-lookup", response_model=JsonOutResult[List[Lookup]])
def work_orders_status_lookup():
    return success_response(crud.work_orders_status_lookup())


@router.get("/priority-lookup", response_model=JsonOutResult[List[Lookup]])
def work_orders_priority_lookup():
    return success_response(crud.work_orders_priority_lookup())


@router.get("/work-type-lookup", response_model=JsonOutResult[List[Lookup]])
def work_orders_type_lookup():
    return success_response(crud.work_orders_type_lookup())


@router.get("/{work_order_id}", response_model=JsonOutResult[WorkOrderOut])
def get_work_order(work_order_id: UUID, db: Session = Depends(get_db)):
    work_order = crud.get_work_order_by_id(db, work_order_id)
    return success_response(WorkOrderOut.model_validate(work_order))


@router.post("", response_model=JsonOutResult[WorkOrderOut], status_code=201)
def create_work_order(
        work_order: WorkOrderCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return success_response(crud.create_work_order(db, work_order, current_user),
                            "Work order created successfully",
                            AppStatusCode.CREATED_SUCCESSFULLY)


@router.patch("/{work_order_id}", response_model=JsonOutResult[WorkOrderOut])
def update_work_order_status(
        work_order_id: UUID,
        payload: WorkOrderStatusUpdate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return success_response(crud.update_work_order_status(db, work_order_id, payload, current_user),
                            "Work order updated successfully",
                            AppStatusCode.UPDATED_SUCCESSFULLY)
