from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from shared.core.auth import validate_current_token
from shared.core.database import get_fleet_db as get_db
from shared.core.schemas import JsonOutResult, UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...schemas.inventory.stock_movements_schemas import (
    LedgerResult,
    StockMovementCreate,
    StockMovementListResponse,
    StockMovementOut,
    StockMovementOverviewResponse,
    StockMovementRequest,
)
from ...crud.inventory import stock_movements_crud as crud
from ...crud.inventory.inventory_ledger import adjust_stock

router = APIRouter(
    prefix="/api/stock-movements",
    tags=["Stock Movements"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("", response_model=JsonOutResult[StockMovementListResponse])
def get_stock_movements(
        params: StockMovementRequest = Depends(),
        db: Session = Depends(get_db)):
    return success_response(crud.get_stock_movements(db, params))


@router.get("/overview", response_model=JsonOutResult[StockMovementOverviewResponse])
def get_stock_movements_overview(
        params: StockMovementRequest = Depends(),
        db: Session = Depends(get_db)):
    return success_response(crud.get_stock_movements_overview(db, params))


@router.get("/{movement_id}", response_model=JsonOutResult[StockMovementOut])
def get_stock_movement(movement_id: UUID, db: Session = Depends(get_db)):
    movement = crud.get_stock_movement_by_id(db, movement_id)
    return success_response(StockMovementOut.model_validate(movement))


# manual adjustments and losses go through the ledger like every other change
@router.post("", response_model=JsonOutResult[LedgerResult], status_code=201)
def create_stock_movement(
        movement: StockMovementCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    result = adjust_stock(db, movement, current_user)
    return success_response(result, "Stock movement recorded",
                            AppStatusCode.CREATED_SUCCESSFULLY)
