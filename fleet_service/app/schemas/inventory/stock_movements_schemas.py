from pydantic import BaseModel, Field
from uuid import UUID
from typing import List, Optional
from decimal import Decimal
from datetime import date, datetime

from shared.core.schemas import CommonQueryParams
from ...enum.inventory_enum import MovementReason


class PartLineIn(BaseModel):
    item_id: UUID
    quantity: int = Field(..., gt=0)


class PartLineOut(BaseModel):
    item_id: UUID
    item_name_snapshot: str
    quantity: int
    unit_cost_snapshot: Decimal
    total_cost: Decimal

    model_config = {"from_attributes": True}


class StockMovementCreate(BaseModel):
    item_id: UUID
    delta: int
    reason: MovementReason = MovementReason.manual_adjustment
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class StockMovementOut(BaseModel):
    id: UUID
    item_id: UUID
    item_name: str
    delta: int
    reason: str
    reference: Optional[str] = None
    occurred_at: datetime
    previous_quantity: int
    new_quantity: int
    unit_cost: Optional[Decimal] = None
    total_value: Optional[Decimal] = None
    terminal: Optional[str] = None
    created_by: Optional[str] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class StockMovementRequest(CommonQueryParams):
    item_id: Optional[UUID] = None
    reason: Optional[str] = None
    reference: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class StockMovementListResponse(BaseModel):
    movements: List[StockMovementOut]
    total: int

    model_config = {"from_attributes": True}


class LedgerResult(BaseModel):
    item_id: UUID
    new_quantity: int
    movement_id: UUID


# ---------------- Overview Response ----------------
class MovementReasonSummary(BaseModel):
    reason: str
    count: int
    total_quantity: int


class MonthlyMovementSummary(BaseModel):
    year: int
    month: int
    direction: str
    count: int
    total_quantity: int


class StockMovementOverviewResponse(BaseModel):
    total_movements: int
    total_in_quantity: int
    total_out_quantity: int
    net_quantity: int
    by_reason: List[MovementReasonSummary] = []
    monthly: List[MonthlyMovementSummary] = []
