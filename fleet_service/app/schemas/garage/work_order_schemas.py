from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from shared.core.schemas import CommonQueryParams
from ...enum.maintenance_enum import Priority, Terminal, WorkOrderStatus, WorkType
from ..inventory.stock_movements_schemas import PartLineIn, PartLineOut


# ---------------- Overview Response ----------------
class WorkOrderOverviewResponse(BaseModel):
    total: int
    pending: int
    in_progress: int
    on_hold: int
    completed: int
    cancelled: int
    parts_cost: Decimal


class WorkOrderRequest(CommonQueryParams):
    status: Optional[str] = None
    priority: Optional[str] = None
    work_type: Optional[str] = None
    terminal: Optional[str] = None
    vehicle_ref: Optional[str] = None


class WorkOrderCreate(BaseModel):
    vehicle_ref: str = Field(..., min_length=1)
    work_type: WorkType = WorkType.repair
    priority: Priority = Priority.medium
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=1000)
    scheduled_date: date
    terminal: Terminal
    parts_used: List[PartLineIn] = []
    labor_cost: Decimal = Field(Decimal(0), ge=0)
    notes: Optional[str] = None
    maintenance_schedule_id: Optional[UUID] = None


class WorkOrderStatusUpdate(BaseModel):
    status: WorkOrderStatus
    work_performed: Optional[str] = Field(None, max_length=1000)
    actual_duration: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class WorkOrderOut(BaseModel):
    id: UUID
    work_order_number: str
    vehicle_ref: str
    maintenance_schedule_id: Optional[UUID] = None
    work_type: str
    priority: str
    status: str
    title: str
    description: str
    terminal: str
    scheduled_date: date
    start_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    actual_duration: Optional[Decimal] = None
    work_performed: Optional[str] = None
    notes: Optional[str] = None
    parts_used: List[PartLineOut] = []
    labor_cost: Decimal
    parts_cost: Decimal
    total_cost: Decimal
    age_days: int
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class WorkOrderListResponse(BaseModel):
    work_orders: List[WorkOrderOut]
    total: int

    model_config = {"from_attributes": True}
