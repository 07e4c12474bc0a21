from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from pydantic import BaseModel, Field
from typing import List, Optional
from shared.core.schemas import CommonQueryParams
from ...enum.maintenance_enum import MaintenanceFrequency, MaintenanceType, Priority, ScheduleStatus, Terminal
from ..inventory.stock_movements_schemas import PartLineIn, PartLineOut


class MaintenanceScheduleCreate(BaseModel):
    vehicle_ref: str = Field(..., min_length=1)
    maintenance_type: MaintenanceType = MaintenanceType.general_inspection
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    frequency: MaintenanceFrequency = MaintenanceFrequency.monthly
    interval: int = Field(1, ge=1)
    next_due: date
    priority: Priority = Priority.medium
    terminal: Terminal
    required_parts: List[PartLineIn] = []
    reminder_days: Optional[int] = Field(None, ge=0)
    max_occurrences: Optional[int] = Field(None, ge=1)


class MaintenanceScheduleStatusUpdate(BaseModel):
    status: ScheduleStatus
    # only used when status is "completed"
    next_due: Optional[date] = None
    completed_date: Optional[date] = None


class MaintenanceScheduleComplete(BaseModel):
    next_due: Optional[date] = None
    completed_date: Optional[date] = None


class MaintenanceScheduleOut(BaseModel):
    id: UUID
    vehicle_ref: str
    maintenance_type: str
    title: str
    description: Optional[str] = None
    frequency: str
    interval: int
    priority: str
    terminal: str
    next_due: date
    last_performed: Optional[date] = None
    status: str
    days_until_due: int = 0
    is_due_soon: bool = False
    reminder_days: int
    completed_count: int
    max_occurrences: Optional[int] = None
    required_parts: List[PartLineOut] = []
    estimated_cost: Decimal
    actual_cost: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MaintenanceScheduleRequest(CommonQueryParams):
    status: Optional[str] = None
    frequency: Optional[str] = None
    maintenance_type: Optional[str] = None
    vehicle_ref: Optional[str] = None
    terminal: Optional[str] = None


class MaintenanceScheduleListResponse(BaseModel):
    schedules: List[MaintenanceScheduleOut]
    total: int

    model_config = {"from_attributes": True}


class MaintenanceScheduleOverviewResponse(BaseModel):
    total: int
    overdue: int
    due_soon: int
    due_this_week: int
    in_progress: int
    completed: int
