from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from shared.core.schemas import CommonQueryParams
from ...enum.maintenance_enum import Terminal


class PurchaseOrderLineIn(BaseModel):
    item_id: UUID
    quantity: int = Field(..., gt=0)
    # falls back to the item's current unit cost
    unit_cost: Optional[Decimal] = Field(None, ge=0)


class PurchaseOrderLineOut(BaseModel):
    item_id: UUID
    item_name_snapshot: str
    quantity: int
    unit_cost_snapshot: Decimal
    total_cost: Decimal
    received_quantity: int

    model_config = {"from_attributes": True}


class PurchaseOrderCreate(BaseModel):
    supplier_ref: str = Field(..., min_length=1)
    items: List[PurchaseOrderLineIn] = Field(..., min_length=1)
    expected_delivery: date
    order_date: Optional[date] = None
    terminal: Terminal
    tax_amount: Decimal = Field(Decimal(0), ge=0)
    shipping_amount: Decimal = Field(Decimal(0), ge=0)
    notes: Optional[str] = Field(None, max_length=1000)


class PurchaseOrderStatusUpdate(BaseModel):
    status: Literal["received", "cancelled"]


class PurchaseOrderOut(BaseModel):
    id: UUID
    order_number: str
    supplier_ref: str
    status: str
    terminal: str
    order_date: date
    expected_delivery: date
    actual_delivery: Optional[date] = None
    days_until_delivery: Optional[int] = None
    items: List[PurchaseOrderLineOut] = []
    total_amount: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    grand_total: Decimal
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PurchaseOrderRequest(CommonQueryParams):
    status: Optional[str] = None
    supplier_ref: Optional[str] = None
    terminal: Optional[str] = None


class PurchaseOrderListResponse(BaseModel):
    purchase_orders: List[PurchaseOrderOut]
    total: int

    model_config = {"from_attributes": True}


# ---------------- Overview Response ----------------
class MonthlyPurchaseSummary(BaseModel):
    year: int
    month: int
    count: int
    total_value: Decimal


class PurchaseOrderOverviewResponse(BaseModel):
    total_orders: int
    total_value: Decimal
    average_order_value: Decimal
    pending_orders: int
    received_orders: int
    cancelled_orders: int
    monthly: List[MonthlyPurchaseSummary] = []
