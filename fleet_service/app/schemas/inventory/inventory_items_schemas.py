from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from ...enum.inventory_enum import InventoryCategory, InventoryUnit
from ...enum.maintenance_enum import Terminal


class InventoryItemBase(BaseModel):
    sku: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)
    category: InventoryCategory = InventoryCategory.other
    unit: InventoryUnit = InventoryUnit.pieces
    terminal: Optional[Terminal] = None
    min_quantity: int = Field(0, ge=0)
    reorder_point: int = Field(0, ge=0)
    unit_cost: Decimal = Field(Decimal(0), ge=0)
    supplier_ref: Optional[str] = None

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, value: str) -> str:
        return value.strip().upper()


class InventoryItemCreate(InventoryItemBase):
    # opening balance, the reconciliation anchor
    quantity: int = Field(0, ge=0)


class InventoryItemUpdate(BaseModel):
    """Master-data fields only; quantity moves through the ledger."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[InventoryCategory] = None
    unit: Optional[InventoryUnit] = None
    terminal: Optional[Terminal] = None
    min_quantity: Optional[int] = Field(None, ge=0)
    reorder_point: Optional[int] = Field(None, ge=0)
    unit_cost: Optional[Decimal] = Field(None, ge=0)
    supplier_ref: Optional[str] = None


class InventoryItemOut(BaseModel):
    id: UUID
    sku: str
    name: str
    category: str
    unit: str
    terminal: Optional[str] = None
    quantity: int
    seed_quantity: int
    min_quantity: int
    reorder_point: int
    unit_cost: Decimal
    total_value: Decimal
    supplier_ref: Optional[str] = None
    stock_status: str
    stock_level_percentage: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class InventoryItemRequest(CommonQueryParams):
    category: Optional[str] = None
    stock_status: Optional[str] = None
    terminal: Optional[str] = None


class InventoryItemListResponse(BaseModel):
    items: List[InventoryItemOut]
    total: int

    model_config = {"from_attributes": True}


class ReconciliationOut(BaseModel):
    item_id: UUID
    sku: str
    seed_quantity: int
    movement_total: int
    quantity: int
    balanced: bool
