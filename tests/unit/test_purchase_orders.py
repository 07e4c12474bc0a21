"""
Unit tests for purchase orders and stock receipt.
"""
import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from fleet_service.app.core.errors import AlreadyReceived, InvalidStateTransition, NotFound, ValidationError
from fleet_service.app.crud.garage.work_order_crud import create_work_order
from fleet_service.app.crud.inventory.inventory_items_crud import delete_inventory_item, get_inventory_item_by_id
from fleet_service.app.crud.inventory.inventory_ledger import reconcile
from fleet_service.app.crud.procurement.purchase_orders_crud import (
    cancel_purchase_order,
    create_purchase_order,
    delete_purchase_order,
    get_purchase_order_by_id,
    get_purchase_orders,
    get_purchase_orders_overview,
    receive_purchase_order,
)
from fleet_service.app.enum.maintenance_enum import Terminal
from fleet_service.app.models.inventory.stock_movements import StockMovement
from fleet_service.app.models.procurement.purchase_orders import PurchaseOrder
from fleet_service.app.schemas.garage.work_order_schemas import WorkOrderCreate
from fleet_service.app.schemas.inventory.stock_movements_schemas import PartLineIn
from fleet_service.app.schemas.procurement.purchase_orders_schemas import (
    PurchaseOrderCreate,
    PurchaseOrderLineIn,
    PurchaseOrderRequest,
)


def _purchase_order(*lines, **overrides):
    data = dict(
        supplier_ref="SUP-TOTAL",
        items=[PurchaseOrderLineIn(item_id=item_id, quantity=qty, unit_cost=cost)
               for item_id, qty, cost in lines],
        expected_delivery=date.today() + timedelta(days=14),
        terminal=Terminal.kigali,
    )
    data.update(overrides)
    return PurchaseOrderCreate(**data)


def _receipts(db, order_number):
    return db.query(StockMovement).filter(StockMovement.reference == order_number).all()


@pytest.mark.unit
class TestReceivePurchaseOrder:
    """Receiving moves every line into stock exactly once."""

    def test_receipt_after_consumption(self, db, oil_item, current_user):
        create_work_order(db, WorkOrderCreate(
            vehicle_ref="RAB-123C", title="Oil change", description="Oil change",
            scheduled_date=date.today(), terminal=Terminal.kigali,
            parts_used=[PartLineIn(item_id=oil_item.id, quantity=3)],
        ))
        po = create_purchase_order(db, _purchase_order((oil_item.id, 20, Decimal("20"))), current_user)
        assert po.status == "pending"
        assert po.total_amount == Decimal("400")

        received = receive_purchase_order(db, po.id, current_user)

        assert received.status == "received"
        assert received.actual_delivery == date.today()
        assert received.items[0].received_quantity == 20
        assert received.days_until_delivery is None
        assert get_inventory_item_by_id(db, oil_item.id).quantity == 27
        movement = _receipts(db, po.order_number)[0]
        assert movement.delta == 20
        assert movement.reason == "purchase_receipt"
        assert reconcile(db, oil_item.id).balanced is True

    def test_second_receipt_is_rejected_without_movement(self, db, oil_item):
        po = create_purchase_order(db, _purchase_order((oil_item.id, 20, None)))
        receive_purchase_order(db, po.id)

        with pytest.raises(AlreadyReceived):
            receive_purchase_order(db, po.id)

        assert len(_receipts(db, po.order_number)) == 1
        assert get_inventory_item_by_id(db, oil_item.id).quantity == 30

    def test_multi_line_receipt(self, db, oil_item, filter_item):
        po = create_purchase_order(db, _purchase_order((oil_item.id, 5, None), (filter_item.id, 10, None)))

        receive_purchase_order(db, po.id)

        assert get_inventory_item_by_id(db, oil_item.id).quantity == 15
        assert get_inventory_item_by_id(db, filter_item.id).quantity == 15
        assert len(_receipts(db, po.order_number)) == 2

    def test_cancelled_order_cannot_be_received(self, db, oil_item):
        po = create_purchase_order(db, _purchase_order((oil_item.id, 5, None)))
        cancelled = cancel_purchase_order(db, po.id)
        assert cancelled.status == "cancelled"

        with pytest.raises(InvalidStateTransition):
            receive_purchase_order(db, po.id)
        assert get_inventory_item_by_id(db, oil_item.id).quantity == 10

    def test_received_order_cannot_be_cancelled(self, db, oil_item):
        po = create_purchase_order(db, _purchase_order((oil_item.id, 5, None)))
        receive_purchase_order(db, po.id)

        with pytest.raises(InvalidStateTransition):
            cancel_purchase_order(db, po.id)


@pytest.mark.unit
class TestPurchaseOrderRecords:
    """Creation, totals, numbering and deletion."""

    def test_totals_and_cost_snapshot(self, db, oil_item, filter_item):
        po = create_purchase_order(db, _purchase_order(
            (oil_item.id, 2, Decimal("18.50")),
            (filter_item.id, 4, None),
            tax_amount=Decimal("10"),
            shipping_amount=Decimal("5.25"),
        ))

        assert po.items[0].unit_cost_snapshot == Decimal("18.50")
        assert po.items[1].unit_cost_snapshot == Decimal("8")
        assert po.items[0].item_name_snapshot == "Engine Oil 5L"
        assert po.total_amount == Decimal("69")
        assert po.grand_total == Decimal("84.25")
        assert po.days_until_delivery == 14
        assert all(line.received_quantity == 0 for line in po.items)

    def test_order_numbers(self, db, oil_item):
        first = create_purchase_order(db, _purchase_order((oil_item.id, 1, None)))
        second = create_purchase_order(db, _purchase_order((oil_item.id, 1, None)))
        delete_purchase_order(db, second.id)
        third = create_purchase_order(db, _purchase_order((oil_item.id, 1, None)))

        assert first.order_number == "PO-0001"
        assert second.order_number == "PO-0002"
        assert third.order_number == "PO-0002"

    def test_order_numbers_past_four_digits(self, db, oil_item):
        seeded = create_purchase_order(db, _purchase_order((oil_item.id, 1, None)))
        db.query(PurchaseOrder).filter(PurchaseOrder.id == seeded.id).update(
            {PurchaseOrder.order_number: "PO-9999"})
        db.commit()

        first = create_purchase_order(db, _purchase_order((oil_item.id, 1, None)))
        second = create_purchase_order(db, _purchase_order((oil_item.id, 1, None)))

        assert first.order_number == "PO-10000"
        assert second.order_number == "PO-10001"
        listing = get_purchase_orders(db, PurchaseOrderRequest())
        assert [po.order_number for po in listing.purchase_orders] == ["PO-10001", "PO-10000", "PO-9999"]

    def test_unknown_item_is_rejected(self, db):
        with pytest.raises(NotFound):
            create_purchase_order(db, _purchase_order((uuid.uuid4(), 1, None)))

    def test_only_pending_orders_can_be_deleted(self, db, oil_item):
        po = create_purchase_order(db, _purchase_order((oil_item.id, 1, None)))
        receive_purchase_order(db, po.id)

        with pytest.raises(InvalidStateTransition):
            delete_purchase_order(db, po.id)
        assert get_purchase_order_by_id(db, po.id).status == "received"

    def test_pending_order_blocks_item_delete(self, db, oil_item):
        create_purchase_order(db, _purchase_order((oil_item.id, 1, None)))

        with pytest.raises(ValidationError):
            delete_inventory_item(db, oil_item.id)

    def test_list_filters(self, db, oil_item):
        po = create_purchase_order(db, _purchase_order((oil_item.id, 1, None)))
        create_purchase_order(db, _purchase_order((oil_item.id, 1, None), supplier_ref="SUP-OTHER"))
        receive_purchase_order(db, po.id)

        assert get_purchase_orders(db, PurchaseOrderRequest(status="received")).total == 1
        assert get_purchase_orders(db, PurchaseOrderRequest(supplier_ref="SUP-OTHER")).total == 1
        assert get_purchase_orders(db, PurchaseOrderRequest()).total == 2


@pytest.mark.unit
class TestPurchaseOrderOverview:
    """Order counts and values."""

    def test_overview(self, db, oil_item, filter_item):
        received = create_purchase_order(db, _purchase_order((oil_item.id, 20, Decimal("20"))))
        create_purchase_order(db, _purchase_order((filter_item.id, 10, Decimal("8"))))
        cancelled = create_purchase_order(db, _purchase_order((oil_item.id, 5, Decimal("20"))))
        receive_purchase_order(db, received.id)
        cancel_purchase_order(db, cancelled.id)

        overview = get_purchase_orders_overview(db, PurchaseOrderRequest())

        assert overview.total_orders == 3
        assert overview.pending_orders == 1
        assert overview.received_orders == 1
        assert overview.cancelled_orders == 1
        assert overview.total_value == Decimal("480")
        assert overview.average_order_value == Decimal("240.00")
        assert len(overview.monthly) == 1
        month = overview.monthly[0]
        assert (month.year, month.month) == (date.today().year, date.today().month)
        assert month.count == 2
        assert month.total_value == Decimal("480")

    def test_monthly_buckets_newest_first(self, db, oil_item):
        create_purchase_order(db, _purchase_order((oil_item.id, 1, Decimal("10")),
                                                  order_date=date(2024, 1, 15)))
        create_purchase_order(db, _purchase_order((oil_item.id, 2, Decimal("10")),
                                                  order_date=date(2024, 3, 2)))

        overview = get_purchase_orders_overview(db, PurchaseOrderRequest())

        assert [(m.year, m.month, m.total_value) for m in overview.monthly] == [
            (2024, 3, Decimal("20")), (2024, 1, Decimal("10"))]

    def test_empty_overview(self, db):
        overview = get_purchase_orders_overview(db, PurchaseOrderRequest())

        assert overview.total_orders == 0
        assert overview.total_value == Decimal(0)
        assert overview.average_order_value == Decimal(0)
        assert overview.monthly == []
