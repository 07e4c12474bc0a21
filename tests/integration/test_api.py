"""
Integration tests for the REST surface, response envelope and error mapping.
"""
from datetime import date, timedelta

import pytest

from fleet_service.app.main import app
from shared.core.auth import create_access_token, validate_current_token
from shared.utils.app_status_code import AppStatusCode


def _create_item(client, sku="OIL-5L", quantity=10, unit_cost="20"):
    response = client.post("/api/inventory-items", json={
        "sku": sku,
        "name": "Engine Oil 5L",
        "category": "Lubricants",
        "unit": "liters",
        "quantity": quantity,
        "min_quantity": 2,
        "reorder_point": 20,
        "unit_cost": unit_cost,
    })
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _create_work_order(client, item_id, quantity):
    return client.post("/api/work-orders", json={
        "vehicle_ref": "RAB-123C",
        "work_type": "maintenance",
        "priority": "high",
        "title": "Oil change",
        "description": "Replace engine oil",
        "scheduled_date": date.today().isoformat(),
        "terminal": "Kigali",
        "parts_used": [{"item_id": item_id, "quantity": quantity}],
    })


@pytest.mark.integration
class TestHealthAndAuth:
    """Liveness and the bearer token boundary."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_missing_token_is_rejected(self, client):
        app.dependency_overrides.pop(validate_current_token, None)
        response = client.get("/api/work-orders")
        assert response.status_code in (401, 403)

    def test_valid_token_is_accepted(self, client):
        app.dependency_overrides.pop(validate_current_token, None)
        token = create_access_token({"sub": "user-9", "role": "manager", "terminal": "Kampala"})

        response = client.get("/api/work-orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["status"] == "Success"

    def test_garbage_token_is_rejected(self, client):
        app.dependency_overrides.pop(validate_current_token, None)
        response = client.get("/api/work-orders", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["status_code"] == AppStatusCode.AUTHENTICATION_TOKEN_INVALID


@pytest.mark.integration
class TestInventoryApi:
    """Seeding surface, movements and reconciliation."""

    def test_create_and_get_item(self, client):
        item = _create_item(client, sku="oil-5l")
        assert item["sku"] == "OIL-5L"
        assert item["stock_status"] == "in_stock"
        assert item["stock_level_percentage"] == 50.0

        response = client.get(f"/api/inventory-items/{item['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["quantity"] == 10

    def test_duplicate_sku(self, client):
        _create_item(client)
        response = client.post("/api/inventory-items", json={"sku": "OIL-5L", "name": "Dup"})

        assert response.status_code == 422
        assert response.json()["status"] == "Failure"

    def test_patch_cannot_change_quantity(self, client):
        item = _create_item(client)
        response = client.patch(f"/api/inventory-items/{item['id']}",
                                json={"unit_cost": "25", "quantity": 999})

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["quantity"] == 10
        assert float(data["total_value"]) == 250.0

    def test_manual_adjustment_and_audit_trail(self, client):
        item = _create_item(client)
        response = client.post("/api/stock-movements", json={
            "item_id": item["id"], "delta": -2, "reason": "loss", "reference": "SPILL-1"})
        assert response.status_code == 201
        assert response.json()["data"]["new_quantity"] == 8

        listing = client.get("/api/stock-movements", params={"item_id": item["id"]}).json()["data"]
        assert listing["total"] == 1
        movement = listing["movements"][0]
        assert movement["created_by"] == "user-1"

        single = client.get(f"/api/stock-movements/{movement['id']}")
        assert single.json()["data"]["delta"] == -2

        reconciliation = client.get(f"/api/inventory-items/{item['id']}/reconciliation").json()["data"]
        assert reconciliation == {
            "item_id": item["id"], "sku": "OIL-5L", "seed_quantity": 10,
            "movement_total": -2, "quantity": 8, "balanced": True,
        }

    def test_purchase_receipt_reason_is_refused(self, client):
        item = _create_item(client)
        response = client.post("/api/stock-movements", json={
            "item_id": item["id"], "delta": 5, "reason": "purchase_receipt"})

        assert response.status_code == 422
        assert response.json()["status_code"] == AppStatusCode.INVALID_INPUT

    def test_maintenance_reason_is_refused(self, client):
        item = _create_item(client)
        response = client.post("/api/stock-movements", json={
            "item_id": item["id"], "delta": -2, "reason": "maintenance", "reference": "WO-200101-001"})

        assert response.status_code == 422
        assert client.get(f"/api/inventory-items/{item['id']}").json()["data"]["quantity"] == 10

    def test_movement_overview(self, client):
        item = _create_item(client)
        client.post("/api/stock-movements", json={"item_id": item["id"], "delta": 4})
        client.post("/api/stock-movements", json={"item_id": item["id"], "delta": -1, "reason": "loss"})

        response = client.get("/api/stock-movements/overview")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_movements"] == 2
        assert data["total_in_quantity"] == 4
        assert data["total_out_quantity"] == 1
        assert data["net_quantity"] == 3

    def test_unknown_item_is_404(self, client):
        response = client.get("/api/inventory-items/6f1c8f5e-0000-4000-8000-000000000000")

        assert response.status_code == 404
        assert response.json()["status_code"] == AppStatusCode.NOT_FOUND


@pytest.mark.integration
class TestWorkOrderApi:
    """Work order scenario end to end."""

    def test_consumption_scenario(self, client):
        item = _create_item(client)

        first = _create_work_order(client, item["id"], 3)
        assert first.status_code == 201
        work_order = first.json()["data"]
        assert work_order["status"] == "pending"
        assert float(work_order["total_cost"]) == 60.0

        second = _create_work_order(client, item["id"], 8)
        body = second.json()
        assert second.status_code == 409
        assert body["status"] == "Failure"
        assert body["status_code"] == AppStatusCode.INSUFFICIENT_STOCK
        assert body["data"]["requested"] == 8
        assert body["data"]["available"] == 7

        stock = client.get(f"/api/inventory-items/{item['id']}").json()["data"]
        assert stock["quantity"] == 7

        listing = client.get("/api/work-orders").json()["data"]
        assert listing["total"] == 1

    def test_status_patch(self, client):
        item = _create_item(client)
        work_order = _create_work_order(client, item["id"], 1).json()["data"]

        started = client.patch(f"/api/work-orders/{work_order['id']}", json={"status": "in_progress"})
        assert started.status_code == 200
        assert started.json()["data"]["status"] == "in_progress"

        illegal = client.patch(f"/api/work-orders/{work_order['id']}", json={"status": "pending"})
        assert illegal.status_code == 409
        assert illegal.json()["data"] == {"current": "in_progress", "attempted": "pending"}

    def test_request_validation_uses_envelope(self, client):
        response = client.post("/api/work-orders", json={"vehicle_ref": "RAB-123C"})

        assert response.status_code == 422
        body = response.json()
        assert body["status"] == "Failure"
        assert body["message"] == "Validation failed"
        assert isinstance(body["data"], list)

    def test_overview_and_lookups(self, client):
        item = _create_item(client)
        _create_work_order(client, item["id"], 1)

        overview = client.get("/api/work-orders/overview").json()["data"]
        assert overview["total"] == 1
        assert overview["pending"] == 1

        lookup = client.get("/api/work-orders/work-type-lookup").json()["data"]
        assert {"id": "repair", "name": "Repair"} in lookup


@pytest.mark.integration
class TestMaintenanceScheduleApi:
    """Derived status on read and completion."""

    def _create(self, client, next_due, **extra):
        payload = {
            "vehicle_ref": "RAB-123C",
            "maintenance_type": "oil_change",
            "title": "Oil change",
            "frequency": "monthly",
            "interval": 1,
            "next_due": next_due.isoformat(),
            "terminal": "Kigali",
        }
        payload.update(extra)
        response = client.post("/api/maintenance-schedules", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    def test_derived_status_in_listing(self, client):
        self._create(client, date.today() - timedelta(days=1))
        self._create(client, date.today() + timedelta(days=10))

        listing = client.get("/api/maintenance-schedules").json()["data"]
        statuses = sorted(s["status"] for s in listing["schedules"])
        assert statuses == ["overdue", "scheduled"]

        overdue = client.get("/api/maintenance-schedules", params={"status": "overdue"}).json()["data"]
        assert overdue["total"] == 1
        assert overdue["schedules"][0]["days_until_due"] == -1

    def test_complete_endpoint(self, client):
        item = _create_item(client)
        schedule = self._create(client, date.today(),
                                required_parts=[{"item_id": item["id"], "quantity": 4}])

        response = client.post(f"/api/maintenance-schedules/{schedule['id']}/complete", json={})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["completed_count"] == 1
        assert data["status"] == "scheduled"
        stock = client.get(f"/api/inventory-items/{item['id']}").json()["data"]
        assert stock["quantity"] == 6

    def test_patch_overdue_is_refused(self, client):
        schedule = self._create(client, date.today())
        response = client.patch(f"/api/maintenance-schedules/{schedule['id']}", json={"status": "overdue"})

        assert response.status_code == 409
        assert response.json()["status_code"] == AppStatusCode.INVALID_STATE_TRANSITION


@pytest.mark.integration
class TestPurchaseOrderApi:
    """Receipt through PATCH and idempotency."""

    def test_receive_twice(self, client):
        item = _create_item(client, quantity=7)
        created = client.post("/api/purchase-orders", json={
            "supplier_ref": "SUP-TOTAL",
            "items": [{"item_id": item["id"], "quantity": 20, "unit_cost": "20"}],
            "expected_delivery": (date.today() + timedelta(days=7)).isoformat(),
            "terminal": "Kigali",
        })
        assert created.status_code == 201
        po = created.json()["data"]
        assert po["order_number"] == "PO-0001"
        assert float(po["total_amount"]) == 400.0

        received = client.patch(f"/api/purchase-orders/{po['id']}", json={"status": "received"})
        assert received.status_code == 200
        assert received.json()["data"]["status"] == "received"
        assert client.get(f"/api/inventory-items/{item['id']}").json()["data"]["quantity"] == 27

        again = client.patch(f"/api/purchase-orders/{po['id']}", json={"status": "received"})
        assert again.status_code == 409
        assert again.json()["status_code"] == AppStatusCode.ALREADY_RECEIVED
        assert client.get(f"/api/inventory-items/{item['id']}").json()["data"]["quantity"] == 27

        receipts = client.get("/api/stock-movements", params={"reason": "purchase_receipt"}).json()["data"]
        assert receipts["total"] == 1

    def test_empty_order_is_invalid(self, client):
        response = client.post("/api/purchase-orders", json={
            "supplier_ref": "SUP-TOTAL", "items": [],
            "expected_delivery": date.today().isoformat(), "terminal": "Kigali",
        })
        assert response.status_code == 422

    def test_delete_pending(self, client):
        item = _create_item(client)
        po = client.post("/api/purchase-orders", json={
            "supplier_ref": "SUP-TOTAL",
            "items": [{"item_id": item["id"], "quantity": 1}],
            "expected_delivery": date.today().isoformat(),
            "terminal": "Kigali",
        }).json()["data"]

        response = client.delete(f"/api/purchase-orders/{po['id']}")
        assert response.status_code == 200
        assert client.get(f"/api/purchase-orders/{po['id']}").status_code == 404

    def test_overview(self, client):
        item = _create_item(client)
        client.post("/api/purchase-orders", json={
            "supplier_ref": "SUP-TOTAL",
            "items": [{"item_id": item["id"], "quantity": 3, "unit_cost": "20"}],
            "expected_delivery": date.today().isoformat(),
            "terminal": "Kigali",
        })

        response = client.get("/api/purchase-orders/overview")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_orders"] == 1
        assert data["pending_orders"] == 1
        assert float(data["total_value"]) == 60.0
