import pytest

from config import settings


def create_item(client, name="Widget", quantity=10, price="1.50", selling_price="2.00", **extra):
    response = client.post("/api/v1/inventory/", json={
        "name": name,
        "quantity": quantity,
        "price": price,
        "selling_price": selling_price,
        **extra,
    })
    assert response.status_code == 200, response.text
    return response.json()


def slip_payload(*lines, customer_name="Acme Ltd", **extra):
    return {
        "customer_name": customer_name,
        "customer_phone": "555-0100",
        "items": [{"item_id": item_id, "quantity": qty, "price": price} for item_id, qty, price in lines],
        **extra,
    }


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestInventoryEndpoints:

    def test_create_records_initial_purchase(self, client):
        item = create_item(client, vendor_name="Bolt Supply", vendor_id="v-1")

        assert item["quantity"] == 10
        assert item["latest_price"] == "1.50"
        assert item["vendor_name"] == "Bolt Supply"
        assert len(item["purchase_history"]) == 1
        assert item["purchase_history"][0]["quantity"] == 10
        assert item["purchase_history"][0]["vendor_id"] == "v-1"

    def test_create_with_existing_name_restocks(self, client):
        first = create_item(client, quantity=10)
        second = create_item(client, quantity=5, price="1.75")

        assert second["id"] == first["id"]
        assert second["quantity"] == 15
        assert second["price"] == "1.75"
        assert len(second["purchase_history"]) == 2

    def test_search(self, client):
        create_item(client, name="Blue Widget")
        create_item(client, name="Red Gadget")

        response = client.get("/api/v1/inventory/", params={"search": "widget"})

        assert [i["name"] for i in response.json()] == ["Blue Widget"]

    def test_update_cannot_change_quantity(self, client):
        item = create_item(client)

        response = client.put(f"/api/v1/inventory/{item['id']}", json={"selling_price": "3.00", "quantity": 999})

        assert response.status_code == 200
        assert response.json()["selling_price"] == "3.00"
        assert response.json()["quantity"] == 10

    def test_add_stock(self, client):
        item = create_item(client)

        response = client.put(f"/api/v1/inventory/{item['id']}/add-stock", json={
            "quantity": 7, "price": "1.80", "vendor_name": "Bolt Supply",
        })

        body = response.json()
        assert response.status_code == 200
        assert body["quantity"] == 17
        assert body["latest_price"] == "1.80"
        assert body["purchase_history"][-1]["quantity"] == 7
        assert body["purchase_history"][-1]["vendor_name"] == "Bolt Supply"

    def test_add_stock_unknown_item(self, client):
        response = client.put("/api/v1/inventory/999/add-stock", json={"quantity": 1, "price": "1.00"})
        assert response.status_code == 404

    def test_add_stock_rejects_non_positive_quantity(self, client):
        item = create_item(client)
        response = client.put(f"/api/v1/inventory/{item['id']}/add-stock", json={"quantity": 0, "price": "1.00"})
        assert response.status_code == 422

    def test_low_stock(self, client):
        create_item(client, name="Plenty", quantity=50, reorder_level=5)
        low = create_item(client, name="Scarce", quantity=2, reorder_level=5)

        response = client.get("/api/v1/inventory/low-stock")

        assert [i["id"] for i in response.json()] == [low["id"]]
        assert response.json()[0]["is_low_stock"] is True

    def test_delete(self, client):
        item = create_item(client)

        assert client.delete(f"/api/v1/inventory/{item['id']}").json() == {"status": "success"}
        assert client.get(f"/api/v1/inventory/{item['id']}").status_code == 404
        assert client.delete(f"/api/v1/inventory/{item['id']}").status_code == 404


class TestPackingSlipEndpoints:

    def test_create_with_backorder(self, client):
        item = create_item(client, quantity=10)

        response = client.post("/api/v1/packing-slips/", json=slip_payload((item["id"], 15, "2.00")))

        slip = response.json()
        assert response.status_code == 200, response.text
        assert slip["slip_number"].startswith("PS")
        assert len(slip["slip_number"]) == 13
        assert slip["items"][0]["quantity"] == 10
        assert slip["items"][0]["backorder_quantity"] == 5
        assert slip["total_amount"] == "20.00"
        assert client.get(f"/api/v1/inventory/{item['id']}").json()["quantity"] == 0

    def test_two_slips_get_consecutive_numbers(self, client):
        item = create_item(client)

        first = client.post("/api/v1/packing-slips/", json=slip_payload((item["id"], 1, "1.00"))).json()
        second = client.post("/api/v1/packing-slips/", json=slip_payload((item["id"], 1, "1.00"))).json()

        assert first["slip_number"][:-3] == second["slip_number"][:-3]
        assert int(second["slip_number"][-3:]) == int(first["slip_number"][-3:]) + 1

    def test_create_with_unknown_item(self, client):
        item = create_item(client, quantity=10)

        response = client.post(
            "/api/v1/packing-slips/", json=slip_payload((item["id"], 3, "1.00"), (999, 1, "1.00"))
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Item not found: 999"
        assert client.get(f"/api/v1/inventory/{item['id']}").json()["quantity"] == 10
        assert client.get("/api/v1/packing-slips/").json() == []

    @pytest.mark.parametrize("payload", [
        {"customer_name": "Acme Ltd", "items": []},
        {"customer_name": "  ", "items": [{"item_id": 1, "quantity": 1, "price": "1.00"}]},
        {"items": [{"item_id": 1, "quantity": 1, "price": "1.00"}]},
        {"customer_name": "Acme Ltd", "items": [{"item_id": 1, "quantity": 0, "price": "1.00"}]},
        {"customer_name": "Acme Ltd", "items": [{"item_id": 1, "quantity": 1}]},
    ])
    def test_create_rejects_incomplete_requests(self, client, payload):
        assert client.post("/api/v1/packing-slips/", json=payload).status_code == 422

    def test_preview(self, client):
        item = create_item(client, quantity=10)

        response = client.post("/api/v1/packing-slips/preview", json={
            "items": [{"item_id": item["id"], "quantity": 15, "price": "2.00"}],
        })

        body = response.json()
        assert response.status_code == 200
        assert body["has_backorder"] is True
        assert body["items"][0]["quantity"] == 10
        assert body["items"][0]["backorder_quantity"] == 5
        assert body["total_amount"] == "20.00"
        assert client.get(f"/api/v1/inventory/{item['id']}").json()["quantity"] == 10

    def test_get_and_list(self, client):
        item = create_item(client)
        created = client.post("/api/v1/packing-slips/", json=slip_payload((item["id"], 1, "1.00"))).json()

        assert client.get(f"/api/v1/packing-slips/{created['id']}").json()["slip_number"] == created["slip_number"]
        assert [s["id"] for s in client.get("/api/v1/packing-slips/").json()] == [created["id"]]
        assert client.get("/api/v1/packing-slips/999").status_code == 404

    def test_update_returns_freed_stock(self, client):
        item = create_item(client, quantity=10)
        slip = client.post("/api/v1/packing-slips/", json=slip_payload((item["id"], 10, "2.00"))).json()

        response = client.put(
            f"/api/v1/packing-slips/{slip['id']}",
            json=slip_payload((item["id"], 5, "2.00"), notes="half order"),
        )

        assert response.status_code == 200
        assert response.json()["total_amount"] == "10.00"
        assert response.json()["notes"] == "half order"
        assert client.get(f"/api/v1/inventory/{item['id']}").json()["quantity"] == 5

    def test_update_unknown_slip(self, client):
        item = create_item(client)
        response = client.put("/api/v1/packing-slips/999", json=slip_payload((item["id"], 1, "1.00")))
        assert response.status_code == 404
        assert response.json()["detail"] == "Packing slip not found"

    def test_update_completed_slip_when_editing_is_disabled(self, client, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_EDIT_COMPLETED_SLIPS", False)
        item = create_item(client, quantity=10)
        slip = client.post("/api/v1/packing-slips/", json=slip_payload((item["id"], 4, "1.00"))).json()
        client.post(f"/api/v1/packing-slips/{slip['id']}/complete")

        response = client.put(f"/api/v1/packing-slips/{slip['id']}", json=slip_payload((item["id"], 1, "1.00")))

        assert response.status_code == 409
        assert client.get(f"/api/v1/inventory/{item['id']}").json()["quantity"] == 6

    def test_complete(self, client):
        item = create_item(client, quantity=10)
        slip = client.post("/api/v1/packing-slips/", json=slip_payload((item["id"], 4, "1.00"))).json()

        first = client.post(f"/api/v1/packing-slips/{slip['id']}/complete")
        second = client.post(f"/api/v1/packing-slips/{slip['id']}/complete")

        assert first.status_code == 200
        assert first.json()["is_completed"] is True
        assert second.status_code == 200
        assert client.get(f"/api/v1/inventory/{item['id']}").json()["quantity"] == 6
        assert client.post("/api/v1/packing-slips/999/complete").status_code == 404

    def test_cancel(self, client):
        item = create_item(client, quantity=10)
        slip = client.post("/api/v1/packing-slips/", json=slip_payload((item["id"], 15, "2.00"))).json()

        response = client.delete(f"/api/v1/packing-slips/{slip['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Packing slip cancelled successfully"}
        assert client.get(f"/api/v1/inventory/{item['id']}").json()["quantity"] == 10
        assert client.get(f"/api/v1/packing-slips/{slip['id']}").status_code == 404
        assert client.delete(f"/api/v1/packing-slips/{slip['id']}").status_code == 404
