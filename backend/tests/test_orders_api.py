"""
Tests for order endpoints: diner cart submission and staff status changes.
"""

import pytest


@pytest.fixture
def placed_order(client, table_headers, seed_menu):
    """Two soups on T01 (70.80)."""
    response = client.post(
        "/api/orders/create",
        json={"items": [{"menu_item_id": seed_menu["soup"].id, "qty": 2}]},
        headers=table_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateOrder:
    def test_create_order(self, placed_order, seed_table, seed_menu):
        assert placed_order["status"] == "PENDING"
        assert placed_order["table_id"] == seed_table.id
        # Money serializes as strings, never floats
        assert placed_order["subtotal"] == "60.00"
        assert placed_order["vat_total"] == "10.80"
        assert placed_order["grand_total"] == "70.80"
        assert placed_order["version"] == 1

        item = placed_order["items"][0]
        assert item["menu_item_id"] == seed_menu["soup"].id
        assert item["qty"] == 2
        assert item["unit_price"] == "30.00"
        assert item["station"] == "COLD"

    def test_mixed_cart(self, client, table_headers, seed_menu):
        response = client.post(
            "/api/orders/create",
            json={
                "items": [
                    {"menu_item_id": seed_menu["kofte"].id, "qty": 1},
                    {"menu_item_id": seed_menu["pizza"].id, "qty": 2, "notes": "extra cheese"},
                ]
            },
            headers=table_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert (data["subtotal"], data["vat_total"], data["grand_total"]) == (
            "175.00",
            "31.50",
            "206.50",
        )

    def test_missing_table_token(self, client, seed_menu):
        response = client.post(
            "/api/orders/create",
            json={"items": [{"menu_item_id": seed_menu["soup"].id, "qty": 1}]},
        )
        assert response.status_code == 401

    def test_staff_token_is_not_a_table_token(self, client, waiter_headers, seed_menu):
        token = waiter_headers["Authorization"].split(" ", 1)[1]
        response = client.post(
            "/api/orders/create",
            json={"items": [{"menu_item_id": seed_menu["soup"].id, "qty": 1}]},
            headers={"X-Table-Token": token},
        )
        assert response.status_code == 401

    def test_empty_cart(self, client, table_headers):
        response = client.post("/api/orders/create", json={"items": []}, headers=table_headers)
        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.parametrize("qty", [0, -1, 100])
    def test_quantity_out_of_range(self, client, table_headers, seed_menu, qty):
        response = client.post(
            "/api/orders/create",
            json={"items": [{"menu_item_id": seed_menu["soup"].id, "qty": qty}]},
            headers=table_headers,
        )
        assert response.status_code == 400

    def test_unavailable_items_listed(self, client, table_headers, seed_menu, other_tenant):
        foreign = other_tenant["item"].id
        retired = seed_menu["retired"].id
        response = client.post(
            "/api/orders/create",
            json={
                "items": [
                    {"menu_item_id": seed_menu["soup"].id, "qty": 1},
                    {"menu_item_id": foreign, "qty": 1},
                    {"menu_item_id": retired, "qty": 1},
                ]
            },
            headers=table_headers,
        )
        assert response.status_code == 404
        body = response.json()
        assert sorted(body["missing_menu_item_ids"]) == sorted([foreign, retired])
        assert body["error"].startswith("Menu items not available")

    def test_rejected_cart_creates_nothing(self, client, table_headers, other_tenant):
        client.post(
            "/api/orders/create",
            json={"items": [{"menu_item_id": other_tenant["item"].id, "qty": 1}]},
            headers=table_headers,
        )
        assert client.get("/api/orders/table", headers=table_headers).json() == []


class TestTableOrders:
    def test_lists_open_orders_newest_first(self, client, table_headers, seed_menu, placed_order):
        second = client.post(
            "/api/orders/create",
            json={"items": [{"menu_item_id": seed_menu["ayran"].id, "qty": 1}]},
            headers=table_headers,
        ).json()

        response = client.get("/api/orders/table", headers=table_headers)
        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [second["id"], placed_order["id"]]

    def test_closed_orders_hidden(self, client, table_headers, waiter_headers, placed_order):
        client.patch(
            f"/api/orders/{placed_order['id']}/status",
            json={"status": "CLOSED"},
            headers=waiter_headers,
        )
        assert client.get("/api/orders/table", headers=table_headers).json() == []


class TestRestaurantOrders:
    def test_staff_lists_orders(self, client, chef_headers, seed_restaurant, placed_order):
        response = client.get(
            f"/api/orders/restaurant/{seed_restaurant.id}", headers=chef_headers
        )
        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [placed_order["id"]]

    def test_status_filter(self, client, chef_headers, seed_restaurant, placed_order):
        ready = client.get(
            f"/api/orders/restaurant/{seed_restaurant.id}?status=READY", headers=chef_headers
        )
        assert ready.json() == []

        pending = client.get(
            f"/api/orders/restaurant/{seed_restaurant.id}?status=PENDING", headers=chef_headers
        )
        assert len(pending.json()) == 1

    def test_invalid_status_filter(self, client, chef_headers, seed_restaurant):
        response = client.get(
            f"/api/orders/restaurant/{seed_restaurant.id}?status=EATEN", headers=chef_headers
        )
        assert response.status_code == 400

    def test_restaurant_not_in_token(self, client, chef_headers, other_tenant):
        response = client.get(
            f"/api/orders/restaurant/{other_tenant['restaurant'].id}", headers=chef_headers
        )
        assert response.status_code == 403

    def test_requires_staff(self, client, seed_restaurant):
        response = client.get(f"/api/orders/restaurant/{seed_restaurant.id}")
        assert response.status_code == 401


class TestOrderStatus:
    def test_update_status(self, client, chef_headers, placed_order):
        response = client.patch(
            f"/api/orders/{placed_order['id']}/status",
            json={"status": "IN_PROGRESS", "expected_version": 1},
            headers=chef_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "IN_PROGRESS"
        assert data["version"] == 2

    def test_unknown_status(self, client, chef_headers, placed_order):
        response = client.patch(
            f"/api/orders/{placed_order['id']}/status",
            json={"status": "EATEN"},
            headers=chef_headers,
        )
        assert response.status_code == 400

    def test_stale_version_conflicts(self, client, chef_headers, placed_order):
        client.patch(
            f"/api/orders/{placed_order['id']}/status",
            json={"status": "IN_PROGRESS", "expected_version": 1},
            headers=chef_headers,
        )
        response = client.patch(
            f"/api/orders/{placed_order['id']}/status",
            json={"status": "READY", "expected_version": 1},
            headers=chef_headers,
        )
        assert response.status_code == 409
        # The body carries the version to retry with, not the stale one sent
        assert response.json()["expected_version"] == 2

        retry = client.patch(
            f"/api/orders/{placed_order['id']}/status",
            json={"status": "READY", "expected_version": response.json()["expected_version"]},
            headers=chef_headers,
        )
        assert retry.status_code == 200
        assert retry.json()["version"] == 3

    def test_order_of_other_tenant_not_found(self, client, headers_for, other_tenant, placed_order):
        headers = headers_for(other_tenant["admin"], [other_tenant["restaurant"].id])
        response = client.patch(
            f"/api/orders/{placed_order['id']}/status",
            json={"status": "CANCELLED"},
            headers=headers,
        )
        assert response.status_code == 404

    def test_restaurant_missing_from_token(
        self, client, headers_for, seed_chef_user, chef_headers, seed_restaurant, placed_order
    ):
        # Token issued before the chef was given this restaurant
        headers = headers_for(seed_chef_user, [])
        response = client.patch(
            f"/api/orders/{placed_order['id']}/status",
            json={"status": "READY"},
            headers=headers,
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Not allowed to access this restaurant"

        orders = client.get(
            f"/api/orders/restaurant/{seed_restaurant.id}", headers=chef_headers
        ).json()
        assert orders[0]["status"] == "PENDING"
        assert orders[0]["version"] == 1

    def test_diner_sees_new_status(self, client, chef_headers, table_headers, placed_order):
        client.patch(
            f"/api/orders/{placed_order['id']}/status",
            json={"status": "READY"},
            headers=chef_headers,
        )
        orders = client.get("/api/orders/table", headers=table_headers).json()
        assert orders[0]["status"] == "READY"


class TestOrderItemStatus:
    def test_update_item_status(self, client, chef_headers, placed_order):
        item = placed_order["items"][0]
        response = client.patch(
            f"/api/orders/items/{item['id']}/status",
            json={"status": "FIRED", "expected_version": item["version"]},
            headers=chef_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "FIRED"
        assert response.json()["version"] == item["version"] + 1

    def test_missing_item(self, client, chef_headers, seed_restaurant):
        response = client.patch(
            "/api/orders/items/99999/status",
            json={"status": "FIRED"},
            headers=chef_headers,
        )
        assert response.status_code == 404

    def test_item_of_restaurant_missing_from_token(
        self, client, headers_for, seed_chef_user, placed_order
    ):
        item = placed_order["items"][0]
        response = client.patch(
            f"/api/orders/items/{item['id']}/status",
            json={"status": "FIRED"},
            headers=headers_for(seed_chef_user, []),
        )
        assert response.status_code == 403
