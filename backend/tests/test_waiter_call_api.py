"""
Tests for waiter call endpoints.
"""

import pytest


@pytest.fixture
def pending_call(client, table_headers, seed_waiter_user):
    response = client.post(
        "/api/waiter-call/create",
        json={"type": "CALL_WAITER", "note": "water please"},
        headers=table_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateCall:
    def test_create_call(self, pending_call, seed_table, seed_waiter_user):
        assert pending_call["status"] == "PENDING"
        assert pending_call["table_id"] == seed_table.id
        assert pending_call["note"] == "water please"
        assert pending_call["assigned_waiter_id"] == seed_waiter_user.id
        assert pending_call["acknowledged_at"] is None

    def test_duplicate_pending_call(self, client, table_headers, pending_call):
        response = client.post(
            "/api/waiter-call/create",
            json={"type": "CALL_WAITER"},
            headers=table_headers,
        )
        assert response.status_code == 409
        assert response.json()["call_id"] == pending_call["id"]

    def test_bill_request_is_separate(self, client, table_headers, pending_call):
        response = client.post(
            "/api/waiter-call/create",
            json={"type": "REQUEST_BILL"},
            headers=table_headers,
        )
        assert response.status_code == 201

    def test_unknown_type(self, client, table_headers):
        response = client.post(
            "/api/waiter-call/create",
            json={"type": "DANCE"},
            headers=table_headers,
        )
        assert response.status_code == 400

    def test_requires_table_token(self, client, seed_table):
        response = client.post("/api/waiter-call/create", json={"type": "CALL_WAITER"})
        assert response.status_code == 401


class TestListCalls:
    def test_open_calls_listed(self, client, waiter_headers, seed_restaurant, pending_call):
        response = client.get(
            f"/api/waiter-call/restaurant/{seed_restaurant.id}", headers=waiter_headers
        )
        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == [pending_call["id"]]

    def test_status_filter(self, client, waiter_headers, seed_restaurant, pending_call):
        response = client.get(
            f"/api/waiter-call/restaurant/{seed_restaurant.id}?status=COMPLETED,CANCELLED",
            headers=waiter_headers,
        )
        assert response.json() == []

    def test_invalid_status_filter(self, client, waiter_headers, seed_restaurant):
        response = client.get(
            f"/api/waiter-call/restaurant/{seed_restaurant.id}?status=LOST",
            headers=waiter_headers,
        )
        assert response.status_code == 400

    def test_restaurant_not_in_token(self, client, waiter_headers, other_tenant):
        response = client.get(
            f"/api/waiter-call/restaurant/{other_tenant['restaurant'].id}",
            headers=waiter_headers,
        )
        assert response.status_code == 403


class TestUpdateCall:
    def test_acknowledge_then_complete(self, client, waiter_headers, pending_call):
        ack = client.patch(
            f"/api/waiter-call/{pending_call['id']}/status",
            json={"status": "ACKNOWLEDGED", "expected_version": 1},
            headers=waiter_headers,
        )
        assert ack.status_code == 200
        assert ack.json()["acknowledged_at"] is not None
        assert ack.json()["version"] == 2

        done = client.patch(
            f"/api/waiter-call/{pending_call['id']}/status",
            json={"status": "COMPLETED", "expected_version": 2},
            headers=waiter_headers,
        )
        assert done.status_code == 200
        assert done.json()["completed_at"] is not None

    def test_stale_version(self, client, waiter_headers, pending_call):
        response = client.patch(
            f"/api/waiter-call/{pending_call['id']}/status",
            json={"status": "ACKNOWLEDGED", "expected_version": 3},
            headers=waiter_headers,
        )
        assert response.status_code == 409
        assert response.json()["expected_version"] == 1

    def test_restaurant_missing_from_token(self, client, headers_for, seed_waiter_user, pending_call):
        response = client.patch(
            f"/api/waiter-call/{pending_call['id']}/status",
            json={"status": "ACKNOWLEDGED"},
            headers=headers_for(seed_waiter_user, []),
        )
        assert response.status_code == 403

    def test_chef_cannot_update(self, client, chef_headers, pending_call):
        response = client.patch(
            f"/api/waiter-call/{pending_call['id']}/status",
            json={"status": "ACKNOWLEDGED"},
            headers=chef_headers,
        )
        assert response.status_code == 403


class TestDeleteCall:
    def test_delete(self, client, waiter_headers, table_headers, pending_call):
        response = client.delete(
            f"/api/waiter-call/{pending_call['id']}", headers=waiter_headers
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "call_id": pending_call["id"]}

        again = client.post(
            "/api/waiter-call/create", json={"type": "CALL_WAITER"}, headers=table_headers
        )
        assert again.status_code == 201

    def test_delete_missing(self, client, waiter_headers):
        response = client.delete("/api/waiter-call/99999", headers=waiter_headers)
        assert response.status_code == 404

    def test_delete_other_tenant_call(self, client, headers_for, other_tenant, pending_call):
        headers = headers_for(other_tenant["admin"], [other_tenant["restaurant"].id])
        response = client.delete(f"/api/waiter-call/{pending_call['id']}", headers=headers)
        assert response.status_code == 404

    def test_delete_restaurant_missing_from_token(
        self, client, headers_for, seed_waiter_user, waiter_headers, seed_restaurant, pending_call
    ):
        response = client.delete(
            f"/api/waiter-call/{pending_call['id']}",
            headers=headers_for(seed_waiter_user, []),
        )
        assert response.status_code == 403

        calls = client.get(
            f"/api/waiter-call/restaurant/{seed_restaurant.id}", headers=waiter_headers
        ).json()
        assert [c["id"] for c in calls] == [pending_call["id"]]
