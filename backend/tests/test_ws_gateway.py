"""
End-to-end tests for the /ws gateway: authentication, group joins and
delivery of events produced by REST calls.

HTTP and WebSocket traffic go through the same TestClient, so background
tasks publishing events run on the loop serving the sockets.
"""

import pytest
from starlette.websockets import WebSocketDisconnect

from rest_api.services.domain import SessionService


def _token(headers):
    return headers["Authorization"].split(" ", 1)[1]


def _join_restaurant(ws, restaurant_id):
    ws.send_json({"event": "join-restaurant", "data": {"restaurant_id": restaurant_id}})
    reply = ws.receive_json()
    assert reply == {"event": "joined", "data": {"group": f"restaurant:{restaurant_id}"}}


def _sync(ws):
    """Round-trip a ping so every join before it has been processed."""
    ws.send_json({"event": "ping"})
    assert ws.receive_json()["event"] == "pong"


class TestAuthentication:
    def test_no_credentials(self, client):
        with client.websocket_connect("/ws") as ws:
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 4001

    def test_bad_staff_token(self, client):
        with client.websocket_connect("/ws?token=not-a-jwt") as ws:
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 4001

    def test_superseded_table_token(self, client, db_session, seed_table, table_session):
        SessionService(db_session).open_session(
            seed_table.tenant_id, seed_table.restaurant_id, seed_table.id
        )
        with client.websocket_connect(f"/ws?table_token={table_session.token}") as ws:
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 4001


class TestStaffConnections:
    def test_ping(self, client, waiter_headers):
        with client.websocket_connect(f"/ws?token={_token(waiter_headers)}") as ws:
            ws.send_json({"event": "ping"})
            assert ws.receive_json() == {"event": "pong", "data": {}}

    def test_join_kitchen_station(self, client, chef_headers, seed_restaurant):
        with client.websocket_connect(f"/ws?token={_token(chef_headers)}") as ws:
            ws.send_json(
                {"event": "join-kitchen", "data": {"restaurantId": seed_restaurant.id, "station": "hot"}}
            )
            assert ws.receive_json()["data"]["group"] == f"kitchen:{seed_restaurant.id}:HOT"

    def test_join_foreign_restaurant_closes(self, client, waiter_headers, other_tenant):
        with client.websocket_connect(f"/ws?token={_token(waiter_headers)}") as ws:
            ws.send_json(
                {"event": "join-restaurant", "data": {"restaurant_id": other_tenant["restaurant"].id}}
            )
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 4003

    def test_malformed_message_keeps_connection(self, client, waiter_headers):
        with client.websocket_connect(f"/ws?token={_token(waiter_headers)}") as ws:
            ws.send_text("{not json")
            reply = ws.receive_json()
            assert reply["event"] == "error"

            ws.send_json({"event": "dance"})
            assert ws.receive_json()["data"]["error"] == "Unknown event 'dance'"

            ws.send_json({"event": "join-restaurant", "data": {"restaurant_id": "abc"}})
            assert ws.receive_json()["event"] == "error"

            _sync(ws)

    def test_leave(self, client, waiter_headers, seed_restaurant):
        with client.websocket_connect(f"/ws?token={_token(waiter_headers)}") as ws:
            _join_restaurant(ws, seed_restaurant.id)
            ws.send_json({"event": "leave", "data": {"group": f"restaurant:{seed_restaurant.id}"}})
            assert ws.receive_json()["event"] == "left"

    def test_receives_new_orders(
        self, client, chef_headers, table_headers, seed_restaurant, seed_menu
    ):
        with client.websocket_connect(f"/ws?token={_token(chef_headers)}") as ws:
            _join_restaurant(ws, seed_restaurant.id)

            created = client.post(
                "/api/orders/create",
                json={"items": [{"menu_item_id": seed_menu["soup"].id, "qty": 2}]},
                headers=table_headers,
            ).json()

            message = ws.receive_json()
            assert message["event"] == "order.created"
            assert message["data"]["order_id"] == created["id"]
            assert message["data"]["grand_total"] == "70.80"
            assert "ts" in message

    def test_kitchen_receives_only_its_station(
        self, client, chef_headers, table_headers, seed_restaurant, seed_menu
    ):
        with client.websocket_connect(f"/ws?token={_token(chef_headers)}") as ws:
            ws.send_json(
                {"event": "join-kitchen", "data": {"restaurant_id": seed_restaurant.id, "station": "BAR"}}
            )
            ws.receive_json()

            client.post(
                "/api/orders/create",
                json={
                    "items": [
                        {"menu_item_id": seed_menu["kofte"].id, "qty": 1},
                        {"menu_item_id": seed_menu["ayran"].id, "qty": 3},
                    ]
                },
                headers=table_headers,
            )

            message = ws.receive_json()
            assert message["event"] == "order.created"
            assert message["data"]["station"] == "BAR"
            assert [i["name"] for i in message["data"]["items"]] == ["Ayran"]
            assert message["data"]["items"][0]["qty"] == 3

    def test_assigned_waiter_gets_priority_call(
        self, client, waiter_headers, table_headers, seed_waiter_user
    ):
        with client.websocket_connect(f"/ws?token={_token(waiter_headers)}") as ws:
            _sync(ws)

            call = client.post(
                "/api/waiter-call/create",
                json={"type": "REQUEST_BILL"},
                headers=table_headers,
            ).json()
            assert call["assigned_waiter_id"] == seed_waiter_user.id

            message = ws.receive_json()
            assert message["event"] == "waiter.call.created"
            assert message["data"]["priority"] is True
            assert message["data"]["call_id"] == call["id"]


class TestTableConnections:
    def test_join_own_table(self, client, table_headers, seed_table):
        token = table_headers["X-Table-Token"]
        with client.websocket_connect(f"/ws?table_token={token}") as ws:
            ws.send_json(
                {
                    "event": "join-table",
                    "data": {
                        "tenant_id": seed_table.tenant_id,
                        "restaurant_id": seed_table.restaurant_id,
                        "table_id": seed_table.id,
                    },
                }
            )
            reply = ws.receive_json()
            assert reply["data"]["group"] == (
                f"table:{seed_table.tenant_id}:{seed_table.restaurant_id}:{seed_table.id}"
            )

    def test_join_other_table_closes(self, client, table_headers, seed_table, seed_table_2):
        token = table_headers["X-Table-Token"]
        with client.websocket_connect(f"/ws?table_token={token}") as ws:
            ws.send_json(
                {
                    "event": "join-table",
                    "data": {
                        "tenant_id": seed_table_2.tenant_id,
                        "restaurant_id": seed_table_2.restaurant_id,
                        "table_id": seed_table_2.id,
                    },
                }
            )
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 4003

    def test_diner_cannot_join_kitchen(self, client, table_headers, seed_restaurant):
        token = table_headers["X-Table-Token"]
        with client.websocket_connect(f"/ws?table_token={token}") as ws:
            ws.send_json(
                {"event": "join-kitchen", "data": {"restaurant_id": seed_restaurant.id, "station": "HOT"}}
            )
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 4003

    def test_diner_sees_status_change(
        self, client, table_headers, chef_headers, seed_table, seed_menu
    ):
        order = client.post(
            "/api/orders/create",
            json={"items": [{"menu_item_id": seed_menu["pizza"].id, "qty": 1}]},
            headers=table_headers,
        ).json()

        token = table_headers["X-Table-Token"]
        with client.websocket_connect(f"/ws?table_token={token}") as ws:
            ws.send_json(
                {
                    "event": "join-table",
                    "data": {
                        "tenant_id": seed_table.tenant_id,
                        "restaurant_id": seed_table.restaurant_id,
                        "table_id": seed_table.id,
                    },
                }
            )
            ws.receive_json()

            client.patch(
                f"/api/orders/{order['id']}/status",
                json={"status": "READY"},
                headers=chef_headers,
            )

            message = ws.receive_json()
            assert message["event"] == "order.updated"
            assert message["data"]["order_id"] == order["id"]
            assert message["data"]["status"] == "READY"

    def test_reopen_closes_superseded_socket(self, client, table_headers, seed_table):
        token = table_headers["X-Table-Token"]
        with client.websocket_connect(f"/ws?table_token={token}") as ws:
            _sync(ws)

            reopened = client.post(
                "/api/session/open",
                json={
                    "tenant_id": seed_table.tenant_id,
                    "restaurant_id": seed_table.restaurant_id,
                    "table_id": seed_table.id,
                },
            )
            assert reopened.status_code == 200

            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 4001

    def test_reopening_other_table_keeps_socket(self, client, table_headers, seed_table_2):
        with client.websocket_connect(f"/ws?table_token={table_headers['X-Table-Token']}") as ws:
            _sync(ws)

            reopened = client.post(
                "/api/session/open",
                json={
                    "tenant_id": seed_table_2.tenant_id,
                    "restaurant_id": seed_table_2.restaurant_id,
                    "table_id": seed_table_2.id,
                },
            )
            assert reopened.status_code == 200

            _sync(ws)

    def test_close_session_closes_socket(self, client, table_headers, table_session):
        with client.websocket_connect(f"/ws?table_token={table_headers['X-Table-Token']}") as ws:
            _sync(ws)

            closed = client.post(
                "/api/session/close",
                json={"session_id": table_session.session_id},
                headers=table_headers,
            )
            assert closed.status_code == 200

            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()
        assert exc.value.code == 4001
