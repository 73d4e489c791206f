"""Tests for the live notification websocket."""

import asyncio

from trade_server.server import _stop_pump
from trade_server.state import ServerState


def test_history_sent_on_connect(client, make_trade):
    make_trade()
    make_trade(receiver_id="u9")

    with client.websocket_connect("/ws/notifications/u2") as ws:
        message = ws.receive_json()

    assert message["type"] == "notification_history"
    assert [n["type"] for n in message["data"]] == ["trade_offer"]


def test_new_notifications_are_pushed(client, app, trade_body):
    with client.websocket_connect("/ws/notifications/u1") as ws:
        assert ws.receive_json()["data"] == []
        assert app.state.server.notification_hub.connected_users() == {"u1"}

        trade_id = client.post("/api/trades/create", json=trade_body).json()["trade"]["id"]
        client.post(f"/api/trades/{trade_id}/reject")

        message = ws.receive_json()

    assert message["type"] == "notification"
    assert message["data"]["type"] == "trade_rejected"
    assert message["data"]["data"]["tradeId"] == trade_id


def test_mark_read_over_socket(client, make_trade, store):
    make_trade()
    [offer] = store.notifications_for("u2")

    with client.websocket_connect("/ws/notifications/u2") as ws:
        ws.receive_json()
        ws.send_json({"type": "mark_read", "notificationId": offer.notification_id})
        reply = ws.receive_json()
        ws.send_json({"type": "mark_read", "notificationId": "missing"})
        missing = ws.receive_json()

    assert reply["type"] == "notification_read"
    assert reply["data"]["read"] is True
    assert store.notifications_for("u2")[0].read is True
    assert missing["type"] == "error"


def test_ping_and_bad_messages(client):
    with client.websocket_connect("/ws/notifications/u1") as ws:
        ws.receive_json()
        ws.send_json({"type": "ping"})
        pong = ws.receive_json()
        ws.send_text("not json")
        invalid = ws.receive_json()
        ws.send_json({"type": "subscribe_all"})
        unknown = ws.receive_json()

    assert pong["type"] == "pong"
    assert invalid == {"type": "error", "message": "Invalid message format"}
    assert unknown["type"] == "error"
    assert "subscribe_all" in unknown["message"]


def test_disconnect_unsubscribes(client, app):
    hub = app.state.server.notification_hub

    with client.websocket_connect("/ws/notifications/u1") as ws:
        ws.receive_json()
        ws.send_json({"type": "ping"})
        ws.receive_json()

    client.get("/")
    assert "u1" not in hub.connected_users()


def test_binary_frames_get_an_error_reply(client):
    with client.websocket_connect("/ws/notifications/u1") as ws:
        ws.receive_json()
        ws.send_bytes(b'{"type": "ping"}')
        error = ws.receive_json()
        ws.send_json({"type": "ping"})
        pong = ws.receive_json()

    assert error == {"type": "error", "message": "Invalid message format"}
    assert pong["type"] == "pong"


def test_stopping_pump_collects_its_failure():
    async def scenario():
        async def failed_send():
            raise RuntimeError("socket closed")

        failed = asyncio.create_task(failed_send())
        await asyncio.wait([failed])
        await _stop_pump(failed, "u1")

        idle = asyncio.create_task(asyncio.sleep(60))
        await asyncio.sleep(0)
        await _stop_pump(idle, "u1")
        return failed, idle

    failed, idle = asyncio.run(scenario())

    assert isinstance(failed.exception(), RuntimeError)
    assert idle.cancelled()


def test_server_state_pushes_store_notifications_to_hub():
    async def scenario():
        state = ServerState()
        queue = state.notification_hub.subscribe("u2")
        state.trade_store.create_trade("u1", "Alice", "u2", "Bob", "hat123", "obj1", "Red Hat")
        return await asyncio.wait_for(queue.get(), timeout=1)

    message = asyncio.run(scenario())

    assert message["type"] == "notification"
    assert message["data"]["type"] == "trade_offer"
    assert message["data"]["userId"] == "u2"
