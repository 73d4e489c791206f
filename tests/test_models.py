"""Tests for trade and notification records."""

import pytest

from trade_server.models import (
    Notification,
    NotificationType,
    Trade,
    TradeCompletedPayload,
    TradeDecisionPayload,
    TradeOfferPayload,
    TradeStatus,
)
from trade_server.models.trade import TRANSITIONS


def _trade(**overrides):
    fields = dict(
        trade_id="t1",
        sender_id="u1",
        sender_name="Alice",
        receiver_id="u2",
        receiver_name="Bob",
        item_id="hat123",
        object_id="obj1",
        item_name="Red Hat",
        created_at="2024-01-01T00:00:00.000Z",
        updated_at="2024-01-01T00:00:00.000Z",
    )
    fields.update(overrides)
    return Trade(**fields)


def test_terminal_statuses_have_no_transitions():
    assert TRANSITIONS[TradeStatus.REJECTED] == frozenset()
    assert TRANSITIONS[TradeStatus.COMPLETED] == frozenset()
    assert _trade().can_transition_to(TradeStatus.ACCEPTED)
    assert not _trade().can_transition_to(TradeStatus.COMPLETED)
    assert _trade(status=TradeStatus.ACCEPTED).can_transition_to(TradeStatus.COMPLETED)


def test_trade_to_dict_uses_wire_names():
    data = _trade(colors=("#fff", 2)).to_dict()

    assert data["id"] == "t1"
    assert data["senderProfileId"] == "u1"
    assert data["receiverUsername"] == "Bob"
    assert data["status"] == "pending"
    assert data["colors"] == ["#fff", 2]
    assert data["counterItemName"] is None
    assert data["counterColors"] == []
    assert data["completedAt"] is None


def test_notification_payload_must_match_type():
    offer = TradeOfferPayload(trade_id="t1", sender_name="Alice", item_name="Red Hat", message="hi")

    with pytest.raises(TypeError):
        Notification(
            notification_id="n1",
            type=NotificationType.TRADE_COMPLETED,
            user_id="u2",
            payload=offer,
            created_at="2024-01-01T00:00:00.000Z",
        )


@pytest.mark.parametrize(
    "kind, payload",
    [
        (NotificationType.TRADE_ACCEPTED, TradeDecisionPayload("t1", "Bob", "Red Hat", "ok")),
        (NotificationType.TRADE_REJECTED, TradeDecisionPayload("t1", "Bob", "Red Hat", "no")),
        (NotificationType.TRADE_COMPLETED,
         TradeCompletedPayload("t1", "Bob", "Red Hat", "Blue Shoes", "done")),
    ],
)
def test_notification_to_dict(kind, payload):
    notification = Notification(
        notification_id="n1",
        type=kind,
        user_id="u1",
        payload=payload,
        created_at="2024-01-01T00:00:00.000Z",
    )

    data = notification.to_dict()
    assert data["type"] == kind.value
    assert data["userId"] == "u1"
    assert data["read"] is False
    assert data["data"]["tradeId"] == "t1"
    assert data["data"]["message"] == payload.message
