"""Notification data model.

Every notification kind carries its own payload type; ``PAYLOAD_TYPES`` is the
closed mapping between the two and is checked when a notification is built.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class NotificationType(str, Enum):
    TRADE_OFFER = "trade_offer"
    TRADE_ACCEPTED = "trade_accepted"
    TRADE_REJECTED = "trade_rejected"
    TRADE_COMPLETED = "trade_completed"


@dataclass(frozen=True)
class TradeOfferPayload:
    """Sent to the receiver when a trade is proposed."""
    trade_id: str
    sender_name: str
    item_name: str
    message: str

    def to_dict(self) -> dict:
        return {
            'tradeId': self.trade_id,
            'senderUsername': self.sender_name,
            'itemName': self.item_name,
            'message': self.message,
        }


@dataclass(frozen=True)
class TradeDecisionPayload:
    """Sent to the sender when the receiver accepts or rejects."""
    trade_id: str
    receiver_name: str
    item_name: str
    message: str

    def to_dict(self) -> dict:
        return {
            'tradeId': self.trade_id,
            'receiverUsername': self.receiver_name,
            'itemName': self.item_name,
            'message': self.message,
        }


@dataclass(frozen=True)
class TradeCompletedPayload:
    """Sent to each participant once the exchange has happened."""
    trade_id: str
    partner_name: str
    gave_item_name: str
    received_item_name: str
    message: str

    def to_dict(self) -> dict:
        return {
            'tradeId': self.trade_id,
            'partnerUsername': self.partner_name,
            'gaveItemName': self.gave_item_name,
            'receivedItemName': self.received_item_name,
            'message': self.message,
        }


NotificationPayload = Union[TradeOfferPayload, TradeDecisionPayload, TradeCompletedPayload]

PAYLOAD_TYPES = {
    NotificationType.TRADE_OFFER: TradeOfferPayload,
    NotificationType.TRADE_ACCEPTED: TradeDecisionPayload,
    NotificationType.TRADE_REJECTED: TradeDecisionPayload,
    NotificationType.TRADE_COMPLETED: TradeCompletedPayload,
}


@dataclass(frozen=True)
class Notification:
    """An event delivered to a single user."""
    notification_id: str
    type: NotificationType
    user_id: str
    payload: NotificationPayload
    created_at: str
    read: bool = False

    def __post_init__(self):
        expected = PAYLOAD_TYPES[self.type]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.type.value} notifications carry {expected.__name__}, "
                f"got {type(self.payload).__name__}"
            )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.notification_id,
            'type': self.type.value,
            'userId': self.user_id,
            'data': self.payload.to_dict(),
            'createdAt': self.created_at,
            'read': self.read,
        }
