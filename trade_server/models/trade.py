"""Trade data model."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

Color = Union[str, int]


class TradeStatus(str, Enum):
    """Lifecycle status of a trade."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


# Legal lifecycle transitions: current status -> statuses it may move to
TRANSITIONS = {
    TradeStatus.PENDING: frozenset({TradeStatus.ACCEPTED, TradeStatus.REJECTED}),
    TradeStatus.ACCEPTED: frozenset({TradeStatus.COMPLETED}),
    TradeStatus.REJECTED: frozenset(),
    TradeStatus.COMPLETED: frozenset(),
}


@dataclass(frozen=True)
class Trade:
    """A proposed exchange of one item for another between two players."""
    trade_id: str
    sender_id: str
    sender_name: str
    receiver_id: str
    receiver_name: str
    item_id: str
    object_id: str
    item_name: str
    created_at: str
    updated_at: str
    colors: Tuple[Color, ...] = ()
    region: Optional[str] = None
    status: TradeStatus = TradeStatus.PENDING
    counter_item_id: Optional[str] = None
    counter_object_id: Optional[str] = None
    counter_item_name: Optional[str] = None
    counter_colors: Tuple[Color, ...] = ()
    completed_at: Optional[str] = None

    def can_transition_to(self, status: TradeStatus) -> bool:
        return status in TRANSITIONS[self.status]

    def involves(self, profile_id: str) -> bool:
        return profile_id in (self.sender_id, self.receiver_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.trade_id,
            'senderProfileId': self.sender_id,
            'senderUsername': self.sender_name,
            'receiverProfileId': self.receiver_id,
            'receiverUsername': self.receiver_name,
            'itemId': self.item_id,
            'objectId': self.object_id,
            'itemName': self.item_name,
            'colors': list(self.colors),
            'region': self.region,
            'status': self.status.value,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'counterItemId': self.counter_item_id,
            'counterObjectId': self.counter_object_id,
            'counterItemName': self.counter_item_name,
            'counterColors': list(self.counter_colors),
            'completedAt': self.completed_at,
        }


@dataclass(frozen=True)
class TradeSummary:
    """A trade as seen from one participant's side."""
    trade_id: str
    counterpart_id: str
    counterpart_name: str
    item_name: str
    status: TradeStatus
    created_at: str
    updated_at: str
    is_initiator: bool

    @classmethod
    def for_profile(cls, trade: Trade, profile_id: str) -> 'TradeSummary':
        is_initiator = trade.sender_id == profile_id
        return cls(
            trade_id=trade.trade_id,
            counterpart_id=trade.receiver_id if is_initiator else trade.sender_id,
            counterpart_name=trade.receiver_name if is_initiator else trade.sender_name,
            item_name=trade.item_name,
            status=trade.status,
            created_at=trade.created_at,
            updated_at=trade.updated_at,
            is_initiator=is_initiator,
        )

    def to_dict(self) -> dict:
        return {
            'tradeId': self.trade_id,
            'counterpartId': self.counterpart_id,
            'counterpartUsername': self.counterpart_name,
            'itemName': self.item_name,
            'status': self.status.value,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'isInitiator': self.is_initiator,
        }


@dataclass(frozen=True)
class TradeListing:
    """Result of the administrative trade listing."""
    trades: Tuple[Trade, ...]
    total: int
    stats: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'trades': [trade.to_dict() for trade in self.trades],
            'total': self.total,
            'stats': dict(self.stats),
        }
