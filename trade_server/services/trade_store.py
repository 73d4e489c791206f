"""In-memory store for trades and the notifications their lifecycle produces."""

import itertools
import logging
import threading
import uuid
from collections import Counter
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..errors import InvalidStateError, NotFoundError, ValidationError
from ..models.notification import (
    Notification,
    NotificationPayload,
    NotificationType,
    TradeCompletedPayload,
    TradeDecisionPayload,
    TradeOfferPayload,
)
from ..models.trade import Color, Trade, TradeListing, TradeStatus, TradeSummary

logger = logging.getLogger(__name__)

NOTIFICATION_LIMIT = 50
DEFAULT_LIST_LIMIT = 100

Clock = Callable[[], str]
IdFactory = Callable[[], str]
NotificationListener = Callable[[Notification], None]


def utc_timestamp() -> str:
    """Current UTC time as a sortable ISO-8601 string, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id() -> str:
    return str(uuid.uuid4())


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require(fields: Dict[str, object]) -> None:
    missing = [name for name, value in fields.items() if _is_blank(value)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


class TradeStore:
    """
    Owns every trade and notification for the lifetime of the process.

    All operations run under one lock. Returned records are frozen dataclasses,
    so nothing a caller holds changes when the store moves on.
    """

    def __init__(self, clock: Optional[Clock] = None, id_factory: Optional[IdFactory] = None):
        self._clock = clock or utc_timestamp
        self._new_id = id_factory or new_id
        self._lock = threading.Lock()
        self._ticks = itertools.count(1)

        self._trades: Dict[str, Trade] = {}
        self._issued_trade_ids = set()
        # trade_id -> tick at creation / last update, breaks timestamp ties
        self._created_tick: Dict[str, int] = {}
        self._updated_tick: Dict[str, int] = {}

        self._notifications: Dict[str, Notification] = {}
        self._notification_tick: Dict[str, int] = {}

        self._listeners: List[NotificationListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: NotificationListener) -> None:
        """Register a callback invoked for every notification the store creates."""
        self._listeners.append(listener)

    def remove_listener(self, listener: NotificationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _dispatch(self, notifications: Iterable[Notification]) -> None:
        for notification in notifications:
            for listener in list(self._listeners):
                try:
                    listener(notification)
                except Exception:
                    logger.exception(
                        "Notification listener failed for %s", notification.notification_id
                    )

    # ------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # ------------------------------------------------------------------

    def _allocate_trade_id(self) -> str:
        trade_id = self._new_id()
        while trade_id in self._issued_trade_ids:
            trade_id = self._new_id()
        self._issued_trade_ids.add(trade_id)
        return trade_id

    def _get_trade(self, trade_id: str) -> Trade:
        trade = self._trades.get(trade_id)
        if trade is None:
            raise NotFoundError(f"Trade not found: {trade_id}")
        return trade

    def _save_trade(self, trade: Trade, created: bool = False) -> None:
        tick = next(self._ticks)
        self._trades[trade.trade_id] = trade
        if created:
            self._created_tick[trade.trade_id] = tick
        self._updated_tick[trade.trade_id] = tick

    def _notify(self, notification_type: NotificationType, user_id: str,
                payload: NotificationPayload, created_at: str) -> Notification:
        notification_id = self._new_id()
        while notification_id in self._notifications:
            notification_id = self._new_id()
        notification = Notification(
            notification_id=notification_id,
            type=notification_type,
            user_id=user_id,
            payload=payload,
            created_at=created_at,
        )
        self._notifications[notification_id] = notification
        self._notification_tick[notification_id] = next(self._ticks)
        return notification

    def _newest_created_first(self, trades: Iterable[Trade]) -> List[Trade]:
        return sorted(
            trades,
            key=lambda t: (t.created_at, self._created_tick[t.trade_id]),
            reverse=True,
        )

    def _transition(self, trade_id: str, target: TradeStatus, now: str, **changes) -> Trade:
        trade = self._get_trade(trade_id)
        if not trade.can_transition_to(target):
            logger.warning(
                "Rejected transition of trade %s from %s to %s",
                trade_id, trade.status.value, target.value,
            )
            raise InvalidStateError(
                f"Trade cannot be {target.value}: current status is {trade.status.value}",
                trade.status.value,
            )
        updated = replace(trade, status=target, updated_at=now, **changes)
        self._save_trade(updated)
        logger.info("Trade %s: %s -> %s", trade_id, trade.status.value, target.value)
        return updated

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_trade(self, sender_id: str, sender_name: str, receiver_id: str,
                     receiver_name: str, item_id: str, object_id: str, item_name: str,
                     colors: Optional[Sequence[Color]] = None,
                     region: Optional[str] = None) -> Trade:
        """Open a new pending trade and offer it to the receiver."""
        _require({
            'senderProfileId': sender_id,
            'receiverProfileId': receiver_id,
            'itemId': item_id,
            'objectId': object_id,
            'itemName': item_name,
        })
        sender_label = sender_name or sender_id

        with self._lock:
            now = self._clock()
            trade = Trade(
                trade_id=self._allocate_trade_id(),
                sender_id=sender_id,
                sender_name=sender_name or "",
                receiver_id=receiver_id,
                receiver_name=receiver_name or "",
                item_id=item_id,
                object_id=object_id,
                item_name=item_name,
                colors=tuple(colors or ()),
                region=region,
                created_at=now,
                updated_at=now,
            )
            self._save_trade(trade, created=True)
            offer = self._notify(
                NotificationType.TRADE_OFFER,
                receiver_id,
                TradeOfferPayload(
                    trade_id=trade.trade_id,
                    sender_name=sender_label,
                    item_name=item_name,
                    message=f"{sender_label} sent you a trade offer for {item_name}",
                ),
                now,
            )
        logger.info(
            "Trade %s created: %s offers %s to %s",
            trade.trade_id, sender_id, item_name, receiver_id,
        )
        self._dispatch([offer])
        return trade

    def accept(self, trade_id: str) -> Trade:
        return self._decide(trade_id, TradeStatus.ACCEPTED, NotificationType.TRADE_ACCEPTED)

    def reject(self, trade_id: str) -> Trade:
        return self._decide(trade_id, TradeStatus.REJECTED, NotificationType.TRADE_REJECTED)

    def _decide(self, trade_id: str, target: TradeStatus,
                notification_type: NotificationType) -> Trade:
        with self._lock:
            trade = self._transition(trade_id, target, self._clock())
            receiver_label = trade.receiver_name or trade.receiver_id
            notice = self._notify(
                notification_type,
                trade.sender_id,
                TradeDecisionPayload(
                    trade_id=trade.trade_id,
                    receiver_name=receiver_label,
                    item_name=trade.item_name,
                    message=f"{receiver_label} {target.value} your trade offer for {trade.item_name}",
                ),
                trade.updated_at,
            )
        self._dispatch([notice])
        return trade

    def complete(self, trade_id: str, counter_item_id: str, counter_object_id: str,
                 counter_item_name: str,
                 counter_colors: Optional[Sequence[Color]] = None) -> Trade:
        """Close an accepted trade with the receiver's counter item."""
        _require({
            'counterItemId': counter_item_id,
            'counterObjectId': counter_object_id,
            'counterItemName': counter_item_name,
        })

        with self._lock:
            now = self._clock()
            trade = self._transition(
                trade_id,
                TradeStatus.COMPLETED,
                now,
                counter_item_id=counter_item_id,
                counter_object_id=counter_object_id,
                counter_item_name=counter_item_name,
                counter_colors=tuple(counter_colors or ()),
                completed_at=now,
            )
            sender_label = trade.sender_name or trade.sender_id
            receiver_label = trade.receiver_name or trade.receiver_id
            notices = [
                self._completion_notice(
                    trade, trade.sender_id, receiver_label,
                    gave=trade.item_name, received=counter_item_name,
                ),
                self._completion_notice(
                    trade, trade.receiver_id, sender_label,
                    gave=counter_item_name, received=trade.item_name,
                ),
            ]
        self._dispatch(notices)
        return trade

    def _completion_notice(self, trade: Trade, user_id: str, partner: str,
                           gave: str, received: str) -> Notification:
        return self._notify(
            NotificationType.TRADE_COMPLETED,
            user_id,
            TradeCompletedPayload(
                trade_id=trade.trade_id,
                partner_name=partner,
                gave_item_name=gave,
                received_item_name=received,
                message=f"Trade with {partner} completed: you gave {gave} and received {received}",
            ),
            trade.updated_at,
        )

    def delete_trade(self, trade_id: str) -> Trade:
        """Remove a trade permanently. Its notifications are kept."""
        with self._lock:
            trade = self._get_trade(trade_id)
            del self._trades[trade_id]
            del self._created_tick[trade_id]
            del self._updated_tick[trade_id]
        logger.info("Trade %s deleted (status was %s)", trade_id, trade.status.value)
        return trade

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_trade(self, trade_id: str) -> Trade:
        with self._lock:
            return self._get_trade(trade_id)

    def list_sent(self, profile_id: str) -> List[Trade]:
        with self._lock:
            return self._newest_created_first(
                t for t in self._trades.values() if t.sender_id == profile_id
            )

    def list_received(self, profile_id: str) -> List[Trade]:
        with self._lock:
            return self._newest_created_first(
                t for t in self._trades.values() if t.receiver_id == profile_id
            )

    def list_offers(self, profile_id: str) -> List[Trade]:
        return [t for t in self.list_received(profile_id) if t.status is TradeStatus.PENDING]

    def tracking_for(self, profile_id: str) -> List[TradeSummary]:
        """Every trade the profile takes part in, most recently updated first."""
        with self._lock:
            trades = sorted(
                (t for t in self._trades.values() if t.involves(profile_id)),
                key=lambda t: (t.updated_at, self._updated_tick[t.trade_id]),
                reverse=True,
            )
        return [TradeSummary.for_profile(t, profile_id) for t in trades]

    def list_all(self, status: Optional[TradeStatus] = None,
                 limit: int = DEFAULT_LIST_LIMIT) -> TradeListing:
        """
        Administrative listing.

        ``total`` counts the trades matching the filter before truncation;
        ``stats`` always counts every status over the whole store.
        """
        if limit < 0:
            raise ValidationError("limit must not be negative")
        if status is not None:
            try:
                status = TradeStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown trade status: {status}")

        with self._lock:
            counts = Counter(t.status for t in self._trades.values())
            matching = self._newest_created_first(
                t for t in self._trades.values() if status is None or t.status is status
            )
        stats = {s.value: counts.get(s, 0) for s in TradeStatus}
        return TradeListing(trades=tuple(matching[:limit]), total=len(matching), stats=stats)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def notifications_for(self, user_id: str) -> List[Notification]:
        """The most recent notifications for a user, newest first."""
        with self._lock:
            notifications = sorted(
                (n for n in self._notifications.values() if n.user_id == user_id),
                key=lambda n: (n.created_at, self._notification_tick[n.notification_id]),
                reverse=True,
            )
        return notifications[:NOTIFICATION_LIMIT]

    def mark_read(self, notification_id: str) -> Notification:
        with self._lock:
            notification = self._notifications.get(notification_id)
            if notification is None:
                raise NotFoundError(f"Notification not found: {notification_id}")
            if not notification.read:
                notification = replace(notification, read=True)
                self._notifications[notification_id] = notification
        return notification

    def snapshot(self) -> Tuple[int, int]:
        """Number of stored trades and notifications."""
        with self._lock:
            return len(self._trades), len(self._notifications)
