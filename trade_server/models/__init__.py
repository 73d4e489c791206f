"""Data models for the trade server."""

from .trade import Trade, TradeListing, TradeStatus, TradeSummary
from .notification import (
    Notification,
    NotificationType,
    TradeCompletedPayload,
    TradeDecisionPayload,
    TradeOfferPayload,
)

__all__ = [
    'Trade',
    'TradeListing',
    'TradeStatus',
    'TradeSummary',
    'Notification',
    'NotificationType',
    'TradeCompletedPayload',
    'TradeDecisionPayload',
    'TradeOfferPayload',
]
