"""Services for the trade server."""

from .trade_store import TradeStore
from .notification_hub import NotificationHub

__all__ = [
    'TradeStore',
    'NotificationHub',
]
