"""Application state and the dependencies that hand it to request handlers."""

from dataclasses import dataclass, field

from fastapi import Request

from .services import NotificationHub, TradeStore


@dataclass
class ServerState:
    """Service instances owned by one application."""
    trade_store: TradeStore = field(default_factory=TradeStore)
    notification_hub: NotificationHub = field(default_factory=NotificationHub)

    def __post_init__(self):
        self.trade_store.add_listener(self.notification_hub.publish)


def get_server_state(request: Request) -> ServerState:
    return request.app.state.server


def get_trade_store(request: Request) -> TradeStore:
    return get_server_state(request).trade_store
