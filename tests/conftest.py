from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from trade_server.server import create_app
from trade_server.services import TradeStore
from trade_server.settings import Settings


class FakeClock:
    """Deterministic clock; every call moves time forward by ``step``."""

    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc), step=timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> str:
        self.now += self.step
        return self.now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SequentialIds:
    def __init__(self, prefix="id"):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return TradeStore(clock=clock, id_factory=SequentialIds())


@pytest.fixture
def make_trade(store):
    """Create a trade from Alice (u1) to Bob (u2) unless overridden."""

    def _make(**overrides):
        fields = dict(
            sender_id="u1",
            sender_name="Alice",
            receiver_id="u2",
            receiver_name="Bob",
            item_id="hat123",
            object_id="obj1",
            item_name="Red Hat",
            colors=["#ff0000"],
            region="US",
        )
        fields.update(overrides)
        return store.create_trade(**fields)

    return _make


@pytest.fixture
def app(store):
    return create_app(Settings(), store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


TRADE_BODY = {
    "senderProfileId": "u1",
    "senderUsername": "Alice",
    "receiverProfileId": "u2",
    "receiverUsername": "Bob",
    "itemId": "hat123",
    "objectId": "obj1",
    "itemName": "Red Hat",
    "colors": ["#ff0000", 3],
    "region": "US",
}

COUNTER_BODY = {
    "counterItemId": "shoe1",
    "counterObjectId": "obj2",
    "counterItemName": "Blue Shoes",
    "counterColors": ["#0000ff"],
}


@pytest.fixture
def trade_body():
    return dict(TRADE_BODY)


@pytest.fixture
def counter_body():
    return dict(COUNTER_BODY)
