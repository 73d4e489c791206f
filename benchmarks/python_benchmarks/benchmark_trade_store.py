"""Benchmark trade store operations and response serialization."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from trade_server.message_models import NotificationMessage
from trade_server.services import TradeStore


def _create(store, sender="u1", receiver="u2", item_name="Red Hat"):
    return store.create_trade(sender, "Alice", receiver, "Bob", "hat123", "obj1", item_name,
                              colors=["#ff0000"], region="US")


@pytest.fixture
def populated_store():
    """Store holding 1000 trades spread over 50 players."""
    store = TradeStore()
    for i in range(1000):
        trade = _create(store, sender=f"u{i % 50}", receiver=f"u{(i + 1) % 50}",
                        item_name=f"Item {i}")
        if i % 3 == 0:
            store.accept(trade.trade_id)
    return store


def test_create_accept_complete(benchmark):
    """Benchmark one full trade lifecycle."""
    store = TradeStore()

    def lifecycle():
        trade = _create(store)
        store.accept(trade.trade_id)
        return store.complete(trade.trade_id, "shoe1", "obj2", "Blue Shoes")

    result = benchmark(lifecycle)
    assert result.status.value == "completed"


def test_tracking_lookup(benchmark, populated_store):
    """Benchmark the per-player tracking view on a busy store."""
    result = benchmark(populated_store.tracking_for, "u7")
    assert len(result) == 40


def test_admin_listing_serialization(benchmark, populated_store):
    """Benchmark the administrative listing as sent over HTTP."""

    def serialize():
        return json.dumps(populated_store.list_all().to_dict())

    result = benchmark(serialize)
    assert '"stats"' in result


def test_notification_message_serialization(benchmark, populated_store):
    """Benchmark websocket notification message serialization."""
    notification = populated_store.notifications_for("u3")[0]

    def serialize():
        return json.dumps(NotificationMessage(data=notification.to_dict()).model_dump())

    result = benchmark(serialize)
    assert result.startswith('{"type": "notification"')


def test_concurrent_creates(benchmark):
    """Benchmark concurrent trade creation through the store lock."""
    store = TradeStore()

    def concurrent_creates():
        with ThreadPoolExecutor(max_workers=10) as executor:
            futures = [executor.submit(_create, store, f"u{i}", f"u{i + 1}") for i in range(100)]
            results = [f.result() for f in futures]
        return len({trade.trade_id for trade in results})

    result = benchmark(concurrent_creates)
    assert result == 100


if __name__ == '__main__':
    pytest.main([__file__, '-v', '--benchmark-only'])
