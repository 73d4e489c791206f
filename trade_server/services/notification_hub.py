"""Service for pushing notifications to connected websocket clients."""

import asyncio
import logging
from typing import Dict, List, Set, Tuple

from ..message_models import NotificationMessage
from ..models.notification import Notification

logger = logging.getLogger(__name__)

Subscription = Tuple[asyncio.AbstractEventLoop, asyncio.Queue]


class NotificationHub:
    """
    Tracks live websocket subscriptions per user and fans out new notifications.

    ``publish`` is registered as a trade store listener and may be called from
    any thread; each message is handed to the subscriber's own event loop.
    """

    def __init__(self):
        self.subscriptions: Dict[str, List[Subscription]] = {}

    def subscribe(self, user_id: str) -> asyncio.Queue:
        """Open a subscription for a user. Must be called from a running loop."""
        queue: asyncio.Queue = asyncio.Queue()
        loop = asyncio.get_running_loop()
        self.subscriptions.setdefault(user_id, []).append((loop, queue))
        logger.info(
            "User %s subscribed to notifications (%d open)",
            user_id, len(self.subscriptions[user_id]),
        )
        return queue

    def unsubscribe(self, user_id: str, queue: asyncio.Queue):
        """Close a subscription."""
        remaining = [sub for sub in self.subscriptions.get(user_id, []) if sub[1] is not queue]
        if remaining:
            self.subscriptions[user_id] = remaining
        else:
            self.subscriptions.pop(user_id, None)
        logger.info("User %s unsubscribed from notifications", user_id)

    def connected_users(self) -> Set[str]:
        return set(self.subscriptions.keys())

    def publish(self, notification: Notification):
        """Queue a notification for every open subscription of its target user."""
        message = NotificationMessage(data=notification.to_dict()).model_dump()
        for loop, queue in list(self.subscriptions.get(notification.user_id, [])):
            try:
                loop.call_soon_threadsafe(queue.put_nowait, message)
            except RuntimeError:
                # Loop already closed; the socket handler will unsubscribe
                logger.debug("Dropping notification for closed loop of user %s", notification.user_id)
