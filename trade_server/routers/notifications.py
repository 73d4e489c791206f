"""Notification REST endpoints."""

from fastapi import APIRouter, Depends

from ..services.trade_store import TradeStore
from ..state import get_trade_store

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("/{user_id}")
async def list_notifications(user_id: str, store: TradeStore = Depends(get_trade_store)):
    notifications = store.notifications_for(user_id)
    return {
        "success": True,
        "notifications": [notification.to_dict() for notification in notifications],
    }


@router.post("/{notification_id}/read")
async def mark_read(notification_id: str, store: TradeStore = Depends(get_trade_store)):
    notification = store.mark_read(notification_id)
    return {"success": True, "notification": notification.to_dict()}
