"""Trade REST endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from ..message_models import CompleteTradeRequest, CreateTradeRequest
from ..services.trade_store import DEFAULT_LIST_LIMIT, TradeStore
from ..state import get_trade_store

router = APIRouter(prefix="/api/trades", tags=["Trades"])


@router.post("/create")
async def create_trade(body: CreateTradeRequest, store: TradeStore = Depends(get_trade_store)):
    trade = store.create_trade(
        sender_id=body.sender_profile_id,
        sender_name=body.sender_username,
        receiver_id=body.receiver_profile_id,
        receiver_name=body.receiver_username,
        item_id=body.item_id,
        object_id=body.object_id,
        item_name=body.item_name,
        colors=body.colors,
        region=body.region,
    )
    return {"success": True, "trade": trade.to_dict()}


@router.get("/sent/{profile_id}")
async def list_sent(profile_id: str, store: TradeStore = Depends(get_trade_store)):
    trades = store.list_sent(profile_id)
    return {"success": True, "trades": [trade.to_dict() for trade in trades]}


@router.get("/received/{profile_id}")
async def list_received(profile_id: str, store: TradeStore = Depends(get_trade_store)):
    trades = store.list_received(profile_id)
    return {"success": True, "trades": [trade.to_dict() for trade in trades]}


@router.get("/offers/{profile_id}")
async def list_offers(profile_id: str, store: TradeStore = Depends(get_trade_store)):
    trades = store.list_offers(profile_id)
    return {"success": True, "trades": [trade.to_dict() for trade in trades]}


@router.get("/tracking/{profile_id}")
async def tracking(profile_id: str, store: TradeStore = Depends(get_trade_store)):
    summaries = store.tracking_for(profile_id)
    return {"success": True, "trades": [summary.to_dict() for summary in summaries]}


@router.get("/admin/all")
async def list_all(status: Optional[str] = None, limit: int = DEFAULT_LIST_LIMIT,
                   store: TradeStore = Depends(get_trade_store)):
    listing = store.list_all(status or None, limit)
    return {"success": True, **listing.to_dict()}


@router.get("/{trade_id}")
async def get_trade(trade_id: str, store: TradeStore = Depends(get_trade_store)):
    return {"success": True, "trade": store.get_trade(trade_id).to_dict()}


@router.post("/{trade_id}/accept")
async def accept_trade(trade_id: str, store: TradeStore = Depends(get_trade_store)):
    trade = store.accept(trade_id)
    return {"success": True, "trade": trade.to_dict()}


@router.post("/{trade_id}/reject")
async def reject_trade(trade_id: str, store: TradeStore = Depends(get_trade_store)):
    trade = store.reject(trade_id)
    return {"success": True, "trade": trade.to_dict()}


@router.post("/{trade_id}/complete")
async def complete_trade(trade_id: str, body: CompleteTradeRequest,
                         store: TradeStore = Depends(get_trade_store)):
    trade = store.complete(
        trade_id,
        counter_item_id=body.counter_item_id,
        counter_object_id=body.counter_object_id,
        counter_item_name=body.counter_item_name,
        counter_colors=body.counter_colors,
    )
    return {"success": True, "trade": trade.to_dict()}


@router.delete("/{trade_id}")
async def delete_trade(trade_id: str, store: TradeStore = Depends(get_trade_store)):
    trade = store.delete_trade(trade_id)
    return {"success": True, "trade": trade.to_dict()}
