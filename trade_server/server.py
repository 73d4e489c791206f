"""FastAPI application exposing the trade lifecycle and player notifications."""

import asyncio
import json
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import TradeStoreError
from .message_models import (
    ClientMessage,
    ErrorMessage,
    NotificationHistoryMessage,
    NotificationReadMessage,
    PongMessage,
)
from .routers import notifications as notifications_router
from .routers import trades as trades_router
from .services import TradeStore
from .settings import Settings, load_settings
from .state import ServerState

logger = logging.getLogger(__name__)

SERVICE_NAME = "Trade Server"

PUBLIC_ENDPOINTS = [
    "/api/trades/create",
    "/api/trades/sent/{profileId}",
    "/api/trades/received/{profileId}",
    "/api/trades/offers/{profileId}",
    "/api/trades/tracking/{profileId}",
    "/api/trades/{tradeId}",
    "/api/trades/{tradeId}/accept",
    "/api/trades/{tradeId}/reject",
    "/api/trades/{tradeId}/complete",
    "/api/trades/admin/all",
    "/api/notifications/{userId}",
    "/api/notifications/{notificationId}/read",
    "/ws/notifications/{userId}",
]


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def _register_exception_handlers(app: FastAPI):
    @app.exception_handler(TradeStoreError)
    async def trade_store_error_handler(request: Request, exc: TradeStoreError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": _first_validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "message": str(exc)},
        )


async def _pump_notifications(websocket: WebSocket, queue: asyncio.Queue):
    while True:
        message = await queue.get()
        await websocket.send_text(json.dumps(message))


async def _stop_pump(pump: asyncio.Task, user_id: str):
    """Cancel a notification pump and collect whatever ended it."""
    pump.cancel()
    try:
        await pump
    except asyncio.CancelledError:
        pass
    except Exception as e:
        # Usually a send on a socket the client already closed
        logger.debug("Notification pump for %s stopped: %s", user_id, e)


async def _handle_client_message(websocket: WebSocket, store: TradeStore, data: str):
    try:
        message = ClientMessage.model_validate(json.loads(data))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        logger.warning("Invalid message from client: %s, data: %s", e, data[:200])
        await websocket.send_text(ErrorMessage(message="Invalid message format").model_dump_json())
        return

    if message.type == "ping":
        await websocket.send_text(PongMessage().model_dump_json())
    elif message.type == "mark_read":
        try:
            notification = store.mark_read(message.notification_id or "")
        except TradeStoreError as e:
            await websocket.send_text(ErrorMessage(message=e.message).model_dump_json())
            return
        await websocket.send_text(
            NotificationReadMessage(data=notification.to_dict()).model_dump_json()
        )
    else:
        logger.warning("Unknown message type: %s", message.type)
        await websocket.send_text(
            ErrorMessage(message=f"Unknown message type: {message.type}").model_dump_json()
        )


def create_app(settings: Optional[Settings] = None, store: Optional[TradeStore] = None) -> FastAPI:
    """Build an application with its own trade store and notification hub."""
    settings = settings or load_settings()
    server = ServerState(trade_store=store or TradeStore())

    app = FastAPI(title=SERVICE_NAME)
    app.state.server = server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(trades_router.router)
    app.include_router(notifications_router.router)
    _register_exception_handlers(app)

    @app.get("/")
    async def root():
        trade_count, notification_count = server.trade_store.snapshot()
        return {
            "status": f"{SERVICE_NAME} is running",
            "trades": trade_count,
            "notifications": notification_count,
            "endpoints": PUBLIC_ENDPOINTS,
        }

    @app.websocket("/ws/notifications/{user_id}")
    async def notifications_socket(websocket: WebSocket, user_id: str):
        """Push every new notification for ``user_id`` as it is created."""
        await websocket.accept()
        hub = server.notification_hub
        queue = hub.subscribe(user_id)
        pump = None
        try:
            history = server.trade_store.notifications_for(user_id)
            await websocket.send_text(
                NotificationHistoryMessage(data=[n.to_dict() for n in history]).model_dump_json()
            )
            pump = asyncio.create_task(_pump_notifications(websocket, queue))
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                data = message.get("text")
                if data is None:
                    logger.warning("Non-text frame from notification client %s", user_id)
                    await websocket.send_text(
                        ErrorMessage(message="Invalid message format").model_dump_json()
                    )
                    continue
                await _handle_client_message(websocket, server.trade_store, data)
        except WebSocketDisconnect:
            logger.info("Notification client for %s disconnected", user_id)
        finally:
            if pump is not None:
                await _stop_pump(pump, user_id)
            hub.unsubscribe(user_id, queue)

    return app


def main():
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level_value,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting %s on %s:%s", SERVICE_NAME, settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
