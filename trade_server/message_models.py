"""Pydantic models for request bodies and websocket messages."""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


# Required-field checks happen in the trade store so that every missing field
# is reported through the same ValidationError path.
class CreateTradeRequest(CamelModel):
    sender_profile_id: Optional[str] = None
    sender_username: Optional[str] = None
    receiver_profile_id: Optional[str] = None
    receiver_username: Optional[str] = None
    item_id: Optional[str] = None
    object_id: Optional[str] = None
    item_name: Optional[str] = None
    colors: Optional[List[Union[int, str]]] = None
    region: Optional[str] = None


class CompleteTradeRequest(CamelModel):
    counter_item_id: Optional[str] = None
    counter_object_id: Optional[str] = None
    counter_item_name: Optional[str] = None
    counter_colors: Optional[List[Union[int, str]]] = None


class ClientMessage(CamelModel):
    """Message sent by a websocket client."""
    type: str
    notification_id: Optional[str] = None


class NotificationMessage(BaseModel):
    type: Literal["notification"] = "notification"
    version: int = 1
    data: Dict[str, Any]


class NotificationHistoryMessage(BaseModel):
    type: Literal["notification_history"] = "notification_history"
    version: int = 1
    data: List[Dict[str, Any]]


class NotificationReadMessage(BaseModel):
    type: Literal["notification_read"] = "notification_read"
    version: int = 1
    data: Dict[str, Any]


class PongMessage(BaseModel):
    type: Literal["pong"] = "pong"
    version: int = 1


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    message: str
