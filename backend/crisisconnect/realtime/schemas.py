"""WebSocket message schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class JoinMessage(BaseModel):
    """Client request to subscribe to a room."""

    type: Literal["join"] = "join"
    room: str = Field(..., min_length=1, max_length=100)


class LeaveMessage(BaseModel):
    """Client request to unsubscribe from a room."""

    type: Literal["leave"] = "leave"
    room: str = Field(..., min_length=1, max_length=100)


class EventMessage(BaseModel):
    """Server push for one state-change event."""

    type: Literal["event"] = "event"
    event: str
    data: dict[str, Any]
    timestamp: datetime


class JoinedMessage(BaseModel):
    type: Literal["joined"] = "joined"
    room: str


class LeftMessage(BaseModel):
    type: Literal["left"] = "left"
    room: str


class PingMessage(BaseModel):
    """Ping message for keep-alive."""

    type: Literal["ping"] = "ping"


class PongMessage(BaseModel):
    """Pong response for keep-alive."""

    type: Literal["pong"] = "pong"


class ErrorMessage(BaseModel):
    """Error message from server."""

    type: Literal["error"] = "error"
    message: str
