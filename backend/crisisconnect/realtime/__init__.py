"""Realtime transport: WebSocket sessions and rooms."""

from crisisconnect.realtime.manager import ConnectionManager
from crisisconnect.realtime.rooms import RoomPolicy
from crisisconnect.realtime.router import router as websocket_router

__all__ = ["ConnectionManager", "RoomPolicy", "websocket_router"]
