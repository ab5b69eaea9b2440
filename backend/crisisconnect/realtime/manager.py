"""WebSocket connection manager with named rooms."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from fastapi import WebSocket

from crisisconnect.models.enums import Role
from crisisconnect.realtime.schemas import EventMessage

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """One connected client and the rooms it has joined."""

    websocket: WebSocket
    user_id: str | None = None
    role: Role | None = None
    rooms: set[str] = field(default_factory=set)
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ConnectionManager:
    """
    Manages WebSocket sessions and delivers events to rooms or to everyone.

    Delivery is at-most-once: events emitted while nobody is connected, or
    to a room nobody joined, are dropped. Designed for single-instance
    deployment; can be extended with Redis pub/sub for multi-instance
    horizontal scaling.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        """Number of active connections."""
        return len(self._sessions)

    async def connect(
        self, websocket: WebSocket, user_id: str | None = None, role: Role | None = None
    ) -> str:
        """Accept a new WebSocket connection and return its session id."""
        await websocket.accept()
        session_id = str(uuid4())
        async with self._lock:
            self._sessions[session_id] = Session(websocket=websocket, user_id=user_id, role=role)
        logger.info(f"WebSocket connected. Total connections: {self.connection_count}")
        return session_id

    async def disconnect(self, session_id: str) -> None:
        """Remove a disconnected session."""
        async with self._lock:
            self._sessions.pop(session_id, None)
        logger.info(f"WebSocket disconnected. Total connections: {self.connection_count}")

    def session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    async def join_room(self, session_id: str, room: str) -> bool:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.rooms.add(room)
        logger.debug(f"Session {session_id} joined {room}")
        return True

    async def leave_room(self, session_id: str, room: str) -> bool:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.rooms.discard(room)
        logger.debug(f"Session {session_id} left {room}")
        return True

    def room_size(self, room: str) -> int:
        return sum(1 for session in self._sessions.values() if room in session.rooms)

    async def emit(self, event: str, payload: dict[str, Any], room: str | None = None) -> int:
        """
        Send an event to every session in ``room``, or to all sessions.

        Returns the number of sessions the event was sent to.
        """
        async with self._lock:
            if room is None:
                targets = list(self._sessions.items())
            else:
                targets = [
                    (session_id, session)
                    for session_id, session in self._sessions.items()
                    if room in session.rooms
                ]

            if not targets:
                return 0

            message = EventMessage(event=event, data=payload, timestamp=datetime.now(UTC))
            body = message.model_dump(mode="json")
            sends = [
                self._send_safe(session_id, session.websocket, body)
                for session_id, session in targets
            ]
            await asyncio.gather(*sends, return_exceptions=True)

        logger.debug(f"Sent {event} to {len(targets)} sessions ({room or 'broadcast'})")
        return len(targets)

    async def _send_safe(self, session_id: str, websocket: WebSocket, body: dict) -> None:
        """Send message to websocket, handling errors gracefully."""
        try:
            await websocket.send_json(body)
        except Exception as e:
            logger.warning(f"Failed to send to websocket: {e}")
            # Schedule disconnect (don't do it here to avoid deadlock)
            asyncio.create_task(self.disconnect(session_id))
