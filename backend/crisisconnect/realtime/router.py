"""WebSocket router for real-time state-change events."""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from crisisconnect.models.enums import Role
from crisisconnect.realtime.schemas import (
    ErrorMessage,
    JoinedMessage,
    JoinMessage,
    LeaveMessage,
    LeftMessage,
    PongMessage,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_events(
    websocket: WebSocket,
    user_id: str | None = None,
    role: str | None = None,
):
    """
    WebSocket endpoint for state-change events.

    Protocol:
    - Client connects with its identity as query parameters
    - Every session receives broadcast events
    - Client joins rooms ("volunteers", "volunteer-<profileId>") for targeted events
    - Server sends pong in response to ping for keep-alive

    Message formats:
    Client -> Server:
        {"type": "join", "room": "volunteers"}
        {"type": "leave", "room": "volunteers"}
        {"type": "ping"}

    Server -> Client:
        {"type": "event", "event": "new-request", "data": {...}, "timestamp": "2026-01-18T10:30:00Z"}
        {"type": "joined", "room": "volunteers"}
        {"type": "left", "room": "volunteers"}
        {"type": "pong"}
        {"type": "error", "message": "..."}
    """
    manager = websocket.app.state.realtime
    policy = websocket.app.state.room_policy

    try:
        session_role = Role(role.lower()) if role else None
    except ValueError:
        session_role = None

    session_id = await manager.connect(websocket, user_id=user_id, role=session_role)

    try:
        while True:
            raw_message = await websocket.receive_text()

            try:
                data = json.loads(raw_message)
                msg_type = data.get("type") if isinstance(data, dict) else None

                if msg_type == "join":
                    msg = JoinMessage.model_validate(data)
                    if await policy.may_join(user_id, session_role, msg.room):
                        await manager.join_room(session_id, msg.room)
                        await websocket.send_json(JoinedMessage(room=msg.room).model_dump())
                    else:
                        logger.warning(
                            f"Refused join of {msg.room} for user={user_id} role={role}"
                        )
                        error = ErrorMessage(message=f"Not allowed to join room: {msg.room}")
                        await websocket.send_json(error.model_dump())

                elif msg_type == "leave":
                    msg = LeaveMessage.model_validate(data)
                    await manager.leave_room(session_id, msg.room)
                    await websocket.send_json(LeftMessage(room=msg.room).model_dump())

                elif msg_type == "ping":
                    # Respond with pong for keep-alive
                    await websocket.send_json(PongMessage().model_dump())

                else:
                    # Unknown message type
                    error = ErrorMessage(message=f"Unknown message type: {msg_type}")
                    await websocket.send_json(error.model_dump())

            except json.JSONDecodeError:
                error = ErrorMessage(message="Invalid JSON")
                await websocket.send_json(error.model_dump())
            except ValidationError as e:
                error = ErrorMessage(message=f"Invalid message: {e.errors()[0]['msg']}")
                await websocket.send_json(error.model_dump())

    except WebSocketDisconnect:
        await manager.disconnect(session_id)
    except Exception as e:
        logger.exception(f"WebSocket error: {e}")
        await manager.disconnect(session_id)
