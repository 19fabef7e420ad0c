from __future__ import annotations

import datetime
import json
import logging
import secrets
import string

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from app.conversation.session import handle_user_message
from app.dependencies import get_memory_registry, get_ollama_client, get_settings
from app.exceptions import ParallelLivesError
from app.memory.user_memory import now_ms
from app.models import SocketMessage
from app.prompts import ERROR_REPLY, WELCOME_BACK, WELCOME_NEW

logger = logging.getLogger(__name__)

router = APIRouter()

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_user_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"user_{now_ms()}_{suffix}"


def _iso_now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


async def _send(websocket: WebSocket, message: SocketMessage) -> None:
    await websocket.send_text(message.model_dump_json(exclude_none=True))


@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    user_id: str = Query(alias="userId", default=""),
) -> None:
    user_id = user_id or generate_user_id()
    settings = get_settings(websocket)
    ollama_client = get_ollama_client(websocket)
    registry = get_memory_registry(websocket)

    await websocket.accept()
    logger.info("WebSocket connected [%s]", user_id)

    try:
        memory = await registry.get(user_id)
        state = await memory.get_state()
    except ParallelLivesError:
        logger.exception("Failed to load state for %s", user_id)
        await _send(websocket, SocketMessage(type="error", content=ERROR_REPLY))
        await websocket.close()
        return

    await _send(
        websocket,
        SocketMessage(
            type="history",
            history=[
                {"role": m.role, "content": m.content} for m in state.conversation_history
            ],
        ),
    )
    await _send(
        websocket,
        SocketMessage(
            type="connected",
            content=WELCOME_BACK if state.life_summary else WELCOME_NEW,
            timestamp=_iso_now(),
        ),
    )

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                # Binary frames are not part of the protocol
                logger.warning("Non-text frame from %s", user_id)
                await _send(websocket, SocketMessage(type="error", content=ERROR_REPLY))
                continue
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Malformed frame from %s: %s", user_id, raw[:80])
                await _send(websocket, SocketMessage(type="error", content=ERROR_REPLY))
                continue

            if not isinstance(data, dict) or data.get("type") != "message":
                continue
            content = data.get("content")
            if not isinstance(content, str) or not content:
                continue

            logger.info("Incoming [%s]: %s", user_id, content[:80])
            await _send(websocket, SocketMessage(type="typing"))
            try:
                reply = await handle_user_message(
                    memory,
                    content,
                    ollama_client,
                    settings,
                    lock=registry.lock(user_id),
                )
            except Exception:
                logger.exception("Failed to handle message from %s", user_id)
                await _send(websocket, SocketMessage(type="error", content=ERROR_REPLY))
                continue

            await _send(
                websocket,
                SocketMessage(type="message", content=reply, timestamp=_iso_now()),
            )
    except WebSocketDisconnect:
        logger.info("WebSocket closed [%s]", user_id)
