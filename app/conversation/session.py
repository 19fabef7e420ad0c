"""One conversational turn: memory reads and writes around the model call."""

from __future__ import annotations

import asyncio
import logging

from app.config import Settings
from app.context.context_builder import build_context_prompt
from app.context.decision_detector import looks_like_decision
from app.conversation.summarizer import should_summarize, update_life_summary
from app.exceptions import InferenceError
from app.llm.client import OllamaClient
from app.memory.user_memory import UserMemory, now_ms
from app.models import ChatMessage, Decision, Message
from app.prompts import FALLBACK_REPLY

logger = logging.getLogger(__name__)

_in_flight: set[asyncio.Task] = set()


def _track_task(task: asyncio.Task) -> asyncio.Task:
    """Track a background task for graceful shutdown."""
    _in_flight.add(task)
    task.add_done_callback(_in_flight.discard)
    return task


async def wait_for_in_flight(timeout: float = 30.0) -> None:
    """Wait for all in-flight background tasks to complete."""
    if not _in_flight:
        return
    logger.info("Waiting for %d in-flight tasks (timeout=%.1fs)", len(_in_flight), timeout)
    done, pending = await asyncio.wait(_in_flight, timeout=timeout)
    if pending:
        logger.warning("%d tasks still running after timeout", len(pending))


async def _generate_reply(
    user_text: str,
    system_prompt: str,
    ollama_client: OllamaClient,
    settings: Settings,
) -> str:
    messages = [
        ChatMessage(role="system", content=system_prompt),
        ChatMessage(role="user", content=user_text),
    ]
    try:
        return await ollama_client.chat(
            messages,
            max_tokens=settings.reply_max_tokens,
            temperature=settings.reply_temperature,
        )
    except InferenceError:
        logger.exception("Reply generation failed")
        return FALLBACK_REPLY


async def handle_user_message(
    memory: UserMemory,
    user_text: str,
    ollama_client: OllamaClient,
    settings: Settings,
    lock: asyncio.Lock | None = None,
) -> str:
    """Record the user's message, generate the guide's reply and update memory.

    Storage errors propagate. A failed model call yields FALLBACK_REPLY, which
    is stored like any other reply. The life summary refresh is scheduled in
    the background and never delays the returned reply.
    """
    lock = lock or asyncio.Lock()
    async with lock:
        await memory.append_message(
            Message(role="user", content=user_text, timestamp=now_ms())
        )

        life_summary = await memory.get_life_summary()
        recent_decisions = await memory.get_recent_decision_descriptions(
            settings.context_decisions
        )
        conversation_context = await memory.get_recent_conversation_text(
            settings.context_messages
        )
        context_prompt = build_context_prompt(
            life_summary, recent_decisions, conversation_context
        )

        reply = await _generate_reply(
            user_text, settings.system_prompt + context_prompt, ollama_client, settings
        )

        await memory.append_message(
            Message(role="assistant", content=reply, timestamp=now_ms())
        )

        if looks_like_decision(user_text):
            await memory.append_decision(
                Decision(description=user_text, explored_at=now_ms())
            )
            logger.info("Recorded decision for %s: %s", memory.user_id, user_text[:80])

        history_length = await memory.get_history_length()

    if should_summarize(history_length, settings.summary_interval):
        _track_task(
            asyncio.create_task(
                update_life_summary(
                    memory,
                    ollama_client,
                    conversation_context,
                    max_tokens=settings.summary_max_tokens,
                    temperature=settings.summary_temperature,
                    lock=lock,
                )
            )
        )
    return reply
