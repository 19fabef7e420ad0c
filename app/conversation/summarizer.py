from __future__ import annotations

import asyncio
import logging

from app.llm.client import OllamaClient
from app.memory.user_memory import UserMemory
from app.models import ChatMessage
from app.prompts import SUMMARY_PROMPT, SUMMARY_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


def should_summarize(history_length: int, interval: int = 5) -> bool:
    """True when the history (user + assistant turns) just hit a multiple of interval."""
    return interval > 0 and history_length > 0 and history_length % interval == 0


def build_summary_prompt(current_summary: str, conversation_context: str) -> str:
    if current_summary:
        return (
            f"Current summary: {current_summary}\n\n"
            f"Based on this new conversation, update the summary:\n{conversation_context}\n\n"
            f"{SUMMARY_PROMPT}"
        )
    return f"{conversation_context}\n\n{SUMMARY_PROMPT}"


async def update_life_summary(
    memory: UserMemory,
    ollama_client: OllamaClient,
    conversation_context: str,
    max_tokens: int = 256,
    temperature: float = 0.3,
    lock: asyncio.Lock | None = None,
) -> None:
    """Regenerate the user's life summary. Best-effort: failures are logged, never raised."""
    try:
        current_summary = await memory.get_life_summary()
        messages = [
            ChatMessage(role="system", content=SUMMARY_SYSTEM_PROMPT),
            ChatMessage(
                role="user",
                content=build_summary_prompt(current_summary, conversation_context),
            ),
        ]
        summary = await ollama_client.chat(
            messages, max_tokens=max_tokens, temperature=temperature
        )
        if not summary:
            return

        if lock is not None:
            async with lock:
                await memory.set_life_summary(summary)
        else:
            await memory.set_life_summary(summary)
        logger.info("Updated life summary for %s (%d chars)", memory.user_id, len(summary))
    except Exception:
        logger.exception("Life summary update failed for %s", memory.user_id)
