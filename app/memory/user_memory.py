"""Per-user conversational memory.

UserMemory owns one user's UserState. Every mutation goes through it and is
followed by a full-state write to the store; there is no partial persistence
and no rollback, so a failed write leaves the in-memory state ahead of the
stored one.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from pydantic import ValidationError

from app.database.repository import StateRepository
from app.exceptions import StorageReadError
from app.models import Decision, Message, UserState

logger = logging.getLogger(__name__)

SPEAKER_LABELS = {"user": "User", "assistant": "Guide"}


def now_ms() -> int:
    return int(time.time() * 1000)


class UserMemory:
    def __init__(
        self,
        user_id: str,
        store: StateRepository,
        max_messages: int = 20,
        max_decisions: int = 50,
        clock: Callable[[], int] = now_ms,
    ):
        self.user_id = user_id
        self._store = store
        self._max_messages = max_messages
        self._max_decisions = max_decisions
        self._clock = clock
        self._state = UserState()
        self._loaded = False
        self._load_lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self) -> None:
        """Fetch persisted state on first use. Later calls are no-ops."""
        if self._loaded:
            return
        async with self._load_lock:
            # Another caller may have finished loading while we waited
            if self._loaded:
                return
            raw = await self._store.get(self.user_id)
            if raw:
                try:
                    self._state = UserState.model_validate_json(raw)
                except ValidationError as e:
                    raise StorageReadError(self.user_id, "stored state is not valid") from e
                logger.debug(
                    "Loaded state for %s (%d messages, %d decisions)",
                    self.user_id,
                    len(self._state.conversation_history),
                    len(self._state.decisions),
                )
            else:
                self._state = UserState(last_active=self._clock())
            self._loaded = True

    async def _save(self) -> None:
        await self._store.put(self.user_id, self._state.model_dump_json(by_alias=True))

    async def append_message(self, message: Message) -> None:
        await self.load()
        history = self._state.conversation_history
        history.append(message)
        self._state.last_active = max(self._state.last_active, self._clock())
        if len(history) > self._max_messages:
            self._state.conversation_history = history[-self._max_messages:]
        await self._save()

    async def append_decision(self, decision: Decision) -> None:
        await self.load()
        decisions = self._state.decisions
        decisions.append(decision)
        if len(decisions) > self._max_decisions:
            self._state.decisions = decisions[-self._max_decisions:]
        await self._save()

    async def set_life_summary(self, summary: str) -> None:
        await self.load()
        self._state.life_summary = summary
        await self._save()

    async def get_state(self) -> UserState:
        """Return a copy of the current state; changes to it are not kept."""
        await self.load()
        return self._state.model_copy(deep=True)

    async def get_life_summary(self) -> str:
        await self.load()
        return self._state.life_summary

    async def get_history_length(self) -> int:
        await self.load()
        return len(self._state.conversation_history)

    async def get_recent_conversation_text(self, n: int = 10) -> str:
        """Last n messages as speaker-labeled lines, newest last."""
        await self.load()
        if n <= 0:
            return ""
        return "\n\n".join(
            f"{SPEAKER_LABELS[m.role]}: {m.content}"
            for m in self._state.conversation_history[-n:]
        )

    async def get_recent_decision_descriptions(self, n: int = 5) -> list[str]:
        await self.load()
        if n <= 0:
            return []
        return [d.description for d in self._state.decisions[-n:]]
