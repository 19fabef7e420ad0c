"""ContextBuilder: assembles the memory sections appended to the guide's system prompt.

Each section is introduced by a bracketed header line, e.g.

    [USER'S LIFE STORY SO FAR]
    Grew up in Ohio, moved to NYC at 24.

Empty sections are skipped, so a user with no memory yet produces an empty
context block and the model sees the bare system prompt.

Usage:
    context = build_context_prompt(summary, decisions, conversation)
    system_msg = settings.system_prompt + context
"""

from __future__ import annotations

from app.prompts import CONVERSATION_HEADER, DECISIONS_HEADER, LIFE_STORY_HEADER


class ContextBuilder:
    """Accumulates (header, content) sections in insertion order."""

    def __init__(self) -> None:
        self._sections: list[tuple[str, str]] = []

    def add_section(self, header: str, content: str | None) -> ContextBuilder:
        """Add a labeled section. Skipped if content is empty or None."""
        if content:
            self._sections.append((header, content))
        return self

    def build(self) -> str:
        if not self._sections:
            return ""
        # Leading newline keeps a blank line between the system prompt and the first header
        return "\n" + "".join(f"\n{header}\n{content}\n" for header, content in self._sections)


def build_context_prompt(
    life_summary: str,
    recent_decisions: list[str],
    conversation_context: str,
) -> str:
    return (
        ContextBuilder()
        .add_section(LIFE_STORY_HEADER, life_summary)
        .add_section(DECISIONS_HEADER, "\n".join(recent_decisions))
        .add_section(CONVERSATION_HEADER, conversation_context)
        .build()
    )
