from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DECISION_MAX_CHARS = 200


class ChatMessage(BaseModel):
    role: str  # "system", "user" or "assistant"
    content: str


class _StateModel(BaseModel):
    # Persisted with camelCase keys (lifeSummary, conversationHistory, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Message(_StateModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: int  # epoch ms


class Decision(_StateModel):
    description: str
    explored_at: int  # epoch ms
    alternate_path: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def truncate_description(cls, v: object) -> object:
        if isinstance(v, str):
            return v[:DECISION_MAX_CHARS]
        return v


class UserState(_StateModel):
    life_summary: str = ""
    decisions: list[Decision] = Field(default_factory=list)
    conversation_history: list[Message] = Field(default_factory=list)
    last_active: int = 0


class SocketMessage(BaseModel):
    type: Literal["message", "typing", "connected", "error", "history"]
    content: str | None = None
    timestamp: str | None = None
    history: list[dict[str, str]] | None = None


class ModelCheck(BaseModel):
    available: bool


class HealthResponse(BaseModel):
    status: str
    service: str = "parallel-lives"
    checks: ModelCheck
