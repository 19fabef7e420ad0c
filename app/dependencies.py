from __future__ import annotations

from fastapi.requests import HTTPConnection

from app.config import Settings
from app.llm.client import OllamaClient
from app.memory.registry import UserMemoryRegistry


# HTTPConnection covers both Request and WebSocket
def get_settings(conn: HTTPConnection) -> Settings:
    return conn.app.state.settings


def get_ollama_client(conn: HTTPConnection) -> OllamaClient:
    return conn.app.state.ollama_client


def get_memory_registry(conn: HTTPConnection) -> UserMemoryRegistry:
    return conn.app.state.memory_registry
