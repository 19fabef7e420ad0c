import asyncio
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database.db import init_db
from app.database.repository import StateRepository
from app.llm.client import OllamaClient
from app.main import app
from app.memory.registry import UserMemoryRegistry
from app.memory.user_memory import UserMemory

TEST_SETTINGS = Settings(
    ollama_base_url="http://localhost:11434",
    ollama_model="test-model",
    database_path=":memory:",
    log_json=False,
)


class FakeClock:
    """Settable epoch-ms clock for deterministic lastActive checks."""

    def __init__(self, value: int = 0):
        self.value = value

    def __call__(self) -> int:
        return self.value


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


# --- Async fixtures for unit tests ---


@pytest.fixture
async def db_connection():
    conn = await init_db(":memory:")
    yield conn
    await conn.close()


@pytest.fixture
async def store(db_connection):
    return StateRepository(db_connection)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_700_000_000_000)


@pytest.fixture
async def memory(store, clock) -> UserMemory:
    return UserMemory("user_test", store, max_messages=20, max_decisions=50, clock=clock)


@pytest.fixture
async def registry(store) -> UserMemoryRegistry:
    return UserMemoryRegistry(store, max_messages=20, max_decisions=50)


def make_ollama_response(content: str) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.raise_for_status = MagicMock()
    mock_response.json.return_value = {"message": {"role": "assistant", "content": content}}
    return mock_response


# --- Sync fixture for TestClient-based integration tests ---


@pytest.fixture
def client(settings: Settings) -> TestClient:
    mock_http = AsyncMock()
    mock_http.post = AsyncMock(return_value=make_ollama_response("Mock reply"))
    mock_http.get = AsyncMock()

    tmp_dir = tempfile.mkdtemp()
    db_path = str(Path(tmp_dir) / "test.db")

    conn = asyncio.run(init_db(db_path))
    store = StateRepository(conn)

    app.state.settings = settings
    app.state.http_client = mock_http
    app.state.ollama_client = OllamaClient(
        http_client=mock_http,
        base_url=settings.ollama_base_url,
        model=settings.ollama_model,
    )
    app.state.memory_registry = UserMemoryRegistry(
        store,
        max_messages=settings.history_max_messages,
        max_decisions=settings.decisions_max,
    )

    yield TestClient(app, raise_server_exceptions=False)

    # Teardown: stop the aiosqlite worker thread to prevent process hang.
    # aiosqlite 0.22+ uses a non-daemon Thread; without closing it, pytest
    # hangs waiting for the thread after all tests complete.
    conn.stop()
