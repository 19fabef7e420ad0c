import logging
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI

from app.chat.router import router as chat_router
from app.config import Settings
from app.conversation.session import wait_for_in_flight
from app.database.db import init_db
from app.database.repository import StateRepository
from app.health.router import router as health_router
from app.llm.client import OllamaClient
from app.logging_config import configure_logging
from app.memory.registry import UserMemoryRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    configure_logging(
        level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file
    )

    http_client = httpx.AsyncClient(timeout=httpx.Timeout(600.0, connect=10.0))

    # Database
    Path(settings.database_path).parent.mkdir(parents=True, exist_ok=True)
    db_conn = await init_db(settings.database_path)
    store = StateRepository(db_conn)

    app.state.settings = settings
    app.state.http_client = http_client
    app.state.ollama_client = OllamaClient(
        http_client=http_client,
        base_url=settings.ollama_base_url,
        model=settings.ollama_model,
    )
    app.state.memory_registry = UserMemoryRegistry(
        store,
        max_messages=settings.history_max_messages,
        max_decisions=settings.decisions_max,
    )

    if not await app.state.ollama_client.is_available():
        logger.warning("Ollama not reachable at %s (non-critical)", settings.ollama_base_url)

    yield

    await wait_for_in_flight(timeout=30.0)
    await db_conn.close()
    await http_client.aclose()


app = FastAPI(title="Parallel Lives", lifespan=lifespan)
app.include_router(health_router)
app.include_router(chat_router)
