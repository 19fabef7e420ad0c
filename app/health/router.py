from fastapi import APIRouter, Request

from app.dependencies import get_ollama_client
from app.models import HealthResponse, ModelCheck

router = APIRouter()


@router.get("/api/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    ollama_ok = await get_ollama_client(request).is_available()
    return HealthResponse(
        status="ok" if ollama_ok else "degraded",
        checks=ModelCheck(available=ollama_ok),
    )
