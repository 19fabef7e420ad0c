from __future__ import annotations

import logging
import re

import httpx

from app.exceptions import InferenceError
from app.models import ChatMessage

logger = logging.getLogger(__name__)


class OllamaClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        model: str,
    ):
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._model = model

    async def chat(
        self,
        messages: list[ChatMessage],
        max_tokens: int = 1024,
        temperature: float = 0.8,
        model: str | None = None,
    ) -> str:
        """Run one non-streaming chat completion and return the generated text.

        Raises InferenceError when the request fails or the model returns no text.
        """
        url = f"{self._base_url}/api/chat"
        use_model = model or self._model

        payload: dict = {
            "model": use_model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "stream": False,
            "options": {"num_predict": max_tokens, "temperature": temperature},
        }

        try:
            resp = await self._http.post(url, json=payload)
            if resp.status_code == 404:
                logger.error(
                    "Ollama model '%s' not found, download it with: "
                    "docker compose exec ollama ollama pull %s",
                    use_model,
                    use_model,
                )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise InferenceError(f"Ollama chat request failed: {e}") from e

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict):
            raise InferenceError(f"Ollama returned an unexpected payload: {str(data)[:200]}")
        content = message.get("content") or ""
        if not isinstance(content, str):
            raise InferenceError("Ollama returned non-text content")

        if content:
            logger.debug("LLM raw response: %s", content[:500])
            # Strip reasoning blocks: <think>...</think>
            content = re.sub(r"<think>.*?</think>\n*", "", content, flags=re.DOTALL)
            # Edge-cases if the LLM gets truncated exactly after opening or closing tags
            content = content.split("</think>")[-1]
            content = content.split("<think>")[0].strip()

        if not content:
            raise InferenceError(f"Ollama model '{use_model}' returned no text")
        return content

    async def is_available(self) -> bool:
        try:
            resp = await self._http.get(
                f"{self._base_url}/api/tags",
                timeout=5.0,
            )
            return resp.status_code == 200
        except httpx.HTTPError:
            return False
