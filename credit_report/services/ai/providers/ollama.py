"""Self-hosted Ollama adapter; the only HTTP adapter wrapped in the resilient invoker."""

from __future__ import annotations

import logging
import time

import httpx

from credit_report.telemetry import observe_llm_latency

from ..errors import ProviderError
from ..invoker import ResilientInvoker
from ..prompts import system_prompt_for, user_prompt_for
from ..types import ModelRequest, ModelResponse, ProviderConfig, TokenUsage
from .common import decode_json_body, require_text, token_count, truncate

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.9


class OllamaAdapter:
    """POST ``/api/chat`` with ``stream: false``.

    Text is read from ``message.content`` with ``response`` as a fallback for
    older servers. Usage comes from ``prompt_eval_count``/``eval_count``.
    """

    name = "ollama"

    def __init__(
        self,
        config: ProviderConfig,
        *,
        invoker: ResilientInvoker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._model_id = require_text(config.model_id, "model_id", self.name)
        self._base_url = require_text(config.base_url, "base_url", self.name, self._model_id).rstrip("/")
        self._invoker = invoker or ResilientInvoker()
        self._transport = transport

    async def generate_text(self, request: ModelRequest) -> ModelResponse:
        options: dict[str, float | int] = {
            "temperature": request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE,
            "top_p": request.top_p if request.top_p is not None else DEFAULT_TOP_P,
        }
        if request.max_tokens is not None:
            options["num_predict"] = request.max_tokens
        payload = {
            "model": self._model_id,
            "messages": [
                {"role": "system", "content": system_prompt_for(request.system_prompt_kind)},
                {"role": "user", "content": user_prompt_for(request)},
            ],
            "stream": False,
            "options": options,
        }
        url = f"{self._base_url}/api/chat"

        async def attempt() -> httpx.Response:
            # The invoker owns the deadline, so the client itself has none.
            async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                return await client.post(url, json=payload)

        logger.debug("Sending Ollama request model=%s url=%s", self._model_id, url)
        started = time.perf_counter()
        try:
            response = await self._invoker.invoke(attempt, provider_name=self.name)
        finally:
            observe_llm_latency(self.name, time.perf_counter() - started)

        data = decode_json_body(response, self.name)
        message = data.get("message")
        text = message.get("content") if isinstance(message, dict) else None
        if not isinstance(text, str) or not text:
            text = data.get("response")
        if not isinstance(text, str) or not text.strip():
            logger.error("Unexpected Ollama payload: %s", truncate(response.text, 300))
            raise ProviderError("Invalid response format from Ollama API", self.name)

        prompt_tokens = token_count(data.get("prompt_eval_count")) or token_count(data.get("prompt_tokens"))
        completion_tokens = token_count(data.get("eval_count")) or token_count(data.get("completion_tokens"))
        logger.info("Ollama raw response model=%s: %s", self._model_id, truncate(text))
        return ModelResponse(
            text=text,
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )


__all__ = ["OllamaAdapter"]
