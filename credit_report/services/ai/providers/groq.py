"""Groq adapter using the OpenAI-compatible chat completions endpoint."""

from __future__ import annotations

import logging
import time

import httpx

from credit_report.telemetry import observe_llm_attempt, observe_llm_latency

from ..errors import ProviderError, ProviderTimeoutError, TransportError
from ..prompts import system_prompt_for, user_prompt_for
from ..types import ModelRequest, ModelResponse, ProviderConfig, TokenUsage
from .common import (
    decode_json_body,
    expect_list,
    expect_mapping,
    expect_text,
    require_secret,
    require_text,
    token_count,
    truncate,
    usage_mapping,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com"
DEFAULT_TEMPERATURE = 0.5
DEFAULT_MAX_TOKENS = 2000


class GroqAdapter:
    name = "groq"

    def __init__(
        self,
        config: ProviderConfig,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._model_id = require_text(config.model_id, "model_id", self.name)
        self._api_key = require_secret(config.api_key, "api_key", self.name, self._model_id)
        self._base_url = (config.base_url or base_url).rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def generate_text(self, request: ModelRequest) -> ModelResponse:
        payload = {
            "model": self._model_id,
            "messages": [
                {"role": "system", "content": system_prompt_for(request.system_prompt_kind)},
                {"role": "user", "content": user_prompt_for(request)},
            ],
            "temperature": (
                request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE
            ),
            "max_tokens": request.max_tokens if request.max_tokens is not None else DEFAULT_MAX_TOKENS,
        }
        if request.top_p is not None:
            payload["top_p"] = request.top_p

        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._base_url}/openai/v1/chat/completions",
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.TimeoutException as exc:
            observe_llm_attempt(self.name, "timeout")
            raise ProviderTimeoutError(
                f"Groq request timed out after {self._timeout}s",
                self.name,
                cause=exc,
            ) from exc
        except httpx.RequestError as exc:
            observe_llm_attempt(self.name, "network_error")
            raise TransportError(
                f"Failed to generate text with Groq: {type(exc).__name__}: {exc}",
                self.name,
                cause=exc,
            ) from exc
        finally:
            observe_llm_latency(self.name, time.perf_counter() - started)

        if not response.is_success:
            observe_llm_attempt(self.name, "http_error")
            raise TransportError(
                f"Groq API error: {response.status_code} - {truncate(response.text, 300)}",
                self.name,
                status_code=response.status_code,
            )
        observe_llm_attempt(self.name, "success")

        data = decode_json_body(response, self.name)
        choices = expect_list(data.get("choices"), "choices", self.name)
        text = ""
        if choices:
            choice = expect_mapping(choices[0], "choices[0]", self.name)
            message = expect_mapping(choice.get("message"), "message", self.name)
            text = expect_text(message.get("content"), "message.content", self.name)
        if not text.strip():
            raise ProviderError("Empty response from Groq", self.name)

        usage = usage_mapping(data.get("usage"))
        logger.info("Groq raw response model=%s: %s", self._model_id, truncate(text))
        return ModelResponse(
            text=text,
            usage=TokenUsage(
                prompt_tokens=token_count(usage.get("prompt_tokens")),
                completion_tokens=token_count(usage.get("completion_tokens")),
                total_tokens=token_count(usage.get("total_tokens")),
            ),
        )


__all__ = ["GroqAdapter", "DEFAULT_BASE_URL"]
