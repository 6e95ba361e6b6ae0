"""Hosted Gemini adapter (HTTP + API key, single request/response)."""

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
    drop_none,
    expect_list,
    expect_mapping,
    expect_text,
    require_secret,
    require_text,
    truncate,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"


class GeminiAdapter:
    """Call ``models/{model}:generateContent``.

    There is no retry here; a transport failure surfaces immediately. Token
    usage is always reported as zero because the integration does not read
    Gemini's usage metadata.
    """

    name = "gemini"

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
            "systemInstruction": {
                "parts": [{"text": system_prompt_for(request.system_prompt_kind)}],
            },
            "contents": [
                {"role": "user", "parts": [{"text": user_prompt_for(request)}]},
            ],
            "generationConfig": drop_none(
                {
                    "temperature": request.temperature,
                    "maxOutputTokens": request.max_tokens,
                    "topP": request.top_p,
                }
            ),
        }
        url = f"{self._base_url}/v1beta/models/{self._model_id}:generateContent"

        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"x-goog-api-key": self._api_key},
                )
        except httpx.TimeoutException as exc:
            observe_llm_attempt(self.name, "timeout")
            raise ProviderTimeoutError(
                f"Gemini request timed out after {self._timeout}s",
                self.name,
                cause=exc,
            ) from exc
        except httpx.RequestError as exc:
            observe_llm_attempt(self.name, "network_error")
            raise TransportError(
                f"Failed to generate text with Gemini: {type(exc).__name__}: {exc}",
                self.name,
                cause=exc,
            ) from exc
        finally:
            observe_llm_latency(self.name, time.perf_counter() - started)

        if not response.is_success:
            observe_llm_attempt(self.name, "http_error")
            raise TransportError(
                f"Gemini API error: {response.status_code} - {truncate(response.text, 300)}",
                self.name,
                status_code=response.status_code,
            )
        observe_llm_attempt(self.name, "success")

        data = decode_json_body(response, self.name)
        candidates = expect_list(data.get("candidates"), "candidates", self.name)
        parts: list = []
        if candidates:
            candidate = expect_mapping(candidates[0], "candidates[0]", self.name)
            content = expect_mapping(candidate.get("content"), "content", self.name)
            parts = expect_list(content.get("parts"), "content.parts", self.name)
        text = "".join(
            expect_text(expect_mapping(part, "part", self.name).get("text"), "part.text", self.name)
            for part in parts
        )
        if not text.strip():
            raise ProviderError("Empty response from Gemini", self.name)

        logger.info("Gemini raw response model=%s: %s", self._model_id, truncate(text))
        return ModelResponse(text=text, usage=TokenUsage())


__all__ = ["GeminiAdapter", "DEFAULT_BASE_URL"]
