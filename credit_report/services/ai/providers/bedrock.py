"""Amazon Bedrock adapter built on the boto3 ``converse`` API."""

from __future__ import annotations

import logging
import time
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from credit_report.services.aws import create_boto3_client, decode_access_key_pair
from credit_report.telemetry import observe_llm_attempt, observe_llm_latency

from ..errors import ConfigurationError, ProviderError, TransportError
from ..prompts import system_prompt_for, user_prompt_for
from ..types import ModelRequest, ModelResponse, ProviderConfig, TokenUsage
from .common import (
    drop_none,
    expect_list,
    expect_mapping,
    expect_text,
    require_text,
    token_count,
    truncate,
    usage_mapping,
)

logger = logging.getLogger(__name__)


class BedrockAdapter:
    """Invoke Bedrock models through the SDK client.

    ``api_key`` is optional: when present it must decode to an
    ``access:secret`` pair, otherwise the default AWS credential chain is used.
    The SDK performs its own retries, so the resilient invoker is not applied.
    """

    name = "bedrock"

    def __init__(
        self,
        config: ProviderConfig,
        *,
        region: str | None = None,
        client: Any = None,
    ) -> None:
        self._model_id = require_text(config.model_id, "model_id", self.name)
        if client is not None:
            self._client = client
            return

        key_pair = None
        if config.api_key is not None and config.api_key.get_secret_value().strip():
            key_pair = decode_access_key_pair(config.api_key.get_secret_value())
            if key_pair is None:
                raise ConfigurationError(
                    "api_key must encode an access:secret pair",
                    self.name,
                )
        try:
            self._client = create_boto3_client(
                "bedrock-runtime",
                region_name=region,
                aws_access_key_id=key_pair[0] if key_pair else None,
                aws_secret_access_key=key_pair[1] if key_pair else None,
            )
        except BotoCoreError as exc:
            raise ConfigurationError(
                f"Unable to initialise Bedrock client: {exc}",
                self.name,
                cause=exc,
            ) from exc

    async def generate_text(self, request: ModelRequest) -> ModelResponse:
        inference_cfg = drop_none(
            {
                "maxTokens": request.max_tokens,
                "temperature": request.temperature,
                "topP": request.top_p,
            }
        )
        system_prompt = system_prompt_for(request.system_prompt_kind)
        user_prompt = user_prompt_for(request)

        def _call() -> dict[str, Any]:
            kwargs: dict[str, Any] = {
                "modelId": self._model_id,
                "system": [{"text": system_prompt}],
                "messages": [{"role": "user", "content": [{"text": user_prompt}]}],
            }
            if inference_cfg:
                kwargs["inferenceConfig"] = inference_cfg
            return self._client.converse(**kwargs)

        started = time.perf_counter()
        try:
            response = await run_in_threadpool(_call)
        except ClientError as exc:
            observe_llm_attempt(self.name, "http_error")
            status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            raise TransportError(
                f"Bedrock API error: {exc}",
                self.name,
                cause=exc,
                status_code=status,
            ) from exc
        except BotoCoreError as exc:
            observe_llm_attempt(self.name, "network_error")
            raise TransportError(
                f"Failed to generate text with Bedrock: {exc}",
                self.name,
                cause=exc,
            ) from exc
        finally:
            observe_llm_latency(self.name, time.perf_counter() - started)
        observe_llm_attempt(self.name, "success")

        if not isinstance(response, dict):
            raise ProviderError(
                f"Unexpected response shape from {self.name}: response is {type(response).__name__}",
                self.name,
            )
        output = expect_mapping(response.get("output"), "output", self.name)
        message = expect_mapping(output.get("message"), "output.message", self.name)
        blocks = expect_list(message.get("content"), "output.message.content", self.name)
        texts = []
        for block in blocks:
            block_text = expect_text(
                expect_mapping(block, "content block", self.name).get("text"),
                "content block text",
                self.name,
            )
            if block_text:
                texts.append(block_text)
        text = "\n".join(texts).strip()
        if not text:
            raise ProviderError("Empty response from Bedrock", self.name)

        usage = usage_mapping(response.get("usage"))
        logger.info("Bedrock raw response model=%s: %s", self._model_id, truncate(text))
        return ModelResponse(
            text=text,
            usage=TokenUsage(
                prompt_tokens=token_count(usage.get("inputTokens")),
                completion_tokens=token_count(usage.get("outputTokens")),
                total_tokens=token_count(usage.get("totalTokens")),
            ),
        )


__all__ = ["BedrockAdapter"]
