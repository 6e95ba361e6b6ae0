"""Adapter request/response normalization tests with mocked transports."""

from __future__ import annotations

import asyncio
import base64
import json
import logging

import httpx
import pytest
from botocore.exceptions import ClientError

from credit_report.services.ai.errors import (
    ConfigurationError,
    ExhaustedRetriesError,
    MissingCredentialError,
    ProviderError,
    ProviderTimeoutError,
    TransportError,
)
from credit_report.services.ai.invoker import ResilientInvoker
from credit_report.services.ai.prompts import (
    CONVERSATIONAL_SYSTEM_PROMPT,
    JSON_ONLY_SUFFIX,
    REPORT_EXTRACTION_SYSTEM_PROMPT,
)
from credit_report.services.ai.providers import BedrockAdapter, GeminiAdapter, GroqAdapter, OllamaAdapter
from credit_report.services.ai.types import ModelRequest, ProviderConfig, SystemPromptKind, TokenUsage
from credit_report.services.aws import decode_access_key_pair


class Recorder:
    """MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responses.pop(0)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


async def _no_sleep(delay: float) -> None:
    return None


EXTRACTION = ModelRequest(
    prompt="Summarize this",
    system_prompt_kind=SystemPromptKind.REPORT_EXTRACTION,
    temperature=0.1,
    max_tokens=4000,
    top_p=0.95,
)


# Gemini


def _gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_gemini_sends_key_header_and_generation_config() -> None:
    recorder = Recorder(httpx.Response(200, json=_gemini_body('{"a": 1}')))
    adapter = GeminiAdapter(
        ProviderConfig(model_id="gemini-1.5-flash", api_key="gk-secret"),
        transport=recorder.transport,
    )

    response = asyncio.run(adapter.generate_text(EXTRACTION))

    request = recorder.requests[0]
    assert request.url.path == "/v1beta/models/gemini-1.5-flash:generateContent"
    assert request.headers["x-goog-api-key"] == "gk-secret"
    body = recorder.body()
    assert body["generationConfig"] == {"temperature": 0.1, "maxOutputTokens": 4000, "topP": 0.95}
    assert body["systemInstruction"]["parts"][0]["text"] == REPORT_EXTRACTION_SYSTEM_PROMPT
    assert body["contents"][0]["parts"][0]["text"] == "Summarize this" + JSON_ONLY_SUFFIX
    assert response.text == '{"a": 1}'
    assert response.usage == TokenUsage()


def test_gemini_omits_unset_generation_options() -> None:
    recorder = Recorder(httpx.Response(200, json=_gemini_body("hello")))
    adapter = GeminiAdapter(
        ProviderConfig(model_id="gemini-1.5-flash", api_key="gk"),
        transport=recorder.transport,
    )

    asyncio.run(adapter.generate_text(ModelRequest(prompt="hi")))

    body = recorder.body()
    assert body["generationConfig"] == {}
    assert body["systemInstruction"]["parts"][0]["text"] == CONVERSATIONAL_SYSTEM_PROMPT
    assert body["contents"][0]["parts"][0]["text"] == "hi"


def test_gemini_empty_candidate_is_provider_error() -> None:
    recorder = Recorder(httpx.Response(200, json={"candidates": []}))
    adapter = GeminiAdapter(
        ProviderConfig(model_id="gemini-1.5-flash", api_key="gk"),
        transport=recorder.transport,
    )

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert excinfo.value.message == "Empty response from Gemini"
    assert excinfo.value.provider_name == "gemini"


def test_gemini_http_error_is_not_retried() -> None:
    recorder = Recorder(httpx.Response(500, text="boom"))
    adapter = GeminiAdapter(
        ProviderConfig(model_id="gemini-1.5-flash", api_key="gk"),
        transport=recorder.transport,
    )

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert excinfo.value.status_code == 500
    assert len(recorder.requests) == 1


def test_gemini_requires_api_key() -> None:
    with pytest.raises(MissingCredentialError) as excinfo:
        GeminiAdapter(ProviderConfig(model_id="gemini-1.5-flash", api_key="   "))

    assert excinfo.value.field == "api_key"


def test_gemini_never_logs_the_key(caplog: pytest.LogCaptureFixture) -> None:
    recorder = Recorder(httpx.Response(200, json=_gemini_body("ok")))
    adapter = GeminiAdapter(
        ProviderConfig(model_id="gemini-1.5-flash", api_key="gk-very-secret"),
        transport=recorder.transport,
    )

    with caplog.at_level(logging.DEBUG):
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert "gk-very-secret" not in caplog.text


# Groq


def test_groq_uses_bearer_key_defaults_and_usage() -> None:
    recorder = Recorder(
        httpx.Response(
            200,
            json={
                "choices": [{"message": {"content": "All good"}}],
                "usage": {"prompt_tokens": 12, "completion_tokens": 5, "total_tokens": 17},
            },
        )
    )
    adapter = GroqAdapter(
        ProviderConfig(model_id="llama3-8b-8192", api_key="gq-secret"),
        transport=recorder.transport,
    )

    response = asyncio.run(adapter.generate_text(ModelRequest(prompt="hello")))

    request = recorder.requests[0]
    assert request.url.path == "/openai/v1/chat/completions"
    assert request.headers["authorization"] == "Bearer gq-secret"
    body = recorder.body()
    assert body["model"] == "llama3-8b-8192"
    assert body["temperature"] == 0.5
    assert body["max_tokens"] == 2000
    assert "top_p" not in body
    assert [message["role"] for message in body["messages"]] == ["system", "user"]
    assert response.text == "All good"
    assert response.usage == TokenUsage(12, 5, 17)


def test_groq_empty_content_is_provider_error() -> None:
    recorder = Recorder(httpx.Response(200, json={"choices": [{"message": {"content": ""}}]}))
    adapter = GroqAdapter(
        ProviderConfig(model_id="llama3-8b-8192", api_key="gq"),
        transport=recorder.transport,
    )

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert excinfo.value.message == "Empty response from Groq"


# Ollama


def _ollama(recorder: Recorder, **invoker_kwargs) -> OllamaAdapter:
    invoker = ResilientInvoker(sleep=_no_sleep, **invoker_kwargs)
    return OllamaAdapter(
        ProviderConfig(model_id="llama3", base_url="http://ollama.local:11434/"),
        invoker=invoker,
        transport=recorder.transport,
    )


def test_ollama_posts_chat_request_with_options() -> None:
    recorder = Recorder(
        httpx.Response(
            200,
            json={"message": {"content": "Hi there"}, "prompt_eval_count": 7, "eval_count": 3},
        )
    )
    adapter = _ollama(recorder)

    response = asyncio.run(adapter.generate_text(ModelRequest(prompt="hello", max_tokens=256)))

    request = recorder.requests[0]
    assert str(request.url) == "http://ollama.local:11434/api/chat"
    body = recorder.body()
    assert body["stream"] is False
    assert body["options"] == {"temperature": 0.7, "top_p": 0.9, "num_predict": 256}
    assert response.text == "Hi there"
    assert response.usage == TokenUsage(7, 3, 10)


def test_ollama_retries_through_the_invoker() -> None:
    recorder = Recorder(
        httpx.Response(503, text="loading model"),
        httpx.Response(200, json={"response": "legacy text"}),
    )
    adapter = _ollama(recorder)

    response = asyncio.run(adapter.generate_text(EXTRACTION))

    assert len(recorder.requests) == 2
    assert response.text == "legacy text"


def test_ollama_gives_up_after_max_attempts() -> None:
    recorder = Recorder(*[httpx.Response(500, text="down") for _ in range(3)])
    adapter = _ollama(recorder, max_attempts=3)

    with pytest.raises(ExhaustedRetriesError):
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert len(recorder.requests) == 3


def test_ollama_invalid_format() -> None:
    recorder = Recorder(httpx.Response(200, json={"done": True}))
    adapter = _ollama(recorder)

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert excinfo.value.message == "Invalid response format from Ollama API"


def test_ollama_requires_base_url() -> None:
    with pytest.raises(MissingCredentialError) as excinfo:
        OllamaAdapter(ProviderConfig(model_id="llama3"))

    assert excinfo.value.field == "base_url"


# Bedrock


class FakeBedrockClient:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def converse(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def test_bedrock_converse_payload_and_usage() -> None:
    client = FakeBedrockClient(
        {
            "output": {"message": {"content": [{"text": "Line one"}, {"text": "Line two"}]}},
            "usage": {"inputTokens": 11, "outputTokens": 4, "totalTokens": 15},
        }
    )
    adapter = BedrockAdapter(ProviderConfig(model_id="anthropic.claude-3-haiku"), client=client)

    response = asyncio.run(adapter.generate_text(EXTRACTION))

    call = client.calls[0]
    assert call["modelId"] == "anthropic.claude-3-haiku"
    assert call["system"] == [{"text": REPORT_EXTRACTION_SYSTEM_PROMPT}]
    assert call["inferenceConfig"] == {"maxTokens": 4000, "temperature": 0.1, "topP": 0.95}
    assert response.text == "Line one\nLine two"
    assert response.usage == TokenUsage(11, 4, 15)


def test_bedrock_client_error_becomes_transport_error() -> None:
    error = ClientError(
        {
            "Error": {"Code": "ThrottlingException", "Message": "slow down"},
            "ResponseMetadata": {"HTTPStatusCode": 429},
        },
        "Converse",
    )
    adapter = BedrockAdapter(
        ProviderConfig(model_id="anthropic.claude-3-haiku"),
        client=FakeBedrockClient(error=error),
    )

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert excinfo.value.status_code == 429
    assert excinfo.value.cause is error


def test_bedrock_rejects_undecodable_key() -> None:
    key = base64.b64encode(b"not-a-pair").decode()

    with pytest.raises(ConfigurationError):
        BedrockAdapter(ProviderConfig(model_id="amazon.nova-lite-v1:0", api_key=key))


def test_decode_access_key_pair() -> None:
    encoded = base64.b64encode(b"AKIAEXAMPLE:s3cr3t/key").decode()

    assert decode_access_key_pair(encoded) == ("AKIAEXAMPLE", "s3cr3t/key")
    assert decode_access_key_pair("AKIAPLAIN:secret") == ("AKIAPLAIN", "secret")
    assert decode_access_key_pair("") is None
    assert decode_access_key_pair(base64.b64encode(b"no-colon").decode()) is None


# Unexpected envelopes


@pytest.mark.parametrize(
    "body",
    [
        {"choices": [{"message": {"content": ["a"]}}]},
        {"choices": [{"message": "hello"}]},
        {"choices": "nope"},
        {"choices": ["nope"]},
    ],
)
def test_groq_unexpected_envelope_is_provider_error(body: dict) -> None:
    recorder = Recorder(httpx.Response(200, json=body))
    adapter = GroqAdapter(
        ProviderConfig(model_id="llama3-8b-8192", api_key="gq"),
        transport=recorder.transport,
    )

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert "Unexpected response shape from groq" in excinfo.value.message


def test_groq_malformed_usage_counts_as_zero() -> None:
    recorder = Recorder(
        httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}], "usage": "n/a"})
    )
    adapter = GroqAdapter(
        ProviderConfig(model_id="llama3-8b-8192", api_key="gq"),
        transport=recorder.transport,
    )

    response = asyncio.run(adapter.generate_text(EXTRACTION))

    assert response.text == "ok"
    assert response.usage == TokenUsage()


@pytest.mark.parametrize(
    "body",
    [
        {"candidates": [{"content": "hello"}]},
        {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
        {"candidates": [{"content": {"parts": "text"}}]},
    ],
)
def test_gemini_unexpected_envelope_is_provider_error(body: dict) -> None:
    recorder = Recorder(httpx.Response(200, json=body))
    adapter = GeminiAdapter(
        ProviderConfig(model_id="gemini-1.5-flash", api_key="gk"),
        transport=recorder.transport,
    )

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert "Unexpected response shape from gemini" in excinfo.value.message


def test_gemini_null_part_text_is_empty_response() -> None:
    recorder = Recorder(httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": None}]}}]}))
    adapter = GeminiAdapter(
        ProviderConfig(model_id="gemini-1.5-flash", api_key="gk"),
        transport=recorder.transport,
    )

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert excinfo.value.message == "Empty response from Gemini"


def test_ollama_non_numeric_usage_counts_as_zero() -> None:
    recorder = Recorder(
        httpx.Response(
            200,
            json={"message": {"content": "hi"}, "prompt_eval_count": "many", "eval_count": [1]},
        )
    )
    adapter = _ollama(recorder)

    response = asyncio.run(adapter.generate_text(EXTRACTION))

    assert response.usage == TokenUsage(0, 0, 0)


@pytest.mark.parametrize(
    "payload",
    [
        {"output": {"message": {"content": "text"}}},
        {"output": {"message": {"content": [{"text": {"nested": True}}]}}},
        {"output": "oops"},
        ["not", "a", "dict"],
    ],
)
def test_bedrock_unexpected_envelope_is_provider_error(payload) -> None:
    adapter = BedrockAdapter(
        ProviderConfig(model_id="anthropic.claude-3-haiku"),
        client=FakeBedrockClient(payload),
    )

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert "Unexpected response shape from bedrock" in excinfo.value.message


# Client-side timeouts


def _timing_out(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("slow", request=request)


def test_gemini_client_timeout_is_timeout_error() -> None:
    adapter = GeminiAdapter(
        ProviderConfig(model_id="gemini-1.5-flash", api_key="gk"),
        transport=httpx.MockTransport(_timing_out),
    )

    with pytest.raises(ProviderTimeoutError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert excinfo.value.code == "timeout"


def test_groq_client_timeout_is_timeout_error() -> None:
    adapter = GroqAdapter(
        ProviderConfig(model_id="llama3-8b-8192", api_key="gq"),
        transport=httpx.MockTransport(_timing_out),
    )

    with pytest.raises(ProviderTimeoutError):
        asyncio.run(adapter.generate_text(EXTRACTION))


def test_groq_connection_failure_stays_transport_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    adapter = GroqAdapter(
        ProviderConfig(model_id="llama3-8b-8192", api_key="gq"),
        transport=httpx.MockTransport(refuse),
    )

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(adapter.generate_text(EXTRACTION))

    assert not isinstance(excinfo.value, ProviderTimeoutError)
