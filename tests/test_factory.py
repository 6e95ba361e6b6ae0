"""Provider factory, credential validation and holder memoization tests."""

from __future__ import annotations

import asyncio
import json
import logging

import httpx
import pytest

from credit_report.config.settings import BedrockConfig, LlmConfig
from credit_report.services.ai.errors import MissingCredentialError, UnsupportedModelError
from credit_report.services.ai.factory import (
    BEDROCK,
    GEMINI,
    GROQ,
    OLLAMA,
    ProviderHolder,
    build_provider_config,
    create_service,
    resolve_family,
)
from credit_report.services.ai.invoker import ResilientInvoker
from credit_report.services.ai.providers import BedrockAdapter, GeminiAdapter, GroqAdapter, OllamaAdapter
from credit_report.services.ai.types import ModelRequest, ProviderConfig


def _refuse(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Unexpected network call to {request.url}")


@pytest.mark.parametrize(
    ("model_id", "family"),
    [
        ("gemini-1.5-flash", GEMINI),
        ("gemini-2.0-pro", GEMINI),
        ("llama3-8b-8192", GROQ),
        ("llama3", OLLAMA),
        ("anthropic.claude-3-haiku", BEDROCK),
        ("us.meta.llama3-2-11b-instruct-v1:0", BEDROCK),
        ("groq:mixtral-8x7b-32768", GROQ),
        ("ollama:mistral", OLLAMA),
        ("Ollama:mistral", OLLAMA),
    ],
)
def test_resolve_family(model_id: str, family) -> None:
    assert resolve_family(model_id) is family


def test_unknown_model_is_unsupported() -> None:
    with pytest.raises(UnsupportedModelError) as excinfo:
        resolve_family("gpt-4o")

    assert "gpt-4o" in excinfo.value.message


@pytest.mark.parametrize("model_id", ["", "   ", "ollama:"])
def test_blank_model_id_is_missing_credential(model_id: str) -> None:
    with pytest.raises(MissingCredentialError) as excinfo:
        create_service(ProviderConfig(model_id=model_id))

    assert excinfo.value.field == "model_id"


def test_missing_api_key_fails_before_any_network_call() -> None:
    with pytest.raises(MissingCredentialError) as excinfo:
        create_service(
            ProviderConfig(model_id="gemini-1.5-flash"),
            transport=httpx.MockTransport(_refuse),
        )

    assert excinfo.value.field == "api_key"
    assert excinfo.value.provider_name == "gemini"


def test_missing_base_url_for_ollama() -> None:
    with pytest.raises(MissingCredentialError) as excinfo:
        create_service(ProviderConfig(model_id="llama3", base_url="  "))

    assert excinfo.value.field == "base_url"


def test_create_service_builds_matching_adapter() -> None:
    assert isinstance(create_service(ProviderConfig(model_id="gemini-1.5-flash", api_key="k")), GeminiAdapter)
    assert isinstance(create_service(ProviderConfig(model_id="llama3-8b-8192", api_key="k")), GroqAdapter)
    assert isinstance(
        create_service(ProviderConfig(model_id="llama3", base_url="http://localhost:11434")),
        OllamaAdapter,
    )
    assert isinstance(
        create_service(ProviderConfig(model_id="amazon.nova-lite-v1:0"), bedrock_client=object()),
        BedrockAdapter,
    )


def test_explicit_family_prefix_is_stripped_from_model() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"message": {"content": "ok"}})

    adapter = create_service(
        ProviderConfig(model_id="ollama:mistral", base_url="http://localhost:11434"),
        transport=httpx.MockTransport(handler),
        invoker=ResilientInvoker(max_attempts=1),
    )
    asyncio.run(adapter.generate_text(ModelRequest(prompt="hi")))

    assert seen[0]["model"] == "mistral"


def test_build_provider_config_picks_family_credentials() -> None:
    groq = build_provider_config(LlmConfig(LLM_MODEL_ID="llama3-8b-8192", GROQ_API_KEY="gq"))
    assert groq.api_key.get_secret_value() == "gq"
    assert groq.base_url

    ollama = build_provider_config(
        LlmConfig(LLM_MODEL_ID="llama3", OLLAMA_BASE_URL="http://localhost:11434")
    )
    assert ollama.base_url == "http://localhost:11434"
    assert ollama.api_key is None

    bedrock = build_provider_config(
        LlmConfig(LLM_MODEL_ID="anthropic.claude-3-haiku"),
        BedrockConfig(BEDROCK_API_KEY="abc"),
    )
    assert bedrock.api_key.get_secret_value() == "abc"


class CountingFactory:
    def __init__(self) -> None:
        self.configs: list[ProviderConfig] = []

    def __call__(self, config: ProviderConfig):
        self.configs.append(config)
        return GroqAdapter(config)


def test_holder_builds_once_and_reuses_adapter() -> None:
    factory = CountingFactory()
    holder = ProviderHolder(factory=factory)
    config = ProviderConfig(model_id="llama3-8b-8192", api_key="gq")

    first = holder.get(config)
    second = holder.get(ProviderConfig(model_id="llama3-8b-8192", api_key="gq"))

    assert first is second
    assert len(factory.configs) == 1
    assert holder.is_configured


def test_holder_ignores_later_configuration_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    factory = CountingFactory()
    holder = ProviderHolder(factory=factory)
    first = holder.get(ProviderConfig(model_id="llama3-8b-8192", api_key="gq"))

    with caplog.at_level(logging.WARNING, logger="credit_report.services.ai.factory"):
        second = holder.get(ProviderConfig(model_id="llama3-8b-8192", api_key="other"))

    assert second is first
    assert len(factory.configs) == 1
    assert "Ignoring new provider configuration" in caplog.text
    assert "other" not in caplog.text


def test_holder_failed_construction_is_not_memoized() -> None:
    holder = ProviderHolder()

    with pytest.raises(MissingCredentialError):
        holder.get(ProviderConfig(model_id="gemini-1.5-flash"))

    assert not holder.is_configured
    assert isinstance(holder.get(ProviderConfig(model_id="gemini-1.5-flash", api_key="k")), GeminiAdapter)
