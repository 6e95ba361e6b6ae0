"""Conversational assistant tests."""

from __future__ import annotations

import asyncio

from conftest import PERSONAL_INFO, ScriptedAdapter
from credit_report.pipelines.report import CompositeReport, PersonalInfo
from credit_report.services.ai.errors import ExhaustedRetriesError, MissingCredentialError, ProviderError
from credit_report.services.ai.prompts import NO_REPORT_MESSAGE, OPERATIONS_HOURS_MESSAGE
from credit_report.services.ai.types import SystemPromptKind
from credit_report.services.chat import ChatService
from credit_report.services.storage import MemoryBlobStore


def _store_with_report() -> MemoryBlobStore:
    store = MemoryBlobStore()
    report = CompositeReport(personal_info=PersonalInfo.model_validate(PERSONAL_INFO))
    asyncio.run(store.set("ctosReport", report.to_json_bytes()))
    return store


def test_no_report_returns_guidance_without_backend_call() -> None:
    adapter = ScriptedAdapter()
    service = ChatService(adapter, MemoryBlobStore())

    message = asyncio.run(service.generate_response("What is my score?"))

    assert message.content == NO_REPORT_MESSAGE
    assert message.role == "assistant"
    assert adapter.requests == []


def test_answers_with_conversational_settings() -> None:
    adapter = ScriptedAdapter(["## Your score\nIt is **0**."])
    service = ChatService(adapter, _store_with_report())

    message = asyncio.run(service.generate_response("What is my score?"))

    assert message.content.startswith("## Your score")
    request = adapter.requests[0]
    assert request.system_prompt_kind is SystemPromptKind.CONVERSATIONAL
    assert request.temperature == 0.7
    assert request.max_tokens == 2000
    assert "What is my score?" in request.prompt
    assert PERSONAL_INFO["icNo"] in request.prompt
    assert '"assessment"' not in request.prompt


def test_provider_failure_returns_operations_hours_message() -> None:
    adapter = ScriptedAdapter([ExhaustedRetriesError("down", "fake", attempts=3)])
    service = ChatService(adapter, _store_with_report())

    message = asyncio.run(service.generate_response("Hello?"))

    assert message.content == OPERATIONS_HOURS_MESSAGE


def test_messages_get_unique_ids() -> None:
    service = ChatService(ScriptedAdapter(), MemoryBlobStore())

    first = asyncio.run(service.generate_response("a"))
    second = asyncio.run(service.generate_response("b"))

    assert first.id != second.id


def test_unbuildable_provider_falls_back_after_report_loads() -> None:
    def unusable():
        raise MissingCredentialError("api_key", "groq", "llama3-8b-8192")

    service = ChatService(unusable, _store_with_report())

    message = asyncio.run(service.generate_response("Hello?"))

    assert message.content == OPERATIONS_HOURS_MESSAGE


def test_provider_factory_not_called_without_report() -> None:
    def unexpected():
        raise AssertionError("provider should not be built")

    message = asyncio.run(ChatService(unexpected, MemoryBlobStore()).generate_response("Hi"))

    assert message.content == NO_REPORT_MESSAGE


def test_unexpected_backend_envelope_falls_back() -> None:
    adapter = ScriptedAdapter([ProviderError("Unexpected response shape from groq: message is str", "groq")])
    service = ChatService(adapter, _store_with_report())

    assert asyncio.run(service.generate_response("Hi")).content == OPERATIONS_HOURS_MESSAGE
