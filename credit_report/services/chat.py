"""Conversational assistant answering questions about the cached report."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import uuid4

from pydantic import ValidationError

from credit_report.pipelines.report.models import CompositeReport
from credit_report.services.ai.errors import ProviderError
from credit_report.services.ai.prompts import NO_REPORT_MESSAGE, OPERATIONS_HOURS_MESSAGE, chat_prompt
from credit_report.services.ai.types import ModelRequest, ProviderSource, SystemPromptKind, resolve_adapter
from credit_report.services.storage import BlobStore, StorageError

logger = logging.getLogger(__name__)

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 2000

# Sections of the report shared with the model; the stage extras stay out.
_REPORT_SECTIONS = (
    "personalInfo",
    "score",
    "bankingHistory",
    "snapshot",
    "directorships",
    "legalCases",
    "litigationIndex",
    "tradeReferees",
    "analysis",
    "reportDate",
)


@dataclass(frozen=True)
class ChatMessage:
    content: str
    role: Literal["user", "assistant"] = "assistant"
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ChatService:
    """Answer questions about the cached report.

    ``service`` may be a zero-argument factory; it is resolved only once a
    report has loaded, and a provider that cannot be built falls back to the
    business-hours message like any other provider failure.
    """

    def __init__(
        self,
        service: ProviderSource,
        store: BlobStore,
        report_key: str = "ctosReport",
    ) -> None:
        self._service = service
        self._store = store
        self._report_key = report_key

    async def _load_report(self) -> Optional[CompositeReport]:
        try:
            blob = await self._store.get(self._report_key)
        except StorageError as exc:
            logger.warning("Unable to read report for chat: %s", exc)
            return None
        if blob is None:
            return None
        try:
            return CompositeReport.model_validate_json(blob)
        except (ValidationError, ValueError) as exc:
            logger.warning("Cached report is unreadable, treating as absent: %s", exc)
            return None

    async def generate_response(self, message: str) -> ChatMessage:
        report = await self._load_report()
        if report is None:
            logger.info("No report available; asking the user to generate one first")
            return ChatMessage(content=NO_REPORT_MESSAGE)

        dumped = report.model_dump(by_alias=True)
        report_data = {key: dumped[key] for key in _REPORT_SECTIONS}
        request = ModelRequest(
            prompt=chat_prompt(report_data, message),
            system_prompt_kind=SystemPromptKind.CONVERSATIONAL,
            temperature=CHAT_TEMPERATURE,
            max_tokens=CHAT_MAX_TOKENS,
        )
        try:
            response = await resolve_adapter(self._service).generate_text(request)
        except ProviderError as exc:
            logger.error("Chat response failed: %s", exc)
            return ChatMessage(content=OPERATIONS_HOURS_MESSAGE)

        return ChatMessage(content=response.text)


__all__ = ["CHAT_MAX_TOKENS", "CHAT_TEMPERATURE", "ChatMessage", "ChatService"]
