"""Typed containers shared by every provider adapter.

These live in their own module so adapters, the factory and the pipeline can
import them without creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, SecretStr


class SystemPromptKind(str, Enum):
    """Which system prompt an adapter should prepend to the user prompt."""

    REPORT_EXTRACTION = "report_extraction"
    CONVERSATIONAL = "conversational"


@dataclass(frozen=True)
class ModelRequest:
    """Immutable description of one generation call."""

    prompt: str
    system_prompt_kind: SystemPromptKind = SystemPromptKind.CONVERSATIONAL
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class ModelResponse:
    """Normalized output of a provider call."""

    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)


class ProviderConfig(BaseModel):
    """Model identifier plus whichever credentials its backend needs."""

    model_id: str
    api_key: SecretStr | None = None
    base_url: Optional[str] = None

    model_config = {"frozen": True}

    def fingerprint(self) -> tuple[str, str, str]:
        """Comparable identity that never exposes the raw key."""

        key = self.api_key.get_secret_value() if self.api_key else ""
        return (self.model_id, str(hash(key)), self.base_url or "")


@runtime_checkable
class ProviderAdapter(Protocol):
    """Uniform capability every backend adapter implements."""

    name: str

    async def generate_text(self, request: ModelRequest) -> ModelResponse:
        ...


ProviderSource = Union[ProviderAdapter, Callable[[], ProviderAdapter]]


def resolve_adapter(source: ProviderSource) -> ProviderAdapter:
    """Return ``source`` itself, or call it when it is a zero-argument factory."""

    if hasattr(source, "generate_text"):
        return source
    return source()


__all__ = [
    "SystemPromptKind",
    "ModelRequest",
    "TokenUsage",
    "ModelResponse",
    "ProviderConfig",
    "ProviderAdapter",
    "ProviderSource",
    "resolve_adapter",
]
