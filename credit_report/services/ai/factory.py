"""Map a model identifier to exactly one backend adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from credit_report.config.settings import BedrockConfig, LlmConfig, settings

from .errors import MissingCredentialError, UnsupportedModelError
from .invoker import ResilientInvoker
from .providers import BedrockAdapter, GeminiAdapter, GroqAdapter, OllamaAdapter
from .types import ProviderAdapter, ProviderConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderFamily:
    name: str
    requires_api_key: bool
    requires_base_url: bool


GEMINI = ProviderFamily("gemini", requires_api_key=True, requires_base_url=False)
GROQ = ProviderFamily("groq", requires_api_key=True, requires_base_url=False)
OLLAMA = ProviderFamily("ollama", requires_api_key=False, requires_base_url=True)
BEDROCK = ProviderFamily("bedrock", requires_api_key=False, requires_base_url=False)

FAMILIES: dict[str, ProviderFamily] = {
    family.name: family for family in (GEMINI, GROQ, OLLAMA, BEDROCK)
}

EXACT_MODELS: dict[str, ProviderFamily] = {
    "gemini-1.5-flash": GEMINI,
    "llama3-8b-8192": GROQ,
    "llama3": OLLAMA,
}

MODEL_PREFIXES: tuple[tuple[str, ProviderFamily], ...] = (
    ("gemini-", GEMINI),
    ("amazon.", BEDROCK),
    ("anthropic.", BEDROCK),
    ("meta.", BEDROCK),
    ("mistral.", BEDROCK),
    ("us.", BEDROCK),
)


def _split_model_id(model_id: str) -> tuple[ProviderFamily, str]:
    cleaned = (model_id or "").strip()
    if not cleaned:
        raise MissingCredentialError("model_id", "factory")

    family_name, sep, remainder = cleaned.partition(":")
    if sep and family_name.lower() in FAMILIES:
        model = remainder.strip()
        if not model:
            raise MissingCredentialError("model_id", family_name.lower())
        return FAMILIES[family_name.lower()], model

    if cleaned in EXACT_MODELS:
        return EXACT_MODELS[cleaned], cleaned
    for prefix, family in MODEL_PREFIXES:
        if cleaned.startswith(prefix):
            return family, cleaned
    raise UnsupportedModelError(cleaned)


def resolve_family(model_id: str) -> ProviderFamily:
    """Return the family serving ``model_id``.

    Resolution order: an explicit ``family:model`` prefix, then the known exact
    identifiers, then family prefixes. Raises ``UnsupportedModelError`` when
    nothing matches and ``MissingCredentialError`` for a blank identifier.
    """

    family, _ = _split_model_id(model_id)
    return family


def _validate(family: ProviderFamily, config: ProviderConfig, model_id: str) -> None:
    if family.requires_api_key:
        key = config.api_key.get_secret_value() if config.api_key else ""
        if not key.strip():
            raise MissingCredentialError("api_key", family.name, model_id)
    if family.requires_base_url and not (config.base_url or "").strip():
        raise MissingCredentialError("base_url", family.name, model_id)


def create_service(
    config: ProviderConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    invoker: ResilientInvoker | None = None,
    bedrock_client: object | None = None,
) -> ProviderAdapter:
    """Build the adapter for ``config``; no network traffic happens here."""

    family, model_id = _split_model_id(config.model_id)
    _validate(family, config, model_id)
    resolved = config.model_copy(update={"model_id": model_id})

    if family is GEMINI:
        return GeminiAdapter(
            resolved,
            timeout=settings.llm.http_timeout,
            transport=transport,
        )
    if family is GROQ:
        return GroqAdapter(
            resolved,
            timeout=settings.llm.http_timeout,
            transport=transport,
        )
    if family is OLLAMA:
        return OllamaAdapter(
            resolved,
            invoker=invoker
            or ResilientInvoker(
                max_attempts=settings.invoker.max_attempts,
                base_delay=settings.invoker.base_delay,
                timeout=settings.invoker.timeout,
            ),
            transport=transport,
        )
    return BedrockAdapter(resolved, region=settings.bedrock.region, client=bedrock_client)


def build_provider_config(
    llm: LlmConfig,
    bedrock: Optional[BedrockConfig] = None,
) -> ProviderConfig:
    """Pick the credentials matching the family of ``llm.model_id``."""

    family = resolve_family(llm.model_id)
    if family is GEMINI:
        return ProviderConfig(
            model_id=llm.model_id,
            api_key=llm.gemini_api_key,
            base_url=llm.gemini_base_url,
        )
    if family is GROQ:
        return ProviderConfig(
            model_id=llm.model_id,
            api_key=llm.groq_api_key,
            base_url=llm.groq_base_url,
        )
    if family is OLLAMA:
        return ProviderConfig(model_id=llm.model_id, base_url=llm.ollama_base_url)
    bedrock = bedrock or settings.bedrock
    return ProviderConfig(model_id=llm.model_id, api_key=bedrock.api_key)


class ProviderHolder:
    """Process-scoped home of the adapter.

    The first configuration seen wins. Asking again with a different
    configuration returns the existing adapter and logs a warning.
    """

    def __init__(
        self,
        factory: Callable[[ProviderConfig], ProviderAdapter] = create_service,
    ) -> None:
        self._factory = factory
        self._adapter: ProviderAdapter | None = None
        self._fingerprint: tuple[str, str, str] | None = None

    @property
    def is_configured(self) -> bool:
        return self._adapter is not None

    def get(self, config: ProviderConfig) -> ProviderAdapter:
        if self._adapter is None:
            self._adapter = self._factory(config)
            self._fingerprint = config.fingerprint()
            logger.info(
                "LLM provider configured: %s (model=%s)",
                self._adapter.name,
                config.model_id,
            )
            return self._adapter

        if config.fingerprint() != self._fingerprint:
            logger.warning(
                "Ignoring new provider configuration for model %s; %s is already in use",
                config.model_id,
                self._adapter.name,
            )
        return self._adapter


__all__ = [
    "BEDROCK",
    "GEMINI",
    "GROQ",
    "OLLAMA",
    "ProviderFamily",
    "ProviderHolder",
    "build_provider_config",
    "create_service",
    "resolve_family",
]
