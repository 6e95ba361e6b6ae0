"""Provider abstraction, resilient invocation and structured-output recovery."""

from .errors import (
    ConfigurationError,
    ExhaustedRetriesError,
    MalformedOutputError,
    MissingCredentialError,
    ProviderError,
    ProviderTimeoutError,
    ReportGenerationError,
    TransportError,
    UnsupportedModelError,
)
from .factory import ProviderHolder, build_provider_config, create_service, resolve_family
from .invoker import ResilientInvoker
from .sanitizer import sanitize
from .types import (
    ModelRequest,
    ModelResponse,
    ProviderAdapter,
    ProviderConfig,
    SystemPromptKind,
    TokenUsage,
)

__all__ = [
    "ConfigurationError",
    "ExhaustedRetriesError",
    "MalformedOutputError",
    "MissingCredentialError",
    "ModelRequest",
    "ModelResponse",
    "ProviderAdapter",
    "ProviderConfig",
    "ProviderError",
    "ProviderHolder",
    "ProviderTimeoutError",
    "ReportGenerationError",
    "ResilientInvoker",
    "SystemPromptKind",
    "TokenUsage",
    "TransportError",
    "UnsupportedModelError",
    "build_provider_config",
    "create_service",
    "resolve_family",
    "sanitize",
]
