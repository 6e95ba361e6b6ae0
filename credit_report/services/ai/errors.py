"""Tagged error hierarchy shared by the provider layer and the report pipeline.

Every failure that reaches a caller of the report pipeline is a
``ProviderError`` (or subclass) carrying the provider name, a readable message
and, optionally, the wrapped cause. Callers branch on the subclass:

* ``ConfigurationError`` – bad or missing credentials; fatal, never retried.
* ``TransportError`` – network/HTTP failure; retried by the invoker only.
* ``MalformedOutputError`` – unusable model output; aborts the report.
"""

from __future__ import annotations


class ProviderError(RuntimeError):
    """Base error raised by adapters, the factory, the invoker and the pipeline."""

    code = "provider_error"

    def __init__(
        self,
        message: str,
        provider_name: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider_name = provider_name
        self.cause = cause

    def __str__(self) -> str:
        return f"[{self.provider_name}] {self.message}"


class ConfigurationError(ProviderError):
    """Raised when a provider cannot be configured from the given settings."""

    code = "configuration_error"


class UnsupportedModelError(ConfigurationError):
    """Raised when a model identifier matches no known provider family."""

    code = "unsupported_model"

    def __init__(self, model_id: str, provider_name: str = "factory") -> None:
        super().__init__(f"Unsupported model: {model_id}", provider_name)
        self.model_id = model_id


class MissingCredentialError(ConfigurationError):
    """Raised when a required credential field is absent or blank."""

    code = "missing_credential"

    def __init__(self, field: str, provider_name: str, model_id: str = "") -> None:
        target = f" for model {model_id}" if model_id else ""
        super().__init__(f"{field} is required{target}", provider_name)
        self.field = field


class TransportError(ProviderError):
    """Raised for network failures and non-success HTTP responses."""

    code = "transport_error"

    def __init__(
        self,
        message: str,
        provider_name: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, provider_name, cause)
        self.status_code = status_code


class ProviderTimeoutError(TransportError):
    """Raised when the final attempt exceeded its per-attempt deadline."""

    code = "timeout"


class ExhaustedRetriesError(TransportError):
    """Raised after every allowed attempt failed."""

    code = "exhausted_retries"

    def __init__(
        self,
        message: str,
        provider_name: str,
        attempts: int,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, provider_name, cause, status_code)
        self.attempts = attempts


class MalformedOutputError(ProviderError):
    """Raised when sanitized model output is empty or fails its shape contract."""

    code = "malformed_output"


class ReportGenerationError(ProviderError):
    """Wraps non-provider failures (document fetch, unexpected errors) in the pipeline."""

    code = "report_generation_error"


__all__ = [
    "ProviderError",
    "ConfigurationError",
    "UnsupportedModelError",
    "MissingCredentialError",
    "TransportError",
    "ProviderTimeoutError",
    "ExhaustedRetriesError",
    "MalformedOutputError",
    "ReportGenerationError",
]
