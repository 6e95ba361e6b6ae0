"""Helpers shared by the adapter implementations (no shared state)."""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import SecretStr

from ..errors import MissingCredentialError, ProviderError


def truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def require_text(value: Optional[str], field: str, provider_name: str, model_id: str = "") -> str:
    """Return the stripped value or raise ``MissingCredentialError`` naming ``field``."""

    cleaned = (value or "").strip()
    if not cleaned:
        raise MissingCredentialError(field, provider_name, model_id)
    return cleaned


def require_secret(value: SecretStr | None, field: str, provider_name: str, model_id: str = "") -> str:
    raw = value.get_secret_value() if value is not None else None
    return require_text(raw, field, provider_name, model_id)


def decode_json_body(response: httpx.Response, provider_name: str) -> dict[str, Any]:
    """Parse the provider's JSON envelope, failing with a tagged error."""

    try:
        data = response.json()
    except ValueError as exc:
        raise ProviderError(
            f"Invalid JSON envelope from {provider_name}: {truncate(response.text, 200)}",
            provider_name,
            cause=exc,
        ) from exc
    if not isinstance(data, dict):
        raise ProviderError(f"Unexpected response shape from {provider_name}", provider_name)
    return data


def drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _shape_error(provider_name: str, label: str, value: Any) -> ProviderError:
    return ProviderError(
        f"Unexpected response shape from {provider_name}: {label} is {type(value).__name__}",
        provider_name,
    )


def expect_mapping(value: Any, label: str, provider_name: str) -> dict[str, Any]:
    """Return ``value`` as a dict; ``None`` counts as empty."""

    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _shape_error(provider_name, label, value)
    return value


def expect_list(value: Any, label: str, provider_name: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _shape_error(provider_name, label, value)
    return value


def expect_text(value: Any, label: str, provider_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _shape_error(provider_name, label, value)
    return value


def token_count(value: Any) -> int:
    """Best-effort token counter; anything non-numeric counts as zero."""

    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def usage_mapping(value: Any) -> dict[str, Any]:
    # Usage is informational, so a malformed block is dropped rather than fatal.
    return value if isinstance(value, dict) else {}


__all__ = [
    "decode_json_body",
    "drop_none",
    "expect_list",
    "expect_mapping",
    "expect_text",
    "require_secret",
    "require_text",
    "token_count",
    "truncate",
    "usage_mapping",
]
