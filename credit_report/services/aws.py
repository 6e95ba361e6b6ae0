"""Shared AWS helpers for service clients."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Optional

import boto3

from credit_report.config.settings import settings


def create_boto3_client(
    service_name: str,
    *,
    region_name: str | None = None,
    aws_access_key_id: str | None = None,
    aws_secret_access_key: str | None = None,
) -> Any:
    """Instantiate a boto3 client, falling back to the default credential chain."""

    region = region_name or settings.bedrock.region
    client_kwargs: dict[str, Any] = {"region_name": region}
    if aws_access_key_id and aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = aws_access_key_id
        client_kwargs["aws_secret_access_key"] = aws_secret_access_key
    return boto3.client(service_name, **client_kwargs)


def decode_access_key_pair(secret_value: Optional[str]) -> tuple[str, str] | None:
    """Decode a base64 ``access:secret`` pair; plain text pairs are accepted too."""

    if not secret_value or not secret_value.strip():
        return None

    try:
        decoded_bytes = base64.b64decode(secret_value.strip(), validate=True)
    except (binascii.Error, ValueError):
        decoded_bytes = secret_value.strip().encode("utf-8", "ignore")

    filtered = "".join(chr(b) for b in decoded_bytes if 31 < b < 127)
    if ":" not in filtered:
        return None
    access_key, secret_key = filtered.split(":", 1)
    if not access_key or not secret_key:
        return None
    return access_key, secret_key


__all__ = ["create_boto3_client", "decode_access_key_pair"]
