"""Fetch the seed documents (personal info + transactions) as opaque bytes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import httpx
from fastapi.concurrency import run_in_threadpool

from credit_report.config.settings import DocumentsConfig

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a document cannot be retrieved."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class DocumentFetcher(Protocol):
    async def fetch(self, path: str) -> bytes:
        ...


class HttpDocumentFetcher:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, path: str) -> bytes:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.get(url)
        except httpx.RequestError as exc:
            raise FetchError(f"Failed to fetch {path}: {exc}") from exc

        if not response.is_success:
            raise FetchError(
                f"Failed to fetch {path}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        logger.debug("Fetched %s (%s bytes)", path, len(response.content))
        return response.content


class LocalDocumentFetcher:
    """Read documents from a directory; paths may not escape ``root``."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    async def fetch(self, path: str) -> bytes:
        target = (self._root / path.lstrip("/")).resolve()
        if self._root not in target.parents:
            raise FetchError(f"Refusing to read outside document root: {path}", status_code=400)
        if not target.is_file():
            raise FetchError(f"Document not found: {path}", status_code=404)
        try:
            return await run_in_threadpool(target.read_bytes)
        except OSError as exc:
            raise FetchError(f"Failed to read {path}: {exc}", status_code=500) from exc


def build_document_fetcher(config: DocumentsConfig) -> DocumentFetcher:
    if config.base_url:
        return HttpDocumentFetcher(config.base_url, timeout=config.timeout)
    return LocalDocumentFetcher(config.root)


__all__ = [
    "DocumentFetcher",
    "FetchError",
    "HttpDocumentFetcher",
    "LocalDocumentFetcher",
    "build_document_fetcher",
]
