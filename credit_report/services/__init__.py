"""Service layer helpers for external integrations."""

from .chat import ChatMessage, ChatService
from .documents import (
    DocumentFetcher,
    FetchError,
    HttpDocumentFetcher,
    LocalDocumentFetcher,
    build_document_fetcher,
)
from .storage import BlobStore, MemoryBlobStore, S3BlobStore, StorageError, build_blob_store

__all__ = [
    "BlobStore",
    "ChatMessage",
    "ChatService",
    "DocumentFetcher",
    "FetchError",
    "HttpDocumentFetcher",
    "LocalDocumentFetcher",
    "MemoryBlobStore",
    "S3BlobStore",
    "StorageError",
    "build_blob_store",
    "build_document_fetcher",
]
