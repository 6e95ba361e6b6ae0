"""Process-scoped collaborators shared by every request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from credit_report.pipelines.report import ReportPipeline
from credit_report.services.ai.factory import ProviderHolder, build_provider_config
from credit_report.services.ai.types import ProviderAdapter
from credit_report.services.chat import ChatService
from credit_report.services.documents import DocumentFetcher, build_document_fetcher
from credit_report.services.storage import BlobStore, build_blob_store

from .settings import Settings, settings


@dataclass
class ServiceContainer:
    """Owns the provider holder, the report store and the document fetcher."""

    settings: Settings
    holder: ProviderHolder
    store: BlobStore
    fetcher: Optional[DocumentFetcher] = None

    def provider(self) -> ProviderAdapter:
        """Build or reuse the process-wide adapter. Pipelines call this lazily."""

        config = build_provider_config(self.settings.llm, self.settings.bedrock)
        return self.holder.get(config)

    def report_pipeline(self) -> ReportPipeline:
        documents = self.settings.documents
        return ReportPipeline(
            self.provider,
            self.store,
            fetcher=self.fetcher,
            report_key=self.settings.storage.report_key,
            personal_info_path=documents.personal_info_path,
            transactions_path=documents.transactions_path,
        )

    def chat_service(self) -> ChatService:
        return ChatService(self.provider, self.store, self.settings.storage.report_key)


def build_container(app_settings: Settings = settings) -> ServiceContainer:
    return ServiceContainer(
        settings=app_settings,
        holder=ProviderHolder(),
        store=build_blob_store(app_settings.storage),
        fetcher=build_document_fetcher(app_settings.documents),
    )


__all__ = ["ServiceContainer", "build_container"]
