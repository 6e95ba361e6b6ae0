"""Three-stage report generation with a cache in front of it."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from credit_report.services.ai.errors import ProviderError, ReportGenerationError
from credit_report.services.ai.sanitizer import sanitize
from credit_report.services.ai.types import (
    ModelRequest,
    ProviderAdapter,
    ProviderSource,
    SystemPromptKind,
    resolve_adapter,
)
from credit_report.services.documents import DocumentFetcher
from credit_report.services.storage import BlobStore, StorageError
from credit_report.telemetry import increment_report

from .assembly import assemble_report
from .contracts import ContractT, CreditAssessment, FinancialAnalysis, PersonalSummary, parse_stage_output
from .financial import FinancialMetrics, financial_metrics
from .flow import STAGES, PipelineStage, PipelineState, ReportRun, stage_for
from .flow import describe as describe_stages
from .models import CompositeReport, PersonalInfo, TransactionData
from .prompts import credit_assessment_prompt, financial_analysis_prompt, personal_summary_prompt

logger = logging.getLogger(__name__)

DEFAULT_REPORT_KEY = "ctosReport"
DEFAULT_PERSONAL_INFO_PATH = "ctos-care-demo-v1/bad/personal_info.json"
DEFAULT_TRANSACTIONS_PATH = "ctos-care-demo-v1/bad/transactions.json"

STAGE_TEMPERATURE = 0.1
STAGE_MAX_TOKENS = 4000
STAGE_TOP_P = 0.95

PersonalInput = Union[PersonalInfo, Mapping[str, Any]]
TransactionsInput = Union[TransactionData, Mapping[str, Any]]


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


class ReportPipeline:
    """Generate, cache and invalidate the composite credit report.

    The adapter and the store are injected so one process-wide instance of
    each can be shared. ``service`` may also be a zero-argument factory; it is
    only called on a cache miss, so a cached report is served even when the
    provider is misconfigured. Stages run strictly in order; the pipeline never
    retries a stage, so a malformed stage output aborts the whole run.
    """

    def __init__(
        self,
        service: ProviderSource,
        store: BlobStore,
        *,
        fetcher: Optional[DocumentFetcher] = None,
        report_key: str = DEFAULT_REPORT_KEY,
        personal_info_path: str = DEFAULT_PERSONAL_INFO_PATH,
        transactions_path: str = DEFAULT_TRANSACTIONS_PATH,
    ) -> None:
        self._source = service
        self._service: Optional[ProviderAdapter] = None
        self._store = store
        self._fetcher = fetcher
        self.report_key = report_key
        self._personal_info_path = personal_info_path
        self._transactions_path = transactions_path
        self.last_run: Optional[ReportRun] = None

    @property
    def provider_name(self) -> str:
        service = self._service if self._service is not None else self._source
        return getattr(service, "name", "pipeline")

    @classmethod
    def describe(cls) -> tuple[PipelineStage, ...]:
        """Ordered stage metadata, exposed for debugging and the API."""

        return tuple(describe_stages())

    def _adapter(self) -> ProviderAdapter:
        if self._service is None:
            self._service = resolve_adapter(self._source)
        return self._service

    async def get_cached(self) -> Optional[CompositeReport]:
        try:
            blob = await self._store.get(self.report_key)
        except StorageError as exc:
            logger.warning("Unable to read cached report %s: %s", self.report_key, exc)
            return None
        if blob is None:
            return None
        try:
            return CompositeReport.model_validate_json(blob)
        except (ValidationError, ValueError) as exc:
            logger.warning("Ignoring unreadable cached report %s: %s", self.report_key, exc)
            return None

    async def invalidate(self) -> None:
        """Remove the cached report; other keys in the store are left alone."""

        await self._store.delete(self.report_key)
        logger.info("Cached report %s invalidated", self.report_key)

    async def generate(
        self,
        personal_info: PersonalInput,
        transactions: TransactionsInput,
    ) -> CompositeReport:
        cached = await self.get_cached()
        if cached is not None:
            logger.info("Returning cached report %s", self.report_key)
            increment_report("cached")
            return cached
        return await self._run(personal_info, transactions)

    async def generate_from_documents(self) -> CompositeReport:
        cached = await self.get_cached()
        if cached is not None:
            logger.info("Returning cached report %s", self.report_key)
            increment_report("cached")
            return cached

        if self._fetcher is None:
            increment_report("failed")
            raise ReportGenerationError("No document fetcher configured", self.provider_name)
        try:
            personal_info = json.loads(await self._fetcher.fetch(self._personal_info_path))
            transactions = json.loads(await self._fetcher.fetch(self._transactions_path))
        except Exception as exc:
            increment_report("failed")
            logger.error("Failed to load report documents: %s", exc)
            raise ReportGenerationError(
                f"Failed to load report documents: {exc}",
                self.provider_name,
                cause=exc,
            ) from exc
        return await self._run(personal_info, transactions)

    async def financial_metrics_from_documents(self) -> FinancialMetrics:
        """Compute ledger metrics from the seed transactions; no model call is made."""

        if self._fetcher is None:
            raise ReportGenerationError("No document fetcher configured", self.provider_name)
        try:
            raw = json.loads(await self._fetcher.fetch(self._transactions_path))
            ledger = TransactionData.model_validate(raw)
        except Exception as exc:
            logger.error("Failed to load transactions for metrics: %s", exc)
            raise ReportGenerationError(
                f"Failed to load transactions: {exc}",
                self.provider_name,
                cause=exc,
            ) from exc
        return financial_metrics(ledger)

    async def _run(
        self,
        personal_info: PersonalInput,
        transactions: TransactionsInput,
    ) -> CompositeReport:
        run = ReportRun()
        self.last_run = run
        started = time.perf_counter()

        try:
            self._adapter()
            logger.info("Starting report generation with %s", self.provider_name)
            person = (
                personal_info
                if isinstance(personal_info, PersonalInfo)
                else PersonalInfo.model_validate(personal_info)
            )
            ledger = (
                transactions
                if isinstance(transactions, TransactionData)
                else TransactionData.model_validate(transactions)
            )

            run.advance()
            personal = await self._run_stage(
                PersonalSummary,
                personal_summary_prompt(person.model_dump(by_alias=True)),
                run,
            )

            run.advance()
            financial = await self._run_stage(
                FinancialAnalysis,
                financial_analysis_prompt(ledger.model_dump(by_alias=True, exclude_none=True)),
                run,
            )

            run.advance()
            credit = await self._run_stage(
                CreditAssessment,
                credit_assessment_prompt(personal.personal_summary, financial.financial_summary),
                run,
            )

            report = assemble_report(person, personal, financial, credit)
            run.advance()
        except ProviderError as exc:
            run.fail(exc)
            increment_report("failed")
            logger.error("Report generation failed in %s: %s", _failed_stage(run), exc)
            raise
        except Exception as exc:
            run.fail(exc)
            increment_report("failed")
            logger.exception("Unexpected error during report generation")
            raise ReportGenerationError(
                f"Report generation failed: {exc}",
                self.provider_name,
                cause=exc,
            ) from exc

        increment_report("success")
        logger.info(
            "Report assembled in %.2fs (score=%s, risk=%s)",
            time.perf_counter() - started,
            report.score.score,
            report.score.risk_category,
        )
        await self._persist(report)
        return report

    async def _run_stage(self, contract: type[ContractT], prompt: str, run: ReportRun) -> ContractT:
        step = stage_for(run.state)
        stage = step.name.lower()
        logger.info("Stage %s/%s %s: %s", step.order, len(STAGES), step.name, step.summary)
        request = ModelRequest(
            prompt=prompt,
            system_prompt_kind=SystemPromptKind.REPORT_EXTRACTION,
            temperature=STAGE_TEMPERATURE,
            max_tokens=STAGE_MAX_TOKENS,
            top_p=STAGE_TOP_P,
        )
        response = await self._adapter().generate_text(request)
        cleaned = sanitize(response.text)
        logger.debug("%s stage sanitized output: %s", stage, _truncate(cleaned))
        result = parse_stage_output(contract, cleaned, stage=stage, provider_name=self.provider_name)
        logger.info(
            "%s stage complete (tokens=%s)",
            stage.capitalize(),
            response.usage.total_tokens,
        )
        return result

    async def _persist(self, report: CompositeReport) -> None:
        try:
            await self._store.set(self.report_key, report.to_json_bytes())
        except Exception:
            # A report that cannot be cached is still returned to the caller.
            logger.exception("Failed to cache report %s", self.report_key)


def _failed_stage(run: ReportRun) -> str:
    # history[-2] is the state the run was in when it failed
    previous = run.history[-2] if len(run.history) > 1 else PipelineState.IDLE
    return previous.value


__all__ = [
    "DEFAULT_PERSONAL_INFO_PATH",
    "DEFAULT_REPORT_KEY",
    "DEFAULT_TRANSACTIONS_PATH",
    "ReportPipeline",
]
