"""Report generation endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status

from credit_report.controllers.dependencies import ReportPipelineDep
from credit_report.pipelines.report import ReportPipeline, financial_metrics
from credit_report.views import (
    CompositeReport,
    ErrorResponse,
    FinancialMetrics,
    GenerateReportRequest,
    PipelineStageResponse,
    TransactionData,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

_ERROR_RESPONSES = {
    500: {"model": ErrorResponse, "description": "Provider misconfigured"},
    502: {"model": ErrorResponse, "description": "Provider failed or returned malformed output"},
    504: {"model": ErrorResponse, "description": "Provider timed out"},
}


PIPELINE_STAGES = tuple(ReportPipeline.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""


@router.get("/stages", response_model=list[PipelineStageResponse])
async def list_stages() -> list[PipelineStageResponse]:
    return [
        PipelineStageResponse(
            order=stage.order,
            name=stage.name,
            state=stage.state.value,
            summary=stage.summary,
        )
        for stage in PIPELINE_STAGES
    ]


@router.get("/financial-metrics", response_model=FinancialMetrics, responses=_ERROR_RESPONSES)
async def get_financial_metrics(pipeline: ReportPipelineDep) -> FinancialMetrics:
    """Ledger metrics for the seed transactions; never calls the model."""

    return await pipeline.financial_metrics_from_documents()


@router.post("/financial-metrics", response_model=FinancialMetrics)
async def compute_financial_metrics(payload: TransactionData) -> FinancialMetrics:
    return financial_metrics(payload)


@router.get("", response_model=CompositeReport, responses=_ERROR_RESPONSES)
async def get_report(pipeline: ReportPipelineDep) -> CompositeReport:
    """Return the cached report, generating it from the seed documents if needed."""

    return await pipeline.generate_from_documents()


@router.post("", response_model=CompositeReport, responses=_ERROR_RESPONSES)
async def create_report(
    payload: GenerateReportRequest,
    pipeline: ReportPipelineDep,
) -> CompositeReport:
    return await pipeline.generate(payload.personal_info, payload.transactions)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(pipeline: ReportPipelineDep) -> Response:
    await pipeline.invalidate()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/regenerate", response_model=CompositeReport, responses=_ERROR_RESPONSES)
async def regenerate_report(pipeline: ReportPipelineDep) -> CompositeReport:
    """Drop the cached report and build a fresh one from the seed documents."""

    logger.info("Regenerating report %s", pipeline.report_key)
    await pipeline.invalidate()
    return await pipeline.generate_from_documents()
