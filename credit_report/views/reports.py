"""Pydantic schemas for report endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from credit_report.pipelines.report.financial import FinancialMetrics
from credit_report.pipelines.report.models import CompositeReport, PersonalInfo, TransactionData


class GenerateReportRequest(BaseModel):
    """Input documents for an on-demand report."""

    personal_info: PersonalInfo = Field(..., alias="personalInfo", description="Applicant identity")
    transactions: TransactionData = Field(..., description="Transaction history")

    model_config = ConfigDict(populate_by_name=True)


class PipelineStageResponse(BaseModel):
    order: int
    name: str
    state: str
    summary: str


__all__ = [
    "CompositeReport",
    "FinancialMetrics",
    "GenerateReportRequest",
    "PipelineStageResponse",
    "TransactionData",
]
