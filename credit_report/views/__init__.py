"""Pydantic schemas used as views in the MVC architecture."""

from .chat import ChatRequest, ChatResponse
from .common import ErrorResponse
from .reports import (
    CompositeReport,
    FinancialMetrics,
    GenerateReportRequest,
    PipelineStageResponse,
    TransactionData,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "CompositeReport",
    "ErrorResponse",
    "FinancialMetrics",
    "GenerateReportRequest",
    "PipelineStageResponse",
    "TransactionData",
]
