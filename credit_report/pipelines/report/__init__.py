"""Credit report pipeline package.

Modules are organised by the order in which a report is produced:

1. `prompts` – render the stage prompts from the inputs and prior output.
2. `contracts` – validate the sanitized JSON each stage returns.
3. `assembly` – merge stage output with the report defaults.
4. `flow` – stage order and the per-run state machine.
5. `financial` – deterministic ledger metrics (no model call).
6. `pipeline` – cache lookup, the three sequential stages, persistence.

The HTTP controllers and the chat service import from here.
"""

from .assembly import assemble_report, normalize_risk_category
from .contracts import CreditAssessment, FinancialAnalysis, PersonalSummary, parse_stage_output
from .financial import FinancialAnalyzer, FinancialMetrics, financial_metrics
from .flow import STAGES, PipelineStage, PipelineState, ReportRun, describe, stage_for
from .models import CompositeReport, PersonalInfo, Transaction, TransactionData
from .pipeline import (
    DEFAULT_PERSONAL_INFO_PATH,
    DEFAULT_REPORT_KEY,
    DEFAULT_TRANSACTIONS_PATH,
    ReportPipeline,
)

__all__ = [
    "CompositeReport",
    "CreditAssessment",
    "DEFAULT_PERSONAL_INFO_PATH",
    "DEFAULT_REPORT_KEY",
    "DEFAULT_TRANSACTIONS_PATH",
    "FinancialAnalysis",
    "FinancialAnalyzer",
    "FinancialMetrics",
    "PersonalInfo",
    "PersonalSummary",
    "PipelineStage",
    "PipelineState",
    "ReportPipeline",
    "ReportRun",
    "STAGES",
    "Transaction",
    "TransactionData",
    "assemble_report",
    "describe",
    "financial_metrics",
    "normalize_risk_category",
    "parse_stage_output",
    "stage_for",
]
