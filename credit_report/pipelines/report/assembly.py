"""Merge validated stage output with the report defaults."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .contracts import CreditAssessment, FinancialAnalysis, PersonalSummary
from .models import (
    AnalysisSection,
    Assessment,
    CompositeReport,
    CreditScore,
    PersonalInfo,
    RiskCategory,
)

PERSONAL_CONFIDENCE = 0.9
FINANCIAL_CONFIDENCE = 0.85

_RISK_CATEGORIES: dict[str, RiskCategory] = {
    "low": "Low",
    "medium": "Medium",
    "moderate": "Medium",
    "high": "High",
}


def normalize_risk_category(value: str) -> RiskCategory:
    """Map free-form risk levels (``LOW``, ``medium risk``...) onto Low/Medium/High."""

    cleaned = (value or "").strip().lower()
    if cleaned in _RISK_CATEGORIES:
        return _RISK_CATEGORIES[cleaned]
    for token, category in _RISK_CATEGORIES.items():
        if token in cleaned:
            return category
    return "Medium"


def assemble_report(
    personal_info: PersonalInfo,
    personal: PersonalSummary,
    financial: FinancialAnalysis,
    credit: CreditAssessment,
    *,
    now: Optional[datetime] = None,
) -> CompositeReport:
    analysis = [
        AnalysisSection(
            section="Personal",
            confidence=PERSONAL_CONFIDENCE,
            reasoning=personal.personal_summary,
        ),
        AnalysisSection(
            section="Financial",
            confidence=FINANCIAL_CONFIDENCE,
            reasoning=financial.financial_summary,
        ),
    ]
    timestamp = (now or datetime.now(timezone.utc)).isoformat()

    return CompositeReport(
        personal_info=personal_info,
        analysis=analysis,
        score=CreditScore(
            score=credit.credit_score,
            risk_category=normalize_risk_category(credit.risk_level),
        ),
        assessment=Assessment(
            credit_rating=credit.credit_rating,
            risk_level=credit.risk_level,
            credit_limit=credit.credit_limit,
            approval_odds=credit.approval_odds,
            risk_factors=personal.risk_factors,
            recommendations=personal.recommendations,
            spending_patterns=financial.spending_patterns,
            risk_indicators=financial.risk_indicators,
        ),
        report_date=timestamp,
        confidence=min(section.confidence for section in analysis),
    )


__all__ = ["assemble_report", "normalize_risk_category"]
