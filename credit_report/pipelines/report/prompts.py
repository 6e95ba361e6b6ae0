"""Prompt templates for the three report stages."""

from __future__ import annotations

import json
from typing import Any, Mapping


def _dump(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def personal_summary_prompt(personal_info: Mapping[str, Any]) -> str:
    return (
        "Generate a comprehensive personal summary based on this information:\n"
        f"{_dump(personal_info)}\n\n"
        "Return a JSON object with these fields:\n"
        "{\n"
        '  "personalSummary": "detailed summary of the person",\n'
        '  "riskFactors": ["list of risk factors"],\n'
        '  "recommendations": ["list of recommendations"]\n'
        "}"
    )


def financial_analysis_prompt(transactions: Mapping[str, Any]) -> str:
    return (
        "Analyze these financial transactions:\n"
        f"{_dump(transactions)}\n\n"
        "Return a JSON object with these fields:\n"
        "{\n"
        '  "financialSummary": "detailed analysis of financial health",\n'
        '  "spendingPatterns": ["key spending patterns"],\n'
        '  "riskIndicators": ["financial risk indicators"]\n'
        "}"
    )


def credit_assessment_prompt(personal_summary: str, financial_summary: str) -> str:
    return (
        "Based on this information:\n"
        f"Personal Summary: {personal_summary}\n"
        f"Financial Analysis: {financial_summary}\n\n"
        "Return a JSON object with these fields:\n"
        "{\n"
        '  "creditScore": number between 300-850,\n'
        '  "creditRating": "AAA" to "D" rating,\n'
        '  "riskLevel": "LOW", "MEDIUM", or "HIGH",\n'
        '  "creditLimit": recommended credit limit in USD,\n'
        '  "approvalOdds": approval probability percentage\n'
        "}"
    )


__all__ = ["credit_assessment_prompt", "financial_analysis_prompt", "personal_summary_prompt"]
