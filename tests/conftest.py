"""Shared fakes for the report service tests."""

from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Iterable, Union

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from credit_report.services.ai.types import ModelRequest, ModelResponse, TokenUsage  # noqa: E402
from credit_report.services.documents import FetchError  # noqa: E402

PERSONAL_INFO = {
    "name": "Aisyah binti Rahman",
    "icNo": "900101-14-5678",
    "dateOfBirth": "1990-01-01",
    "nationality": "Malaysian",
    "address": "12 Jalan Ampang, Kuala Lumpur",
}

TRANSACTIONS = {
    "transactions": [
        {"date": "2024-01-03", "amount": 5200.0, "description": "Salary", "type": "credit"},
        {
            "date": "2024-01-09",
            "amount": 1800.0,
            "description": "Rent",
            "type": "debit",
            "category": "housing",
        },
    ]
}

PERSONAL_STAGE = json.dumps(
    {
        "personalSummary": "Salaried professional with a stable address.",
        "riskFactors": ["Single income source"],
        "recommendations": ["Build an emergency fund"],
    }
)

FINANCIAL_STAGE = json.dumps(
    {
        "financialSummary": "Income covers fixed costs comfortably.",
        "spendingPatterns": ["Rent is the largest expense"],
        "riskIndicators": [],
    }
)

CREDIT_STAGE = json.dumps(
    {
        "creditScore": 720,
        "creditRating": "A",
        "riskLevel": "LOW",
        "creditLimit": 15000,
        "approvalOdds": 82.5,
    }
)

Scripted = Union[str, BaseException]


class ScriptedAdapter:
    """Adapter returning queued texts (or raising queued errors) in order."""

    name = "fake"

    def __init__(self, responses: Iterable[Scripted] = ()) -> None:
        self._responses = list(responses)
        self.requests: list[ModelRequest] = []

    async def generate_text(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError("Unexpected backend call")
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return ModelResponse(text=item, usage=TokenUsage(10, 20, 30))


class DictFetcher:
    """Document fetcher serving bytes from a dict; unknown paths raise ``FetchError(404)``."""

    def __init__(self, documents: dict[str, bytes]) -> None:
        self._documents = documents
        self.fetched: list[str] = []

    async def fetch(self, path: str) -> bytes:
        self.fetched.append(path)
        if path not in self._documents:
            raise FetchError(f"Document not found: {path}", status_code=404)
        return self._documents[path]


@pytest.fixture
def stage_responses() -> list[str]:
    return [PERSONAL_STAGE, FINANCIAL_STAGE, CREDIT_STAGE]


@pytest.fixture
def seed_documents() -> dict[str, bytes]:
    return {
        "ctos-care-demo-v1/bad/personal_info.json": json.dumps(PERSONAL_INFO).encode(),
        "ctos-care-demo-v1/bad/transactions.json": json.dumps(TRANSACTIONS).encode(),
    }
