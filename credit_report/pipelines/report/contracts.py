"""Shape contracts for the JSON each report stage must return.

Both the personal and financial stages tolerate list fields given as a single
string; numeric fields of the credit assessment must be real JSON numbers
(numeric strings and booleans are rejected).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, ValidationError, field_validator

from credit_report.services.ai.errors import MalformedOutputError
from credit_report.services.ai.sanitizer import EMPTY_OBJECT

logger = logging.getLogger(__name__)

StrictNumber = Union[StrictInt, StrictFloat]


def _coerce_str_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [
            item if isinstance(item, str) else json.dumps(item, ensure_ascii=False)
            for item in value
        ]
    return value


class StageContract(BaseModel):
    model_config = {"populate_by_name": True, "extra": "ignore"}


class PersonalSummary(StageContract):
    personal_summary: StrictStr = Field(alias="personalSummary")
    risk_factors: list[str] = Field(default_factory=list, alias="riskFactors")
    recommendations: list[str] = Field(default_factory=list)

    @field_validator("risk_factors", "recommendations", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> Any:
        return _coerce_str_list(value)


class FinancialAnalysis(StageContract):
    financial_summary: StrictStr = Field(alias="financialSummary")
    spending_patterns: list[str] = Field(default_factory=list, alias="spendingPatterns")
    risk_indicators: list[str] = Field(default_factory=list, alias="riskIndicators")

    @field_validator("spending_patterns", "risk_indicators", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> Any:
        return _coerce_str_list(value)


class CreditAssessment(StageContract):
    credit_score: StrictNumber = Field(alias="creditScore")
    risk_level: StrictStr = Field(alias="riskLevel")
    credit_rating: StrictStr = Field(default="", alias="creditRating")
    credit_limit: Optional[StrictNumber] = Field(default=None, alias="creditLimit")
    approval_odds: Optional[StrictNumber] = Field(default=None, alias="approvalOdds")


ContractT = TypeVar("ContractT", bound=StageContract)


def parse_stage_output(
    contract: type[ContractT],
    sanitized: str,
    *,
    stage: str,
    provider_name: str,
) -> ContractT:
    """Validate sanitized stage output against ``contract``.

    A JSON array whose first element is an object is unwrapped to that object.
    Anything else that is not an object, including the empty-object sentinel,
    raises ``MalformedOutputError``.
    """

    if not sanitized or sanitized == EMPTY_OBJECT:
        raise MalformedOutputError(f"{stage} stage returned no usable JSON", provider_name)

    try:
        data: Any = json.loads(sanitized)
    except ValueError as exc:
        raise MalformedOutputError(f"{stage} stage returned invalid JSON", provider_name, cause=exc) from exc

    if isinstance(data, list):
        if data and isinstance(data[0], dict):
            logger.debug("%s stage returned an array; using its first object", stage)
            data = data[0]
        else:
            raise MalformedOutputError(f"{stage} stage returned an array without objects", provider_name)
    if not isinstance(data, dict) or not data:
        raise MalformedOutputError(f"{stage} stage returned an empty or non-object payload", provider_name)

    try:
        return contract.model_validate(data)
    except ValidationError as exc:
        missing = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
        raise MalformedOutputError(
            f"{stage} stage output failed validation ({missing})",
            provider_name,
            cause=exc,
        ) from exc


__all__ = [
    "CreditAssessment",
    "FinancialAnalysis",
    "PersonalSummary",
    "StageContract",
    "parse_stage_output",
]
