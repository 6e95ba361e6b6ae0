"""Pydantic models for the report inputs and the composite credit report.

Every field carries a zero-value default so a report assembled from partial
stage output is still complete. Serialization uses camelCase aliases, which
is also the shape persisted in the blob store.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PersonalInfo(CamelModel):
    name: str = ""
    ic_no: str = ""
    date_of_birth: str = ""
    nationality: str = ""
    address: str = ""

    model_config = ConfigDict(extra="allow")


class Transaction(CamelModel):
    date: str
    amount: float
    description: str = ""
    type: Literal["credit", "debit"]
    category: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class TransactionData(CamelModel):
    transactions: list[Transaction] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")


class AnalysisSection(CamelModel):
    section: str
    confidence: float
    reasoning: str = ""


class ScoreFactors(CamelModel):
    payment_history: float = 0.0
    outstanding_debt: float = 0.0
    credit_utilization: float = 0.0
    credit_history_length: float = 0.0
    recent_inquiries: float = 0.0


RiskCategory = Literal["Low", "Medium", "High"]


class CreditScore(CamelModel):
    score: float = 0
    factors: ScoreFactors = Field(default_factory=ScoreFactors)
    risk_category: RiskCategory = "Medium"


class Snapshot(CamelModel):
    id_verification: bool = False
    bankruptcy_status: bool = False
    active_legal_records: int = 0
    has_legal_records: bool = False
    special_attention_accounts: int = 0
    has_dishonoured_cheques: bool = False
    outstanding_facilities: int = 0
    credit_applications_12_months: int = Field(default=0, alias="creditApplications12Months")
    has_trade_referees: bool = False


class CcrisSummary(CamelModel):
    outstanding_credit: float = 0
    special_attention_accounts: int = 0
    credit_applications: int = 0


class CreditFacility(CamelModel):
    status: str = ""
    capacity: str = ""
    lender_type: str = ""
    facility_type: str = ""
    outstanding_balance: float = 0
    limit: float = 0
    repayment_term: str = ""
    collateral_type: str = ""
    conduct_of_account: str = ""
    legal_status: str = ""


class BankingHistory(CamelModel):
    ccris_summary: CcrisSummary = Field(default_factory=CcrisSummary)
    facilities: list[CreditFacility] = Field(default_factory=list)
    earliest_facility: str = ""
    secured_facilities: int = 0
    unsecured_facilities: int = 0


class Directorship(CamelModel):
    company_name: str = ""
    incorporation_date: str = ""
    position: str = ""
    appointed_date: str = ""
    resigned_date: Optional[str] = None
    profit_after_tax: Optional[float] = None
    profitable_status: Optional[bool] = None
    shareholding: Optional[float] = None


class LegalRecord(CamelModel):
    case_number: str = ""
    court: str = ""
    filing_date: str = ""
    status: str = ""
    capacity: Literal["personal", "non-personal"] = "personal"
    type: Literal["defendant", "plaintiff"] = "defendant"
    description: str = ""


class LegalCases(CamelModel):
    as_defendant: list[LegalRecord] = Field(default_factory=list)
    as_plaintiff: list[LegalRecord] = Field(default_factory=list)


class LitigationIndex(CamelModel):
    index: float = 0
    active_cases: int = 0
    resolved_cases: int = 0
    total_claims: float = 0
    risk_level: RiskCategory = "Low"
    explanation: str = "No litigation history found."


class TradeReferee(CamelModel):
    company_name: str = ""
    relationship: str = ""
    credit_limit: float = 0
    payment_behavior: str = ""
    years_of_relationship: float = 0


class Assessment(CamelModel):
    """Stage output that has no slot in the classic report layout."""

    credit_rating: str = ""
    risk_level: str = ""
    credit_limit: Optional[float] = None
    approval_odds: Optional[float] = None
    risk_factors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    spending_patterns: list[str] = Field(default_factory=list)
    risk_indicators: list[str] = Field(default_factory=list)


class CompositeReport(CamelModel):
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    analysis: list[AnalysisSection] = Field(default_factory=list)
    score: CreditScore = Field(default_factory=CreditScore)
    snapshot: Snapshot = Field(default_factory=Snapshot)
    banking_history: BankingHistory = Field(default_factory=BankingHistory)
    directorships: list[Directorship] = Field(default_factory=list)
    legal_cases: LegalCases = Field(default_factory=LegalCases)
    litigation_index: LitigationIndex = Field(default_factory=LitigationIndex)
    trade_referees: list[TradeReferee] = Field(default_factory=list)
    assessment: Assessment = Field(default_factory=Assessment)
    report_date: str = ""
    is_verified: bool = False
    confidence: float = 0.0

    def to_json_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


__all__ = [
    "AnalysisSection",
    "Assessment",
    "BankingHistory",
    "CcrisSummary",
    "CompositeReport",
    "CreditFacility",
    "CreditScore",
    "Directorship",
    "LegalCases",
    "LegalRecord",
    "LitigationIndex",
    "PersonalInfo",
    "RiskCategory",
    "ScoreFactors",
    "Snapshot",
    "TradeReferee",
    "Transaction",
    "TransactionData",
]
