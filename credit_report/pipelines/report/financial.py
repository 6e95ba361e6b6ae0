"""Deterministic financial-health metrics computed straight from the ledger.

No model is involved: totals are sums over credit/debit transactions filtered
by category, and every ratio is zero when its denominator is zero. Ratios are
fractions (``0.25`` means 25%), not percentages.
"""

from __future__ import annotations

import logging
from typing import Iterable, Literal, Optional

from .models import CamelModel, TransactionData

logger = logging.getLogger(__name__)

FIXED_EXPENSE_CATEGORIES = ("Housing", "Transportation", "Insurance", "Utilities")
VARIABLE_EXPENSE_CATEGORIES = ("Food", "Entertainment", "Shopping", "Miscellaneous")
DEBT_CATEGORIES = ("Loan Payment", "Credit Card", "Mortgage")
ASSET_CATEGORIES = ("Savings", "Investment", "Property", "Other Assets")
LIABILITY_CATEGORIES = DEBT_CATEGORIES + ("Other Debts",)
CREDIT_LIMIT_CATEGORY = "Credit Limit"
EMERGENCY_FUND_CATEGORY = "Savings"
EMERGENCY_FUND_MONTHS = 6


class FinancialMetrics(CamelModel):
    monthly_income: float = 0.0
    monthly_expenses: float = 0.0
    fixed_expenses: float = 0.0
    variable_expenses: float = 0.0
    debt_payments: float = 0.0
    net_worth: float = 0.0
    debt_to_income_ratio: float = 0.0
    savings_rate: float = 0.0
    credit_utilization: float = 0.0
    emergency_fund_ratio: float = 0.0


def _normalize(category: Optional[str]) -> str:
    return (category or "").strip().casefold()


class FinancialAnalyzer:
    """Sum the ledger by direction and category.

    Category names match case-insensitively, so ``housing`` and ``Housing``
    land in the same bucket.
    """

    def __init__(self, data: TransactionData) -> None:
        self._transactions = data.transactions

    def _sum(
        self,
        kind: Optional[Literal["credit", "debit"]],
        categories: Optional[Iterable[str]] = None,
    ) -> float:
        wanted = None if categories is None else {_normalize(name) for name in categories}
        return sum(
            item.amount
            for item in self._transactions
            if (kind is None or item.type == kind)
            and (wanted is None or _normalize(item.category) in wanted)
        )

    def analyze(self) -> FinancialMetrics:
        monthly_income = self._sum("credit")
        monthly_expenses = self._sum("debit")
        debt_payments = self._sum("debit", DEBT_CATEGORIES)
        assets = self._sum("credit", ASSET_CATEGORIES)
        liabilities = self._sum("debit", LIABILITY_CATEGORIES)
        credit_limit = self._sum(None, (CREDIT_LIMIT_CATEGORY,))
        emergency_fund = self._sum("credit", (EMERGENCY_FUND_CATEGORY,))

        metrics = FinancialMetrics(
            monthly_income=monthly_income,
            monthly_expenses=monthly_expenses,
            fixed_expenses=self._sum("debit", FIXED_EXPENSE_CATEGORIES),
            variable_expenses=self._sum("debit", VARIABLE_EXPENSE_CATEGORIES),
            debt_payments=debt_payments,
            net_worth=assets - liabilities,
            debt_to_income_ratio=debt_payments / monthly_income if monthly_income > 0 else 0.0,
            savings_rate=(
                (monthly_income - monthly_expenses) / monthly_income if monthly_income > 0 else 0.0
            ),
            credit_utilization=debt_payments / credit_limit if credit_limit > 0 else 0.0,
            emergency_fund_ratio=(
                emergency_fund / (monthly_expenses * EMERGENCY_FUND_MONTHS)
                if monthly_expenses > 0
                else 0.0
            ),
        )
        logger.debug(
            "Computed financial metrics over %s transactions (income=%s, expenses=%s)",
            len(self._transactions),
            monthly_income,
            monthly_expenses,
        )
        return metrics


def financial_metrics(data: TransactionData) -> FinancialMetrics:
    return FinancialAnalyzer(data).analyze()


__all__ = [
    "ASSET_CATEGORIES",
    "DEBT_CATEGORIES",
    "FIXED_EXPENSE_CATEGORIES",
    "FinancialAnalyzer",
    "FinancialMetrics",
    "LIABILITY_CATEGORIES",
    "VARIABLE_EXPENSE_CATEGORIES",
    "financial_metrics",
]
