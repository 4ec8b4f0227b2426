from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Mapping

from paycal.period_resolver import PayPeriod
from paycal.records import TransactionRecord, parse_transactions

ZERO = Decimal("0")


@dataclass(frozen=True)
class PeriodSummary:
    income: Decimal
    expenses: Decimal
    remaining: Decimal
    utilization: Decimal


def summarize_period(
    transactions: Iterable[TransactionRecord | Mapping[str, Any]],
    period: PayPeriod,
) -> PeriodSummary:
    """Totals for the recorded transactions dated inside a pay period.

    Only real records count; projected pay dates are not money in hand.
    """
    filtered = [
        txn
        for txn in parse_transactions(transactions)
        if period.start_date <= txn.date <= period.end_date
    ]
    income = _sum_income(filtered)
    expenses = _sum_expenses(filtered)
    utilization = expenses / income if income > ZERO else ZERO
    return PeriodSummary(
        income=income,
        expenses=expenses,
        remaining=income - expenses,
        utilization=utilization,
    )


def _sum_expenses(transactions: List[TransactionRecord]) -> Decimal:
    total = ZERO
    for txn in transactions:
        if not txn.is_expense:
            continue
        total += _coerce_amount(txn.amount)
    return total


def _sum_income(transactions: List[TransactionRecord]) -> Decimal:
    total = ZERO
    for txn in transactions:
        if not txn.is_income:
            continue
        total += _coerce_amount(txn.amount)
    return total


def _coerce_amount(amount: Decimal) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))
