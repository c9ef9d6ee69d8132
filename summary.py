"""Monthly budget summary: per-category spend measured against monthly limits."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from models import BudgetStatus, Category, Expense
from periods import Month

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")

WARNING_THRESHOLD = 80
EXCEEDED_THRESHOLD = 100


@dataclass(frozen=True)
class CategorySummary:
    category_id: int
    category_name: str
    category_color: str
    spent: Decimal
    limit: Decimal
    percent_used: float
    status: BudgetStatus


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    total_spent: Decimal
    total_limit: Decimal
    category_breakdown: list[CategorySummary]


def _has_limit(limit: Optional[Decimal]) -> bool:
    return limit is not None and limit != ZERO


def percent_used(spent: Decimal, limit: Optional[Decimal]) -> float:
    """Share of ``limit`` consumed by ``spent``, in percent, rounded half-up to cents.

    A missing or zero limit means the category is not tracked and yields 0.0.
    """
    if not _has_limit(limit):
        return 0.0
    ratio = (spent * HUNDRED / limit).quantize(CENTS, rounding=ROUND_HALF_UP)
    return float(ratio)


def budget_status(percent: float, limit: Optional[Decimal]) -> BudgetStatus:
    if not _has_limit(limit):
        return BudgetStatus.ok
    if percent > EXCEEDED_THRESHOLD:
        return BudgetStatus.exceeded
    if percent >= WARNING_THRESHOLD:
        return BudgetStatus.warning
    return BudgetStatus.ok


def spent_by_category(expenses: Iterable[Expense]) -> dict[int, Decimal]:
    totals: dict[int, Decimal] = {}
    for expense in expenses:
        totals[expense.category_id] = (
            totals.get(expense.category_id, ZERO) + expense.amount
        )
    return totals


def build_monthly_summary(
    month: Month,
    categories: Sequence[Category],
    expenses: Iterable[Expense],
) -> MonthlySummary:
    """Join every category with the month's expenses.

    All categories get a breakdown entry, in the order given. Expenses dated
    outside ``month`` are ignored.
    """
    in_month = [e for e in expenses if month.contains(e.date)]
    spent_map = spent_by_category(in_month)

    total_spent = sum((e.amount for e in in_month), ZERO)
    total_limit = sum((c.monthly_limit or ZERO for c in categories), ZERO)

    breakdown: list[CategorySummary] = []
    for category in categories:
        spent = spent_map.get(category.id, ZERO)
        limit = category.monthly_limit if category.monthly_limit is not None else ZERO
        percent = percent_used(spent, limit)
        breakdown.append(
            CategorySummary(
                category_id=category.id,
                category_name=category.name,
                category_color=category.color,
                spent=spent,
                limit=limit,
                percent_used=percent,
                status=budget_status(percent, limit),
            )
        )

    return MonthlySummary(
        year=month.year,
        month=month.month,
        total_spent=total_spent,
        total_limit=total_limit,
        category_breakdown=breakdown,
    )
