from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from database import Base
from models import BudgetStatus, Category, Expense
from periods import Month
from schemas import CategoryIn, ExpenseIn
from services import CategoryService, ExpenseService, SummaryService
from summary import budget_status, build_monthly_summary, percent_used


def _category(category_id: int, name: str, limit: str) -> Category:
    return Category(
        id=category_id, name=name, monthly_limit=Decimal(limit), color="#22c55e"
    )


def _expense(category_id: int, amount: str, on: date) -> Expense:
    return Expense(
        category_id=category_id, amount=Decimal(amount), description="x", date=on
    )


@pytest.mark.parametrize(
    "spent, limit, expected",
    [
        ("400", "500", 80.0),
        ("500", "500", 100.0),
        ("550", "500", 110.0),
        ("1", "3", 33.33),
        ("2", "3", 66.67),
        ("0.125", "1", 12.5),
        ("0.00005", "1", 0.01),
        ("1000", "0", 0.0),
    ],
)
def test_percent_used_rounds_half_up_to_two_places(spent, limit, expected):
    assert percent_used(Decimal(spent), Decimal(limit)) == expected


def test_percent_used_is_zero_without_limit():
    assert percent_used(Decimal("1000"), None) == 0.0


@pytest.mark.parametrize(
    "percent, status",
    [
        (0.0, BudgetStatus.ok),
        (79.99, BudgetStatus.ok),
        (80.0, BudgetStatus.warning),
        (100.0, BudgetStatus.warning),
        (100.01, BudgetStatus.exceeded),
    ],
)
def test_budget_status_thresholds(percent, status):
    assert budget_status(percent, Decimal("500")) is status


def test_budget_status_is_ok_when_limit_unset():
    assert budget_status(250.0, Decimal("0")) is BudgetStatus.ok
    assert budget_status(250.0, None) is BudgetStatus.ok


def test_build_summary_covers_every_category_and_ignores_other_months():
    categories = [
        _category(1, "Groceries", "500"),
        _category(2, "Rent", "2000"),
        _category(3, "Utilities", "200"),
    ]
    expenses = [
        _expense(1, "150", date(2024, 12, 10)),
        _expense(2, "2000", date(2024, 12, 1)),
        _expense(1, "200", date(2024, 11, 15)),
    ]

    summary = build_monthly_summary(Month(2024, 12), categories, expenses)

    assert (summary.year, summary.month) == (2024, 12)
    assert summary.total_spent == Decimal("2150")
    assert summary.total_limit == Decimal("2700")
    by_name = {row.category_name: row for row in summary.category_breakdown}
    assert [row.category_name for row in summary.category_breakdown] == [
        "Groceries",
        "Rent",
        "Utilities",
    ]
    assert by_name["Groceries"].spent == Decimal("150")
    assert by_name["Groceries"].percent_used == 30.0
    assert by_name["Rent"].percent_used == 100.0
    assert by_name["Rent"].status is BudgetStatus.warning
    assert by_name["Utilities"].spent == Decimal("0")
    assert by_name["Utilities"].status is BudgetStatus.ok


def test_build_summary_with_no_data_has_exact_zero_totals():
    summary = build_monthly_summary(Month(2024, 12), [], [])
    assert summary.total_spent == Decimal("0")
    assert summary.total_limit == Decimal("0")
    assert summary.category_breakdown == []


def test_summary_service_totals_match_breakdown() -> None:
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        categories = CategoryService(session)
        food = categories.create(
            CategoryIn(name="Food", monthly_limit=Decimal("300.00"))
        )
        fun = categories.create(CategoryIn(name="Fun", monthly_limit=Decimal("50")))
        categories.create(CategoryIn(name="Untracked"))

        expenses = ExpenseService(session)
        for amount, category in [
            ("10.10", food),
            ("20.20", food),
            ("0.30", fun),
            ("45.55", fun),
        ]:
            expenses.create(
                ExpenseIn(
                    amount=Decimal(amount),
                    description="item",
                    date=date(2025, 1, 12),
                    category_id=category.id,
                )
            )
        expenses.create(
            ExpenseIn(
                amount=Decimal("99.99"),
                description="last year",
                date=date(2024, 12, 31),
                category_id=food.id,
            )
        )

        summary = SummaryService(session).monthly_summary(Month(2025, 1))

        assert len(summary.category_breakdown) == 3
        assert summary.total_spent == sum(
            (row.spent for row in summary.category_breakdown), Decimal("0")
        )
        assert summary.total_limit == sum(
            (row.limit for row in summary.category_breakdown), Decimal("0")
        )
        assert summary.total_spent == Decimal("76.15")
        by_name = {row.category_name: row for row in summary.category_breakdown}
        assert by_name["Food"].spent == Decimal("30.30")
        assert by_name["Food"].percent_used == 10.1
        assert by_name["Fun"].spent == Decimal("45.85")
        assert by_name["Fun"].percent_used == 91.7
        assert by_name["Fun"].status is BudgetStatus.warning
        assert by_name["Untracked"].limit == Decimal("0")
        assert by_name["Untracked"].status is BudgetStatus.ok
