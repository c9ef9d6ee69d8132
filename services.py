from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models import DEFAULT_CATEGORY_COLOR, Category, Expense
from periods import Month
from schemas import CategoryIn, CategoryUpdate, ExpenseIn, ExpenseUpdate
from summary import MonthlySummary, build_monthly_summary

logger = logging.getLogger(__name__)


DEFAULT_CATEGORIES: list[dict[str, object]] = [
    {
        "name": "Groceries",
        "color": "#22c55e",
        "monthly_limit": Decimal("300"),
        "description": "Food and household supplies",
    },
    {
        "name": "Rent",
        "color": "#3b82f6",
        "monthly_limit": Decimal("1200"),
        "description": "Monthly rent or mortgage",
    },
    {
        "name": "Utilities",
        "color": "#f59e0b",
        "monthly_limit": Decimal("150"),
        "description": "Electric, water, gas, internet",
    },
    {
        "name": "Miscellaneous",
        "color": "#6b7280",
        "monthly_limit": Decimal("200"),
        "description": "Other expenses",
    },
    {
        "name": "Personal",
        "color": "#8b5cf6",
        "monthly_limit": Decimal("250"),
        "description": "Personal care and entertainment",
    },
]


class NotFoundError(ValueError):
    pass


class ConflictError(ValueError):
    pass


class CategoryNotFound(ValueError):
    pass


class CategoryService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[Category]:
        return self.session.scalars(select(Category).order_by(Category.id)).all()

    def get(self, category_id: int) -> Category:
        category = self.session.get(Category, category_id)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def exists_by_name(self, name: str) -> bool:
        stmt = select(func.count(Category.id)).where(Category.name == name)
        return (self.session.execute(stmt).scalar_one() or 0) > 0

    def create(self, data: CategoryIn) -> Category:
        if self.exists_by_name(data.name):
            raise ConflictError("Category with this name already exists")
        category = Category(
            name=data.name,
            monthly_limit=(
                data.monthly_limit if data.monthly_limit is not None else Decimal("0")
            ),
            color=data.color if data.color is not None else DEFAULT_CATEGORY_COLOR,
            description=data.description if data.description is not None else "",
        )
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        logger.info(f"category_created: id={category.id} name={category.name}")
        return category

    def update(self, category_id: int, data: CategoryUpdate) -> Category:
        category = self.get(category_id)
        # Name uniqueness is left to the unique index here.
        if data.name is not None:
            category.name = data.name
        if data.monthly_limit is not None:
            category.monthly_limit = data.monthly_limit
        if data.color is not None:
            category.color = data.color
        if data.description is not None:
            category.description = data.description
        self.session.commit()
        self.session.refresh(category)
        logger.info(f"category_updated: id={category.id} name={category.name}")
        return category

    def delete(self, category_id: int) -> None:
        category = self.get(category_id)
        self.session.delete(category)
        self.session.commit()
        logger.info(f"category_deleted: id={category_id}")


class ExpenseService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list(
        self,
        month: Optional[Month] = None,
        category_id: Optional[int] = None,
    ) -> list[Expense]:
        if month is not None:
            return self.between(month.start, month.end, category_id=category_id)
        stmt = select(Expense).order_by(Expense.id)
        if category_id is not None:
            stmt = stmt.where(Expense.category_id == category_id)
        return self.session.scalars(stmt).all()

    def between(
        self, start: date, end: date, *, category_id: Optional[int] = None
    ) -> list[Expense]:
        stmt = (
            select(Expense)
            .where(Expense.date.between(start, end))
            .order_by(Expense.date.desc(), Expense.id.desc())
        )
        if category_id is not None:
            stmt = stmt.where(Expense.category_id == category_id)
        return self.session.scalars(stmt).all()

    def get(self, expense_id: int) -> Expense:
        expense = self.session.get(Expense, expense_id)
        if not expense:
            raise NotFoundError("Expense not found")
        return expense

    def create(self, data: ExpenseIn) -> Expense:
        category = self.session.get(Category, data.category_id)
        if not category:
            raise CategoryNotFound("Category not found")
        expense = Expense(
            amount=data.amount,
            description=data.description,
            date=data.date,
            category=category,
        )
        self.session.add(expense)
        self.session.commit()
        self.session.refresh(expense)
        logger.info(
            f"expense_created: id={expense.id} category_id={category.id} "
            f"date={expense.date.isoformat()} amount={expense.amount}"
        )
        return expense

    def update(self, expense_id: int, data: ExpenseUpdate) -> Expense:
        expense = self.get(expense_id)
        if data.amount is not None:
            expense.amount = data.amount
        if data.description is not None:
            expense.description = data.description
        if data.date is not None:
            expense.date = data.date
        if data.category_id is not None:
            category = self.session.get(Category, data.category_id)
            if category:
                expense.category = category
            else:
                logger.warning(
                    f"expense_update_unknown_category: id={expense_id} "
                    f"category_id={data.category_id} kept={expense.category_id}"
                )
        self.session.commit()
        self.session.refresh(expense)
        logger.info(f"expense_updated: id={expense.id}")
        return expense

    def delete(self, expense_id: int) -> None:
        expense = self.get(expense_id)
        self.session.delete(expense)
        self.session.commit()
        logger.info(f"expense_deleted: id={expense_id}")


class SummaryService:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.categories = CategoryService(session)
        self.expenses = ExpenseService(session)

    def monthly_summary(self, month: Month) -> MonthlySummary:
        categories = self.categories.list_all()
        expenses = self.expenses.list(month)
        return build_monthly_summary(month, categories, expenses)


def seed_default_categories(session: Session) -> int:
    """Insert the default category set when the store has no categories."""
    if session.scalar(select(func.count(Category.id))):
        return 0
    for row in DEFAULT_CATEGORIES:
        session.add(Category(**row))
    session.flush()
    logger.info(f"categories_seeded: count={len(DEFAULT_CATEGORIES)}")
    return len(DEFAULT_CATEGORIES)
