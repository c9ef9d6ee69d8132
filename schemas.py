import datetime as dt
import re
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from models import DEFAULT_CATEGORY_COLOR, BudgetStatus

# Money stays a Decimal in Python and goes over the wire as a JSON number.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
_ISO_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def _iso_date(value):
    """Accept only calendar dates or ``YYYY-MM-DD`` strings."""
    if isinstance(value, dt.datetime):
        raise ValueError("expected a date without a time")
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str) or not _ISO_DATE_RE.fullmatch(value):
        raise ValueError("expected an ISO date string YYYY-MM-DD")
    return dt.date.fromisoformat(value)


IsoDate = Annotated[dt.date, BeforeValidator(_iso_date)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CategoryIn(CamelModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=100)
    monthly_limit: Optional[Money] = Field(
        default=None, ge=0, max_digits=12, decimal_places=2
    )
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)
    description: Optional[str] = None


class CategoryUpdate(CamelModel):
    """Partial update: ``None`` means "leave unchanged"."""

    id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    monthly_limit: Optional[Money] = Field(
        default=None, ge=0, max_digits=12, decimal_places=2
    )
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)
    description: Optional[str] = None


class CategoryOut(CamelModel):
    id: int
    name: str
    monthly_limit: Money
    color: str = DEFAULT_CATEGORY_COLOR
    description: str = ""


class ExpenseIn(CamelModel):
    amount: Money = Field(..., max_digits=12, decimal_places=2)
    description: str
    date: IsoDate
    category_id: int


class ExpenseUpdate(CamelModel):
    """Partial update: ``None`` means "leave unchanged"."""

    amount: Optional[Money] = Field(default=None, max_digits=12, decimal_places=2)
    description: Optional[str] = None
    date: Optional[IsoDate] = None
    category_id: Optional[int] = None


class ExpenseOut(CamelModel):
    id: int
    amount: Money
    description: str
    date: dt.date
    category_id: int
    category_name: str
    category_color: str


class CategorySummaryOut(CamelModel):
    category_id: int
    category_name: str
    category_color: str
    spent: Money
    limit: Money
    percent_used: float
    status: BudgetStatus


class MonthlySummaryOut(CamelModel):
    year: int
    month: int
    total_spent: Money
    total_limit: Money
    category_breakdown: list[CategorySummaryOut]
