import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

_MONTH_RE = re.compile(r"^([0-9]{4})-([0-9]{2})$")


def _month_end(year: int, month: int) -> date:
    if month == 12:
        return date(year, 12, 31)
    return date(year, month + 1, 1) - date.resolution


def in_month(day: date, year: int, month: int) -> bool:
    return day.year == year and day.month == month


@dataclass(frozen=True)
class Month:
    year: int
    month: int

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return _month_end(self.year, self.month)

    def contains(self, day: date) -> bool:
        return in_month(day, self.year, self.month)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @classmethod
    def of(cls, day: date) -> "Month":
        return cls(day.year, day.month)


def parse_month(raw: str) -> Month:
    """Parse a strict ``YYYY-MM`` string."""
    match = _MONTH_RE.fullmatch(raw)
    if not match:
        raise ValueError(f"Invalid month {raw!r}, expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month {raw!r}, month must be 01-12")
    if year < 1:
        raise ValueError(f"Invalid month {raw!r}, year must be 0001 or later")
    return Month(year, month)


def resolve_month(raw: Optional[str], *, today: Optional[date] = None) -> Month:
    if raw is None or not raw.strip():
        return Month.of(today or date.today())
    return parse_month(raw)
