"""
Time gap parsing and calendar advancement.

A treatment visit records the wait before the next visit as free text
("2 weeks", "10 days", "1 month"). This module turns that text into a
structured TimeGap and applies it to calendar dates.

Parsing is lenient: anything that is not exactly "<amount> <unit>" yields
None, which callers treat as "advance by zero".
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta


DAYS = 'days'
WEEKS = 'weeks'
MONTHS = 'months'
YEARS = 'years'

UNITS = (DAYS, WEEKS, MONTHS, YEARS)


@dataclass(frozen=True)
class TimeGap:
    """A positive amount of calendar units (always stored in plural form)."""

    amount: int
    unit: str

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f'Time gap amount must be positive, got {self.amount}')
        if self.unit not in UNITS:
            raise ValueError(
                f'Unknown time gap unit "{self.unit}". Options: {", ".join(UNITS)}'
            )

    @classmethod
    def from_parts(cls, amount, unit: str) -> 'TimeGap':
        """
        Build a gap from structured input (e.g. a form with amount + unit).

        Unit may be singular or plural, any case.

        Raises:
            ValueError: amount is not a positive integer or unit is unknown
        """
        if isinstance(amount, bool):
            raise ValueError('Time gap amount must be an integer')
        try:
            amount = int(amount)
        except (TypeError, ValueError) as e:
            raise ValueError(f'Time gap amount must be an integer, got {amount!r}') from e
        return cls(amount=amount, unit=_normalize_unit(str(unit)))

    def __str__(self):
        if self.amount == 1:
            return f'1 {self.unit[:-1]}'
        return f'{self.amount} {self.unit}'


def _normalize_unit(token: str) -> str:
    token = token.strip().lower()
    if not token.endswith('s'):
        token += 's'
    return token


def parse_time_gap(text: Optional[str]) -> Optional[TimeGap]:
    """
    Parse a free-text gap such as "2 weeks" or "1 Month".

    Returns:
        TimeGap, or None when the text is missing or unparseable.
        Never raises.
    """
    if not text or not isinstance(text, str):
        return None

    tokens = text.lower().split()
    if len(tokens) != 2:
        return None

    amount_token, unit_token = tokens

    # Base-10 digits only: int() alone would also accept "+2" and "2_0"
    if not amount_token.isdecimal() or not amount_token.isascii():
        return None

    amount = int(amount_token, 10)
    unit = _normalize_unit(unit_token)

    if amount <= 0 or unit not in UNITS:
        return None

    return TimeGap(amount=amount, unit=unit)


def advance(value: date, gap: Optional[TimeGap]) -> date:
    """
    Move a calendar date forward by a gap.

    Months and years use calendar addition and clamp to the last day of the
    target month (Jan 31 + 1 month -> Feb 29 in a leap year).
    """
    if gap is None:
        return value

    if gap.unit == DAYS:
        return value + timedelta(days=gap.amount)
    if gap.unit == WEEKS:
        return value + timedelta(days=gap.amount * 7)
    if gap.unit == MONTHS:
        return value + relativedelta(months=gap.amount)
    return value + relativedelta(years=gap.amount)
