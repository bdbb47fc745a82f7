"""
Treatment visit date projection.

Given the start date of a treatment plan and its visits in order, estimate
the calendar date of every visit by chaining the recorded time gaps.

The gap stored on a visit is the wait *before the next visit*:

    visit[0]  -> plan start date
    visit[i]  -> date(visit[i-1]) + gap(visit[i-1])

A visit with an explicit scheduled date keeps that date, and the following
visits are projected from it.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Optional, Sequence, Union

from dateutil import parser as date_parser

from .time_gaps import advance, parse_time_gap


DISPLAY_DATE_FORMAT = '%Y-%m-%d'

# Two fill-in dates that differ in year, month, day and weekday. A loose
# string is only accepted when it names the same date against both.
_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 4))

SOURCE_SCHEDULED = 'scheduled'
SOURCE_PROJECTED = 'projected'
SOURCE_UNRESOLVED = 'unresolved'

DateInput = Union[date, datetime, str, None]


@dataclass(frozen=True)
class Visit:
    """One visit of a treatment plan, as needed for projection."""

    visit_number: int
    time_gap: Optional[str] = None
    scheduled_date: Optional[date] = None
    # Opaque caller data (ids, procedures) carried through untouched
    payload: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class ProjectedVisit:
    visit: Visit
    estimated_date: Optional[date]
    display: str
    source: str

    @property
    def is_scheduled(self) -> bool:
        return self.source == SOURCE_SCHEDULED


def coerce_date(value: DateInput) -> Optional[date]:
    """
    Best-effort conversion of a plan start date to a calendar date.

    Accepts date/datetime objects, ISO strings and the looser formats the
    date parser understands ("March 3, 2024"). Returns None when nothing
    sensible can be extracted.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return date_parser.isoparse(text).date()
    except (ValueError, OverflowError):
        pass
    try:
        parsed = {date_parser.parse(text, default=default).date() for default in _PARSE_DEFAULTS}
    except (ValueError, OverflowError, TypeError):
        return None
    # "March" or "Tuesday" would otherwise borrow the missing parts from today
    return parsed.pop() if len(parsed) == 1 else None


def format_date(value: date, date_format: str = DISPLAY_DATE_FORMAT) -> str:
    """Render a date for display; the default format keeps four-digit years."""
    if date_format == DISPLAY_DATE_FORMAT:
        return value.isoformat()
    return value.strftime(date_format)


def project_visit_dates(
    plan_start_date: DateInput,
    visits: Sequence[Visit],
    date_format: str = DISPLAY_DATE_FORMAT,
) -> List[ProjectedVisit]:
    """
    Estimate the date of every visit in a treatment plan.

    Args:
        plan_start_date: plan start (date, datetime or string)
        visits: visits in presentation order; not re-sorted here
        date_format: strftime format for the display string

    Returns:
        list[ProjectedVisit], same length and order as ``visits``.

    If the start date cannot be parsed, visits without an explicit
    scheduled date show the literal start value and have no estimated
    date. Malformed gaps advance by zero. Never raises for bad strings.
    """
    assert visits is not None, 'visits must be a sequence'

    start = coerce_date(plan_start_date)
    fallback_display = '' if plan_start_date is None else str(plan_start_date)

    projected = []
    anchor: Optional[date] = start
    previous_gap = None

    for index, visit in enumerate(visits):
        if index > 0 and anchor is not None:
            try:
                anchor = advance(anchor, previous_gap)
            except (OverflowError, ValueError):
                # Gap runs past date.max; treated like any other unusable gap
                pass

        scheduled = coerce_date(visit.scheduled_date)
        if scheduled is not None:
            anchor = scheduled
            projected.append(ProjectedVisit(
                visit=visit,
                estimated_date=scheduled,
                display=format_date(scheduled, date_format),
                source=SOURCE_SCHEDULED,
            ))
        elif anchor is not None:
            projected.append(ProjectedVisit(
                visit=visit,
                estimated_date=anchor,
                display=format_date(anchor, date_format),
                source=SOURCE_PROJECTED,
            ))
        else:
            projected.append(ProjectedVisit(
                visit=visit,
                estimated_date=None,
                display=fallback_display,
                source=SOURCE_UNRESOLVED,
            ))

        previous_gap = parse_time_gap(visit.time_gap)

    return projected
