"""
Calendar slot indexing for the appointment views.

Buckets already-fetched appointments into the cells of a day, week or month
calendar and computes the vertical geometry of each appointment block.

Day/week grid:
    one slot per (day, hour) for every hour of the display window;
    an appointment is listed in every hour cell its [start, end) overlaps.

Month grid:
    one slot per day of the Monday-start weeks covering the month;
    appointments are listed on the day they start, with a display cap.

All datetimes are read as wall-clock values in the grid's frame. Timezone
conversion happens before indexing.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


ONE_HOUR = timedelta(hours=1)
ONE_DAY = timedelta(days=1)


class Granularity(str, Enum):
    DAY = 'day'
    WEEK = 'week'
    MONTH = 'month'


@dataclass(frozen=True)
class GridConfig:
    """
    Display constants for the calendar grid.

    first_hour..last_hour is inclusive: the default 8..18 gives eleven hourly
    rows, 08:00 through 18:00.
    """

    first_hour: int = 8
    last_hour: int = 18
    cell_height: float = 80
    min_height: float = 10
    month_cap: int = 3

    def __post_init__(self):
        if not 0 <= self.first_hour <= self.last_hour <= 23:
            raise ValueError(
                f'Invalid display window {self.first_hour}..{self.last_hour}'
            )
        if self.cell_height <= 0:
            raise ValueError('cell_height must be positive')
        if self.month_cap < 0:
            raise ValueError('month_cap cannot be negative')

    @property
    def hours(self) -> Tuple[int, ...]:
        return tuple(range(self.first_hour, self.last_hour + 1))


@dataclass(frozen=True)
class CalendarView:
    granularity: Granularity
    anchor: date

    def __post_init__(self):
        object.__setattr__(self, 'granularity', Granularity(self.granularity))
        if isinstance(self.anchor, datetime):
            object.__setattr__(self, 'anchor', self.anchor.date())


@dataclass(frozen=True)
class CalendarAppointment:
    """Appointment as displayed on the calendar. Assumes end > start."""

    id: Any
    start: datetime
    end: datetime
    patient_name: str = ''
    staff_name: str = ''
    type: str = ''
    status: str = 'scheduled'

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60

    @property
    def is_cancelled(self) -> bool:
        return self.status == 'cancelled'


@dataclass(frozen=True)
class SlotKey:
    day: date
    hour: Optional[int] = None

    def label(self) -> str:
        if self.hour is None:
            return self.day.isoformat()
        return f'{self.day.isoformat()}T{self.hour:02d}:00'


@dataclass(frozen=True)
class PositionedAppointment:
    """
    An appointment placed in one hour cell.

    offset/height are in the same unit as GridConfig.cell_height and are the
    same in every cell the appointment spans. column/column_count place
    appointments sharing a cell side by side. is_anchor marks the cell where
    the block is drawn for that day.
    """

    appointment: CalendarAppointment
    offset: float
    height: float
    column: int
    column_count: int
    is_anchor: bool


@dataclass(frozen=True)
class DaySummary:
    day: date
    in_month: bool
    appointments: Tuple[CalendarAppointment, ...]
    hidden_count: int
    total_count: int
    active_count: int


@dataclass
class CalendarIndex:
    view: CalendarView
    config: GridConfig
    days: List[date]
    slots: Dict[SlotKey, list]
    summaries: Dict[date, DaySummary] = field(default_factory=dict)

    @property
    def range_start(self) -> date:
        return self.days[0]

    @property
    def range_end(self) -> date:
        return self.days[-1]

    def __len__(self):
        return len(self.slots)

    def __getitem__(self, key: SlotKey) -> list:
        return self.slots[key]


def _wall_clock(value: datetime) -> datetime:
    return value.replace(tzinfo=None)


def _sort_key(appointment: CalendarAppointment):
    return (_wall_clock(appointment.start), _wall_clock(appointment.end), str(appointment.id))


def week_start(value: date) -> date:
    """Monday of the week containing ``value``."""
    return value - timedelta(days=value.weekday())


def visible_days(view: CalendarView) -> List[date]:
    """
    Days shown by a calendar view.

    - day: the anchor day
    - week: Monday..Sunday containing the anchor
    - month: full Monday-start weeks covering the anchor's month
    """
    anchor = view.anchor

    if view.granularity == Granularity.DAY:
        return [anchor]

    if view.granularity == Granularity.WEEK:
        first = week_start(anchor)
        return [first + timedelta(days=i) for i in range(7)]

    month_first = anchor.replace(day=1)
    if month_first.month == 12:
        next_month_first = month_first.replace(year=month_first.year + 1, month=1)
    else:
        next_month_first = month_first.replace(month=month_first.month + 1)
    month_last = next_month_first - ONE_DAY

    first = week_start(month_first)
    last = week_start(month_last) + timedelta(days=6)
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


def block_geometry(appointment: CalendarAppointment, config: GridConfig) -> Tuple[float, float]:
    """
    Vertical offset and height of an appointment block.

    offset: minutes past the hour of the start, scaled to the cell height
    height: duration scaled to the cell height, never below min_height
    """
    start = _wall_clock(appointment.start)
    offset = (start.minute / 60) * config.cell_height
    height = max(config.min_height, (appointment.duration_minutes / 60) * config.cell_height)
    return offset, height


def index_appointments(
    appointments: Iterable[CalendarAppointment],
    view: CalendarView,
    config: Optional[GridConfig] = None,
) -> CalendarIndex:
    """
    Bucket appointments into the slots of a calendar view.

    Args:
        appointments: appointments to place (not modified)
        view: granularity + anchor date
        config: grid constants, defaults to GridConfig()

    Returns:
        CalendarIndex whose ``slots`` holds every slot of the visible
        range, empty ones included.
    """
    assert appointments is not None, 'appointments must be an iterable'
    config = config or GridConfig()
    ordered = sorted(appointments, key=_sort_key)
    days = visible_days(view)

    if view.granularity == Granularity.MONTH:
        return _index_month(ordered, view, config, days)
    return _index_grid(ordered, view, config, days)


def _index_grid(
    ordered: List[CalendarAppointment],
    view: CalendarView,
    config: GridConfig,
    days: List[date],
) -> CalendarIndex:
    cells: Dict[SlotKey, List[Tuple[CalendarAppointment, bool]]] = {
        SlotKey(day, hour): [] for day in days for hour in config.hours
    }

    for appointment in ordered:
        start = _wall_clock(appointment.start)
        end = _wall_clock(appointment.end)

        for day in days:
            day_start = datetime.combine(day, time.min)
            if start >= day_start + ONE_DAY or end <= day_start:
                continue

            anchored = False
            for hour in config.hours:
                cell_start = day_start + timedelta(hours=hour)
                if start < cell_start + ONE_HOUR and end > cell_start:
                    cells[SlotKey(day, hour)].append((appointment, not anchored))
                    anchored = True

    slots: Dict[SlotKey, List[PositionedAppointment]] = {}
    for key, entries in cells.items():
        column_count = len(entries)
        positioned = []
        for column, (appointment, is_anchor) in enumerate(entries):
            offset, height = block_geometry(appointment, config)
            positioned.append(PositionedAppointment(
                appointment=appointment,
                offset=offset,
                height=height,
                column=column,
                column_count=column_count,
                is_anchor=is_anchor,
            ))
        slots[key] = positioned

    return CalendarIndex(view=view, config=config, days=days, slots=slots)


def _index_month(
    ordered: List[CalendarAppointment],
    view: CalendarView,
    config: GridConfig,
    days: List[date],
) -> CalendarIndex:
    by_day: Dict[date, List[CalendarAppointment]] = {day: [] for day in days}

    for appointment in ordered:
        start_day = _wall_clock(appointment.start).date()
        if start_day in by_day:
            by_day[start_day].append(appointment)

    slots: Dict[SlotKey, List[CalendarAppointment]] = {}
    summaries: Dict[date, DaySummary] = {}

    for day in days:
        day_appointments = by_day[day]
        shown = tuple(day_appointments[:config.month_cap])
        slots[SlotKey(day)] = list(day_appointments)
        summaries[day] = DaySummary(
            day=day,
            in_month=(day.year, day.month) == (view.anchor.year, view.anchor.month),
            appointments=shown,
            hidden_count=len(day_appointments) - len(shown),
            total_count=len(day_appointments),
            active_count=sum(1 for a in day_appointments if not a.is_cancelled),
        )

    return CalendarIndex(view=view, config=config, days=days, slots=slots, summaries=summaries)
