"""
Scheduling computations for treatment plans and the appointment calendar.

Pure functions over in-memory value objects; no ORM access.
"""
from .time_gaps import TimeGap, parse_time_gap, advance
from .visit_projection import (
    DISPLAY_DATE_FORMAT,
    ProjectedVisit,
    Visit,
    coerce_date,
    project_visit_dates,
)
from .calendar_slots import (
    CalendarAppointment,
    CalendarIndex,
    CalendarView,
    DaySummary,
    Granularity,
    GridConfig,
    PositionedAppointment,
    SlotKey,
    index_appointments,
    visible_days,
)

__all__ = [
    'TimeGap',
    'parse_time_gap',
    'advance',
    'Visit',
    'ProjectedVisit',
    'project_visit_dates',
    'coerce_date',
    'DISPLAY_DATE_FORMAT',
    'CalendarAppointment',
    'CalendarIndex',
    'CalendarView',
    'DaySummary',
    'Granularity',
    'GridConfig',
    'PositionedAppointment',
    'SlotKey',
    'index_appointments',
    'visible_days',
]
