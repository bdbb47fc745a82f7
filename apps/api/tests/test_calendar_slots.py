"""
Tests for calendar slot indexing (day, week and month grids).

Pure functions: appointments are built in memory.
"""
from datetime import date, datetime

import pytest

from apps.clinical.scheduling import (
    CalendarAppointment,
    CalendarView,
    Granularity,
    GridConfig,
    SlotKey,
    index_appointments,
    visible_days,
)


def appt(id, start, end, status='scheduled'):
    return CalendarAppointment(id=id, start=start, end=end, patient_name=f'Patient {id}',
                               type='cleaning', status=status)


MONDAY = date(2024, 1, 8)


class TestVisibleDays:

    def test_day_view(self):
        assert visible_days(CalendarView('day', date(2024, 1, 10))) == [date(2024, 1, 10)]

    def test_week_view_starts_on_monday(self):
        days = visible_days(CalendarView('week', date(2024, 1, 10)))

        assert days[0] == MONDAY
        assert days[-1] == date(2024, 1, 14)
        assert len(days) == 7

    def test_month_view_pads_to_full_weeks(self):
        # February 2024 starts on a Thursday and ends on a Thursday
        days = visible_days(CalendarView('month', date(2024, 2, 15)))

        assert days[0] == date(2024, 1, 29)
        assert days[-1] == date(2024, 3, 3)
        assert len(days) % 7 == 0

    def test_december_month_view(self):
        days = visible_days(CalendarView('month', date(2024, 12, 1)))

        assert days[0] == date(2024, 11, 25)
        assert days[-1] == date(2025, 1, 5)

    def test_unknown_granularity_rejected(self):
        with pytest.raises(ValueError):
            CalendarView('year', MONDAY)


class TestWeekGrid:

    def test_empty_week_has_every_slot(self):
        index = index_appointments([], CalendarView(Granularity.WEEK, MONDAY))

        assert len(index) == 7 * 11
        assert all(entries == [] for entries in index.slots.values())
        assert SlotKey(MONDAY, 8) in index.slots
        assert SlotKey(date(2024, 1, 14), 18) in index.slots

    def test_appointment_spans_its_hour_cells(self):
        visit = appt(1, datetime(2024, 1, 8, 9, 30), datetime(2024, 1, 8, 11, 0))

        index = index_appointments([visit], CalendarView('week', MONDAY))

        nine = index[SlotKey(MONDAY, 9)]
        ten = index[SlotKey(MONDAY, 10)]
        assert [p.appointment for p in nine] == [visit]
        assert [p.appointment for p in ten] == [visit]
        assert index[SlotKey(MONDAY, 11)] == []
        assert index[SlotKey(MONDAY, 8)] == []

    def test_block_geometry(self):
        visit = appt(1, datetime(2024, 1, 8, 9, 30), datetime(2024, 1, 8, 11, 0))

        index = index_appointments([visit], CalendarView('week', MONDAY))

        positioned = index[SlotKey(MONDAY, 9)][0]
        assert positioned.offset == pytest.approx(40.0)
        assert positioned.height == pytest.approx(120.0)
        assert positioned.is_anchor
        assert not index[SlotKey(MONDAY, 10)][0].is_anchor

    def test_short_appointment_gets_min_height(self):
        visit = appt(1, datetime(2024, 1, 8, 9, 0), datetime(2024, 1, 8, 9, 5))

        index = index_appointments([visit], CalendarView('week', MONDAY))

        assert index[SlotKey(MONDAY, 9)][0].height == pytest.approx(10.0)

    def test_end_on_hour_boundary_is_exclusive(self):
        visit = appt(1, datetime(2024, 1, 8, 9, 0), datetime(2024, 1, 8, 10, 0))

        index = index_appointments([visit], CalendarView('week', MONDAY))

        assert len(index[SlotKey(MONDAY, 9)]) == 1
        assert index[SlotKey(MONDAY, 10)] == []

    def test_outside_window_not_indexed(self):
        early = appt(1, datetime(2024, 1, 8, 6, 0), datetime(2024, 1, 8, 7, 0))
        late = appt(2, datetime(2024, 1, 8, 19, 0), datetime(2024, 1, 8, 20, 0))

        index = index_appointments([early, late], CalendarView('week', MONDAY))

        assert all(entries == [] for entries in index.slots.values())

    def test_appointment_outside_range_ignored(self):
        next_week = appt(1, datetime(2024, 1, 15, 9, 0), datetime(2024, 1, 15, 10, 0))

        index = index_appointments([next_week], CalendarView('week', MONDAY))

        assert all(entries == [] for entries in index.slots.values())

    def test_overnight_appointment_anchors_on_each_day(self):
        overnight = appt(1, datetime(2024, 1, 8, 18, 30), datetime(2024, 1, 9, 8, 30))

        index = index_appointments([overnight], CalendarView('week', MONDAY))

        assert index[SlotKey(MONDAY, 18)][0].is_anchor
        assert index[SlotKey(date(2024, 1, 9), 8)][0].is_anchor

    def test_overlapping_appointments_get_columns(self):
        first = appt('a', datetime(2024, 1, 8, 9, 0), datetime(2024, 1, 8, 10, 0))
        second = appt('b', datetime(2024, 1, 8, 9, 15), datetime(2024, 1, 8, 9, 45))

        index = index_appointments([second, first], CalendarView('week', MONDAY))

        cell = index[SlotKey(MONDAY, 9)]
        assert [p.appointment.id for p in cell] == ['a', 'b']
        assert [p.column for p in cell] == [0, 1]
        assert all(p.column_count == 2 for p in cell)

    def test_start_ties_broken_by_end_then_id(self):
        longer = appt('z', datetime(2024, 1, 8, 9, 0), datetime(2024, 1, 8, 10, 0))
        shorter = appt('y', datetime(2024, 1, 8, 9, 0), datetime(2024, 1, 8, 9, 30))
        twin = appt('x', datetime(2024, 1, 8, 9, 0), datetime(2024, 1, 8, 9, 30))

        index = index_appointments([longer, shorter, twin], CalendarView('week', MONDAY))

        assert [p.appointment.id for p in index[SlotKey(MONDAY, 9)]] == ['x', 'y', 'z']

    def test_cancelled_appointments_are_still_placed(self):
        cancelled = appt(1, datetime(2024, 1, 8, 9, 0), datetime(2024, 1, 8, 10, 0), status='cancelled')

        index = index_appointments([cancelled], CalendarView('week', MONDAY))

        assert len(index[SlotKey(MONDAY, 9)]) == 1

    def test_idempotent(self):
        appointments = [
            appt(1, datetime(2024, 1, 8, 9, 30), datetime(2024, 1, 8, 11, 0)),
            appt(2, datetime(2024, 1, 10, 14, 0), datetime(2024, 1, 10, 15, 0)),
        ]
        view = CalendarView('week', MONDAY)

        assert index_appointments(appointments, view).slots == index_appointments(appointments, view).slots

    def test_none_appointments_is_precondition_violation(self):
        with pytest.raises(AssertionError):
            index_appointments(None, CalendarView('week', MONDAY))


class TestDayGrid:

    def test_day_view_has_one_row_per_hour(self):
        index = index_appointments([], CalendarView('day', MONDAY))

        assert [key.label() for key in index.slots] == [
            f'2024-01-08T{hour:02d}:00' for hour in range(8, 19)
        ]

    def test_custom_window(self):
        config = GridConfig(first_hour=9, last_hour=12, cell_height=60)
        visit = appt(1, datetime(2024, 1, 8, 9, 15), datetime(2024, 1, 8, 9, 45))

        index = index_appointments([visit], CalendarView('day', MONDAY), config)

        assert len(index) == 4
        positioned = index[SlotKey(MONDAY, 9)][0]
        assert positioned.offset == pytest.approx(15.0)
        assert positioned.height == pytest.approx(30.0)

    def test_invalid_window_rejected(self):
        with pytest.raises(ValueError):
            GridConfig(first_hour=18, last_hour=8)


class TestMonthGrid:

    def test_slots_cover_padded_weeks(self):
        index = index_appointments([], CalendarView('month', date(2024, 1, 15)))

        # 2024-01-01 is a Monday; the 31st is a Wednesday
        assert index.range_start == date(2024, 1, 1)
        assert index.range_end == date(2024, 2, 4)
        assert len(index) == 35
        assert not index.summaries[date(2024, 2, 1)].in_month
        assert index.summaries[date(2024, 1, 31)].in_month

    def test_appointments_bucketed_by_start_day(self):
        visit = appt(1, datetime(2024, 1, 10, 17, 0), datetime(2024, 1, 11, 9, 0))

        index = index_appointments([visit], CalendarView('month', date(2024, 1, 1)))

        assert index[SlotKey(date(2024, 1, 10))] == [visit]
        assert index[SlotKey(date(2024, 1, 11))] == []

    def test_month_cap_and_hidden_count(self):
        day = date(2024, 1, 10)
        appointments = [
            appt(i, datetime(2024, 1, 10, 8 + i, 0), datetime(2024, 1, 10, 8 + i, 30),
                 status='cancelled' if i == 4 else 'scheduled')
            for i in range(5)
        ]

        index = index_appointments(appointments, CalendarView('month', day))

        summary = index.summaries[day]
        assert len(summary.appointments) == 3
        assert [a.id for a in summary.appointments] == [0, 1, 2]
        assert summary.hidden_count == 2
        assert summary.total_count == 5
        assert summary.active_count == 4
        assert len(index[SlotKey(day)]) == 5

    def test_under_cap_hides_nothing(self):
        day = date(2024, 1, 10)
        visit = appt(1, datetime(2024, 1, 10, 9, 0), datetime(2024, 1, 10, 10, 0))

        index = index_appointments([visit], CalendarView('month', day))

        assert index.summaries[day].hidden_count == 0

    def test_slot_labels_are_dates(self):
        index = index_appointments([], CalendarView('month', date(2024, 1, 1)))

        assert SlotKey(date(2024, 1, 1)).label() == '2024-01-01'
        assert all(key.hour is None for key in index.slots)
