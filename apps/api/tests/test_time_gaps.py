"""
Tests for time gap parsing and date advancement.

Pure functions: no database access.
"""
from datetime import date

import pytest

from apps.clinical.scheduling import TimeGap, advance, parse_time_gap


class TestParseTimeGap:
    """Free-text gap parsing."""

    @pytest.mark.parametrize('text,amount,unit', [
        ('2 weeks', 2, 'weeks'),
        ('1 month', 1, 'months'),
        ('10 days', 10, 'days'),
        ('1 Year', 1, 'years'),
        ('  3   DAYS ', 3, 'days'),
        ('1 day', 1, 'days'),
    ])
    def test_parses_amount_and_unit(self, text, amount, unit):
        gap = parse_time_gap(text)
        assert gap == TimeGap(amount=amount, unit=unit)

    @pytest.mark.parametrize('text', [
        None,
        '',
        '   ',
        'bogus',
        '2',
        'weeks',
        'two weeks',
        '2 fortnights',
        '2 weeks later',
        '1.5 weeks',
        '-1 weeks',
        '+2 weeks',
        '0 days',
        '2_0 days',
        '２ weeks',  # full-width digit
    ])
    def test_unparseable_returns_none(self, text):
        assert parse_time_gap(text) is None

    def test_non_string_returns_none(self):
        assert parse_time_gap(14) is None
        assert parse_time_gap(['2', 'weeks']) is None


class TestTimeGapFromParts:
    """Structured (amount, unit) input from forms."""

    def test_accepts_singular_unit(self):
        assert TimeGap.from_parts(1, 'Week') == TimeGap(1, 'weeks')

    def test_accepts_numeric_string(self):
        assert TimeGap.from_parts('3', 'months') == TimeGap(3, 'months')

    @pytest.mark.parametrize('amount,unit', [
        (0, 'days'),
        (-2, 'weeks'),
        ('abc', 'days'),
        (None, 'days'),
        (True, 'days'),
        (2, 'fortnights'),
    ])
    def test_rejects_invalid_parts(self, amount, unit):
        with pytest.raises(ValueError):
            TimeGap.from_parts(amount, unit)

    def test_canonical_text(self):
        assert str(TimeGap(1, 'weeks')) == '1 week'
        assert str(TimeGap(2, 'weeks')) == '2 weeks'

    def test_canonical_text_parses_back(self):
        gap = TimeGap(1, 'months')
        assert parse_time_gap(str(gap)) == gap


class TestAdvance:
    """Calendar arithmetic."""

    def test_days(self):
        assert advance(date(2024, 1, 1), TimeGap(10, 'days')) == date(2024, 1, 11)

    def test_weeks(self):
        assert advance(date(2024, 1, 1), TimeGap(2, 'weeks')) == date(2024, 1, 15)

    def test_month_end_clamps_in_leap_year(self):
        assert advance(date(2024, 1, 31), TimeGap(1, 'months')) == date(2024, 2, 29)

    def test_month_end_clamps_in_common_year(self):
        assert advance(date(2023, 1, 31), TimeGap(1, 'months')) == date(2023, 2, 28)

    def test_years_from_leap_day(self):
        assert advance(date(2024, 2, 29), TimeGap(1, 'years')) == date(2025, 2, 28)

    def test_none_gap_is_zero_advance(self):
        assert advance(date(2024, 3, 5), None) == date(2024, 3, 5)
